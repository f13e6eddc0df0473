"""Pydantic schemas for the data mode API."""

from pydantic import BaseModel


class DataModeUpdate(BaseModel):
    tenant: str | None = None
    user: str | None = None
    mode: str | None = None
