"""Pydantic schemas for sync status."""

from datetime import datetime

from pydantic import BaseModel, Field

from orion.models.enums import SyncState


class SystemSyncStatus(BaseModel):
    connected: bool
    last_sync: datetime | None = Field(default=None, alias="lastSync")
    status: SyncState = SyncState.NEVER

    model_config = {"populate_by_name": True}


class SyncStatus(BaseModel):
    p6: SystemSyncStatus
    sap: SystemSyncStatus
    next_scheduled: datetime | None = Field(default=None, alias="nextScheduled")

    model_config = {"populate_by_name": True}
