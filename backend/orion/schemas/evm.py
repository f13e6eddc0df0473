"""Pydantic schemas for the EVM API."""

from pydantic import BaseModel, Field


class EVMProjectMetrics(BaseModel):
    """Latest snapshot of one project with its derived EVM metrics."""

    project_id: str = Field(alias="projectId")
    project_name: str = Field(alias="projectName")
    snapshot_date: str = Field(alias="snapshotDate")
    percent_complete: float = Field(alias="percentComplete")
    bac: float
    pv: float
    ev: float
    ac: float
    sv: int
    cv: int
    vac: int
    spi: float
    cpi: float
    tcpi: float
    eac: int
    etc: int

    model_config = {"populate_by_name": True}
