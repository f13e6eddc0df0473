"""Pydantic schemas for portfolio summary and project health."""

from pydantic import BaseModel, Field

from orion.models.enums import HealthStatus


class PortfolioSummary(BaseModel):
    total_projects: int = Field(alias="totalProjects")
    on_track: int = Field(alias="onTrack")
    at_risk: int = Field(alias="atRisk")
    critical: int

    model_config = {"populate_by_name": True}


class ProjectHealth(BaseModel):
    id: str
    name: str
    percent_complete: float = Field(alias="percentComplete")
    spi: float
    cpi: float
    status: HealthStatus
    planned_finish: str = Field(alias="plannedFinish")
    data_date: str = Field(alias="dataDate")

    model_config = {"populate_by_name": True}
