"""Portfolio health classification and roll-ups.

Health status from SPI and CPI, first match wins:
  - On Track: SPI >= 0.95 AND CPI >= 0.95
  - Critical: SPI < 0.85 OR CPI < 0.85
  - At Risk: everything else
"""

import logging
from datetime import date
from typing import Any, Iterable

from orion.models.enums import DataMode, HealthStatus
from orion.models.evm import CoreProject
from orion.schemas.portfolio import PortfolioSummary, ProjectHealth
from orion.services.demo_data import DEMO_PORTFOLIO_SUMMARY, DEMO_PROJECT_HEALTH
from orion.services.sourcing import (
    STORE_ERRORS,
    FallbackReason,
    Sourced,
    fallback,
    store_source,
)

logger = logging.getLogger(__name__)

ON_TRACK_THRESHOLD = 0.95
CRITICAL_THRESHOLD = 0.85

DEFAULT_HEALTH_LIMIT = 6


def classify_health(spi: float, cpi: float) -> HealthStatus:
    if spi >= ON_TRACK_THRESHOLD and cpi >= ON_TRACK_THRESHOLD:
        return HealthStatus.ON_TRACK
    if spi < CRITICAL_THRESHOLD or cpi < CRITICAL_THRESHOLD:
        return HealthStatus.CRITICAL
    return HealthStatus.AT_RISK


def _index(value: Any) -> float:
    # Unknown indices count as on plan
    return float(value) if value is not None else 1.0


def summarize(projects: Iterable[Any]) -> PortfolioSummary:
    """Count projects per health bucket."""
    counts = {status: 0 for status in HealthStatus}
    total = 0
    for project in projects:
        counts[classify_health(_index(project.spi), _index(project.cpi))] += 1
        total += 1
    return PortfolioSummary(
        total_projects=total,
        on_track=counts[HealthStatus.ON_TRACK],
        at_risk=counts[HealthStatus.AT_RISK],
        critical=counts[HealthStatus.CRITICAL],
    )


async def get_portfolio_summary(store, tenant_id: str) -> Sourced[PortfolioSummary]:
    """Health bucket counts over the tenant's current projects.

    A configured store with no projects yields an all-zero summary; only an
    unconfigured or failing store falls back to demonstration data.
    """
    if store is None:
        logger.warning("Portfolio: store not configured, returning demo data")
        return fallback(DEMO_PORTFOLIO_SUMMARY, FallbackReason.UNCONFIGURED)

    try:
        projects = await store.fetch_projects(tenant_id)
    except STORE_ERRORS as exc:
        logger.error("Portfolio: project query failed for tenant %s: %s", tenant_id, exc)
        return fallback(DEMO_PORTFOLIO_SUMMARY, FallbackReason.UNAVAILABLE)

    return Sourced(
        data=summarize(projects),
        source=store_source(store.table_name(CoreProject)),
    )


def _iso(value: date | None) -> str:
    return (value or date.today()).isoformat()


def to_project_health(project: Any) -> ProjectHealth:
    spi = _index(project.spi)
    cpi = _index(project.cpi)
    return ProjectHealth(
        id=project.project_id,
        name=project.project_name or "Unnamed Project",
        percent_complete=float(project.percent_complete or 0),
        spi=spi,
        cpi=cpi,
        status=classify_health(spi, cpi),
        planned_finish=_iso(project.planned_finish_date),
        data_date=_iso(project.data_date),
    )


async def get_project_health(
    store,
    tenant_id: str,
    limit: int = DEFAULT_HEALTH_LIMIT,
    mode: DataMode = DataMode.MOCK,
) -> Sourced[list[ProjectHealth]]:
    """Per-project health, lowest SPI first, read from the mode's schema."""
    if store is None:
        logger.warning("Projects: store not configured, returning demo data")
        return fallback(list(DEMO_PROJECT_HEALTH[:limit]), FallbackReason.UNCONFIGURED)

    try:
        projects = await store.fetch_project_health(tenant_id, limit, mode)
    except STORE_ERRORS as exc:
        logger.error("Projects: health query failed for tenant %s: %s", tenant_id, exc)
        return fallback(list(DEMO_PROJECT_HEALTH[:limit]), FallbackReason.UNAVAILABLE)

    return Sourced(
        data=[to_project_health(p) for p in projects],
        source=store_source(store.table_name(CoreProject, mode)),
    )
