"""Earned value metrics per project.

For a tenant, picks the latest snapshot of every project and derives
the full metric set from the stored base values:

    sv   = ev - pv
    cv   = ev - ac
    eac  = bac / cpi          (bac when cpi <= 0)
    etc  = eac - ac
    vac  = bac - eac
    tcpi = (bac - ev) / (bac - ac)   (1 when bac - ac <= 0)

Monetary results are rounded to whole units, indices to two decimals.
"""

import logging
import math
from datetime import date
from typing import Any, Iterable

from orion.models.evm import ProjectSnapshot
from orion.schemas.evm import EVMProjectMetrics
from orion.services.demo_data import DEMO_EVM_PROJECTS
from orion.services.sourcing import (
    STORE_ERRORS,
    FallbackReason,
    Sourced,
    fallback,
    store_source,
)

logger = logging.getLogger(__name__)

UNNAMED_PROJECT = "Unnamed Project"


def round_half_up(value: float, places: int = 0) -> float:
    """Round half toward +infinity, the way the dashboard client rounds."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def round_money(value: float) -> int:
    return int(round_half_up(value))


def _number(value: Any, default: float) -> float:
    return float(value) if value is not None else default


def _snapshot_day(snapshot: Any) -> date:
    return snapshot.snapshot_date or date.min


def latest_per_project(snapshots: Iterable[Any]) -> list[Any]:
    """Keep the snapshot with the greatest date for each project.

    Independent of input order. On equal dates the first row seen wins.
    Projects come back in order of first appearance.
    """
    latest: dict[str, Any] = {}
    for snapshot in snapshots:
        current = latest.get(snapshot.project_id)
        if current is None or _snapshot_day(snapshot) > _snapshot_day(current):
            latest[snapshot.project_id] = snapshot
    return list(latest.values())


def compute_metrics(snapshot: Any) -> EVMProjectMetrics:
    """Derive the EVM metric set for one snapshot row.

    Null money fields count as 0 and null indices as 1 (on plan).
    """
    bac = _number(snapshot.bac, 0.0)
    pv = _number(snapshot.pv, 0.0)
    ev = _number(snapshot.ev, 0.0)
    ac = _number(snapshot.ac, 0.0)
    spi = _number(snapshot.spi, 1.0)
    cpi = _number(snapshot.cpi, 1.0)

    eac = round_money(bac / cpi if cpi > 0 else bac)
    tcpi = (bac - ev) / (bac - ac) if (bac - ac) > 0 else 1.0
    snapshot_date = snapshot.snapshot_date or date.today()

    return EVMProjectMetrics(
        project_id=snapshot.project_id,
        project_name=snapshot.project_name or UNNAMED_PROJECT,
        snapshot_date=snapshot_date.isoformat(),
        percent_complete=_number(snapshot.percent_complete, 0.0),
        bac=bac,
        pv=pv,
        ev=ev,
        ac=ac,
        sv=round_money(ev - pv),
        cv=round_money(ev - ac),
        eac=eac,
        # Both derive from the rounded eac so the three always reconcile
        etc=round_money(eac - ac),
        vac=round_money(bac - eac),
        spi=round_half_up(spi, 2),
        cpi=round_half_up(cpi, 2),
        tcpi=round_half_up(tcpi, 2),
    )


async def get_project_metrics(store, tenant_id: str) -> Sourced[list[EVMProjectMetrics]]:
    """Latest EVM metrics for every project of a tenant.

    Falls back to the demonstration set when the store is not configured,
    cannot be reached, or has no snapshots for the tenant.
    """
    if store is None:
        logger.warning("EVM: store not configured, returning demo data")
        return fallback(list(DEMO_EVM_PROJECTS), FallbackReason.UNCONFIGURED)

    try:
        snapshots = await store.fetch_snapshots(tenant_id)
    except STORE_ERRORS as exc:
        logger.warning("EVM: snapshot query failed for tenant %s: %s", tenant_id, exc)
        return fallback(list(DEMO_EVM_PROJECTS), FallbackReason.UNAVAILABLE)

    if not snapshots:
        logger.warning("EVM: no snapshots for tenant %s, returning demo data", tenant_id)
        return fallback(list(DEMO_EVM_PROJECTS), FallbackReason.EMPTY)

    projects = [compute_metrics(s) for s in latest_per_project(snapshots)]
    logger.info(
        "EVM: %d projects from %d snapshots for tenant %s",
        len(projects), len(snapshots), tenant_id,
    )
    return Sourced(data=projects, source=store_source(store.table_name(ProjectSnapshot)))
