"""P6 / SAP sync status per tenant."""

import logging
from datetime import datetime, timedelta, timezone

from orion.models.enums import SyncSource, SyncState
from orion.models.sync import ClientConfig, SyncBatch
from orion.schemas.sync import SyncStatus, SystemSyncStatus
from orion.services.demo_data import demo_sync_status
from orion.services.sourcing import (
    STORE_ERRORS,
    FallbackReason,
    Sourced,
    fallback,
    store_source,
)

logger = logging.getLogger(__name__)


def next_sync_time(cron_expr: str | None, now: datetime | None = None) -> datetime | None:
    """Next scheduled sync. Any configured schedule is treated as hourly."""
    if not cron_expr:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(hours=1)


def _batch_state(batch: SyncBatch | None) -> SyncState:
    if batch is None or not batch.status:
        return SyncState.NEVER
    try:
        return SyncState(batch.status)
    except ValueError:
        logger.warning("Unknown sync batch status %r", batch.status)
        return SyncState.NEVER


def _system_status(configured: bool, batch: SyncBatch | None) -> SystemSyncStatus:
    return SystemSyncStatus(
        connected=configured,
        last_sync=batch.completed_at if batch else None,
        status=_batch_state(batch),
    )


async def get_sync_status(store, tenant_id: str) -> Sourced[SyncStatus]:
    if store is None:
        logger.warning("Sync: store not configured, returning demo data")
        return fallback(demo_sync_status(), FallbackReason.UNCONFIGURED)

    try:
        config = await store.get_client_config(tenant_id)
        if config is None:
            logger.warning("Sync: no client config for tenant %s, returning demo data", tenant_id)
            return fallback(demo_sync_status(), FallbackReason.EMPTY)
        p6_batch = await store.get_latest_batch(tenant_id, SyncSource.P6)
        sap_batch = await store.get_latest_batch(tenant_id, SyncSource.SAP)
    except STORE_ERRORS as exc:
        logger.warning("Sync: status query failed for tenant %s: %s", tenant_id, exc)
        return fallback(demo_sync_status(), FallbackReason.UNAVAILABLE)

    status = SyncStatus(
        p6=_system_status(bool(config.p6_wsdl_url), p6_batch),
        sap=_system_status(bool(config.sap_host), sap_batch),
        next_scheduled=next_sync_time(config.sync_schedule_cron),
    )
    source = ",".join([store.table_name(SyncBatch), store.table_name(ClientConfig)])
    return Sourced(data=status, source=store_source(source))
