"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from orion.config import Settings, get_settings
from orion.db.store import SnapshotStore
from orion.dependencies import get_store
from orion.services.sourcing import STORE_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    store: SnapshotStore | None = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Report store connectivity without failing on it."""
    if store is None:
        database = "unconfigured"
    else:
        try:
            database = "connected" if await store.ping() else "error"
        except STORE_ERRORS as exc:
            logger.warning("Health: store ping failed: %s", exc)
            database = "error"

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "orion-api",
        "version": settings.version,
        "environment": settings.environment,
        "services": {"database": database},
    }
