"""Shared FastAPI dependencies."""

from datetime import datetime, timezone

import httpx
from fastapi import HTTPException, Query, Request

from orion.db.store import SnapshotStore
from orion.models.enums import DataMode
from orion.services.data_mode import resolve_data_mode
from orion.services.onboarding import OnboardingSessions, onboarding_sessions
from orion.services.sourcing import FallbackReason, Sourced


def get_store(request: Request) -> SnapshotStore | None:
    """The process-wide snapshot store, or None in demonstration mode.

    Usage in routes:
        @router.get("/something")
        async def handler(store: SnapshotStore | None = Depends(get_store)):
            ...
    """
    return getattr(request.app.state, "store", None)


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Integration client not ready")
    return client


def require_tenant(tenant: str | None = Query(default=None)) -> str:
    """Tenant id from the query string; missing or blank is a 400, not a 422."""
    if not tenant or not tenant.strip():
        raise HTTPException(status_code=400, detail="Missing tenant parameter")
    return tenant


def get_data_mode(
    request: Request,
    data_mode: str | None = Query(default=None, alias="dataMode"),
) -> DataMode:
    return resolve_data_mode(request.headers.get("X-Data-Mode"), data_mode)


def get_onboarding_sessions() -> OnboardingSessions:
    return onboarding_sessions


def diagnostic_headers(result: Sourced, tenant_id: str | None = None) -> dict[str, str]:
    """Provenance headers attached to every successful read response."""
    headers = {
        "X-Data-Source": result.source,
        "X-Verified-At": datetime.now(timezone.utc).isoformat(),
    }
    if tenant_id:
        headers["X-Tenant-Id"] = tenant_id
    if result.fallback_reason is not None:
        headers["X-Fallback-Reason"] = FallbackReason(result.fallback_reason).value
    return headers


__all__ = [
    "get_store",
    "get_http_client",
    "require_tenant",
    "get_data_mode",
    "get_onboarding_sessions",
    "diagnostic_headers",
]
