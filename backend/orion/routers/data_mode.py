"""Data mode API routes.

Endpoints:
  GET    /api/v1/data-mode?tenant={tenantId}&user={userId}         - Stored preference
  POST   /api/v1/data-mode                                         - Save preference
  GET    /api/v1/data-mode/toggle?tenant=&user=&role=              - Admin toggle view
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from orion.db.store import SnapshotStore
from orion.dependencies import diagnostic_headers, get_store, require_tenant
from orion.models.enums import DataMode
from orion.schemas.data_mode import DataModeUpdate
from orion.services.data_mode import (
    DataModeToggle,
    get_preference,
    is_admin_role,
    parse_data_mode,
    save_preference,
)
from orion.services.sourcing import STORE_ERRORS
from orion.services.sync import get_sync_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data-mode", tags=["data-mode"])


# ---------------------------------------------------------------------------
# GET /api/v1/data-mode
# ---------------------------------------------------------------------------

@router.get("")
async def get_data_mode_preference(
    response: Response,
    tenant_id: str = Depends(require_tenant),
    user: str | None = Query(default=None),
    store: SnapshotStore | None = Depends(get_store),
):
    """Stored mode for the tenant/user, demonstration data when unknown."""
    try:
        result = await get_preference(store, tenant_id, user)
    except Exception as exc:
        logger.exception("Data mode: unexpected error for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    response.headers.update(diagnostic_headers(result, tenant_id))
    return {"mode": result.data.value}


# ---------------------------------------------------------------------------
# POST /api/v1/data-mode
# ---------------------------------------------------------------------------

@router.post("")
async def set_data_mode_preference(
    body: DataModeUpdate,
    store: SnapshotStore | None = Depends(get_store),
):
    if not body.tenant or not body.mode:
        raise HTTPException(status_code=400, detail="Missing tenant or mode")

    mode = parse_data_mode(body.mode)
    if mode is None:
        raise HTTPException(status_code=400, detail='Invalid mode. Must be "mock" or "live"')

    try:
        persisted = await save_preference(store, body.tenant, body.user, mode)
    except STORE_ERRORS as exc:
        logger.error("Data mode: failed to save preference for tenant %s: %s", body.tenant, exc)
        raise HTTPException(status_code=500, detail="Failed to save preference") from exc

    return {"success": True, "mode": mode.value, "persisted": persisted}


# ---------------------------------------------------------------------------
# GET /api/v1/data-mode/toggle
# ---------------------------------------------------------------------------

@router.get("/toggle")
async def data_mode_toggle(
    tenant_id: str = Depends(require_tenant),
    user: str | None = Query(default=None),
    role: str | None = Query(default=None),
    store: SnapshotStore | None = Depends(get_store),
):
    """Toggle view for the header bar; ``data`` is null for non-admins."""
    if not is_admin_role(role):
        return {"data": None}

    try:
        preference = await get_preference(store, tenant_id, user)
        toggle = DataModeToggle(mode=preference.data, is_admin=True)
        if preference.data == DataMode.LIVE:
            sync = (await get_sync_status(store, tenant_id)).data
            toggle.p6_last_sync = sync.p6.last_sync
            toggle.sap_last_sync = sync.sap.last_sync
    except Exception as exc:
        logger.exception("Data mode: unexpected error building toggle for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    return {"data": toggle.render()}
