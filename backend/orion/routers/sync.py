"""Sync status API routes.

Endpoints:
  GET    /api/v1/sync/status?tenant={tenantId}  - Last P6/SAP sync and next run
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from orion.db.store import SnapshotStore
from orion.dependencies import diagnostic_headers, get_store, require_tenant
from orion.services.sync import get_sync_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status")
async def sync_status(
    response: Response,
    tenant_id: str = Depends(require_tenant),
    store: SnapshotStore | None = Depends(get_store),
):
    try:
        result = await get_sync_status(store, tenant_id)
    except Exception as exc:
        logger.exception("Sync: unexpected error for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    response.headers.update(diagnostic_headers(result, tenant_id))
    return result.data.model_dump(by_alias=True, mode="json")
