"""EVM API routes.

Endpoints:
  GET    /api/v1/evm/projects?tenant={tenantId}  - Latest EVM metrics per project
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from orion.db.store import SnapshotStore
from orion.dependencies import diagnostic_headers, get_store, require_tenant
from orion.services.evm import get_project_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evm", tags=["evm"])


@router.get("/projects")
async def list_evm_projects(
    response: Response,
    tenant_id: str = Depends(require_tenant),
    store: SnapshotStore | None = Depends(get_store),
):
    """Latest snapshot per project with derived EVM metrics."""
    try:
        result = await get_project_metrics(store, tenant_id)
    except Exception as exc:
        logger.exception("EVM: unexpected error for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    response.headers.update(diagnostic_headers(result, tenant_id))
    return {"projects": [p.model_dump(by_alias=True, mode="json") for p in result.data]}
