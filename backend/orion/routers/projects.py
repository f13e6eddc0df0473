"""Projects API routes.

Endpoints:
  GET    /api/v1/projects/health?tenant={tenantId}&limit={limit}  - Per-project health
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from orion.db.store import SnapshotStore
from orion.dependencies import diagnostic_headers, get_data_mode, get_store, require_tenant
from orion.models.enums import DataMode
from orion.services.portfolio import DEFAULT_HEALTH_LIMIT, get_project_health

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/health")
async def project_health(
    response: Response,
    tenant_id: str = Depends(require_tenant),
    limit: int = Query(default=DEFAULT_HEALTH_LIMIT, ge=1, le=100),
    mode: DataMode = Depends(get_data_mode),
    store: SnapshotStore | None = Depends(get_store),
):
    """Projects ordered by SPI ascending, from the requested data mode's schema."""
    try:
        result = await get_project_health(store, tenant_id, limit, mode)
    except Exception as exc:
        logger.exception("Projects: unexpected error for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    response.headers.update(diagnostic_headers(result, tenant_id))
    response.headers["X-Data-Mode"] = mode.value
    return {"projects": [p.model_dump(by_alias=True, mode="json") for p in result.data]}
