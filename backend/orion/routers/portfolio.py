"""Portfolio API routes.

Endpoints:
  GET    /api/v1/portfolio/summary?tenant={tenantId}  - Health bucket counts
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from orion.db.store import SnapshotStore
from orion.dependencies import diagnostic_headers, get_store, require_tenant
from orion.services.portfolio import get_portfolio_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/summary")
async def portfolio_summary(
    response: Response,
    tenant_id: str = Depends(require_tenant),
    store: SnapshotStore | None = Depends(get_store),
):
    """Total projects and counts per health status."""
    try:
        result = await get_portfolio_summary(store, tenant_id)
    except Exception as exc:
        logger.exception("Portfolio: unexpected error for tenant %s", tenant_id)
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    response.headers.update(diagnostic_headers(result, tenant_id))
    return result.data.model_dump(by_alias=True)
