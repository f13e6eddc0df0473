"""Onboarding connection API routes.

Endpoints:
  POST   /api/v1/onboarding/p6/test      - Test P6 WSDL reachability and login
  POST   /api/v1/onboarding/p6/projects  - List P6 projects for selection
  POST   /api/v1/onboarding/sap/test     - Test SAP HANA reachability
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException

from orion.config import Settings, get_settings
from orion.dependencies import get_http_client
from orion.schemas.onboarding import (
    P6ConnectionConfig,
    P6ProjectListRequest,
    SAPConnectionConfig,
)
from orion.services.integrations import p6, sap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def _require_fields(missing: list[str]) -> None:
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}",
        )


@router.post("/p6/test")
async def test_p6_connection(
    body: P6ConnectionConfig,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Check the P6 AuthenticationService WSDL and credentials."""
    _require_fields(body.missing_fields())
    result = await p6.check_connection(client, body)
    return result.model_dump(exclude_none=True)


@router.post("/p6/projects")
async def list_p6_projects(
    body: P6ProjectListRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Projects visible to the P6 user, optionally filtered by name or code."""
    _require_fields(body.missing_fields())
    try:
        projects = await p6.list_projects(client, body)
    except p6.P6Error as exc:
        logger.warning("P6 project listing failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail="Failed to load projects. Please check your connection.",
        ) from exc

    projects = p6.filter_projects(projects, body.filter)
    return {"projects": [p.model_dump(by_alias=True) for p in projects]}


@router.post("/sap/test")
async def test_sap_connection(
    body: SAPConnectionConfig,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    """Validate SAP parameters and probe the HANA host."""
    _require_fields(body.missing_fields())
    result = await sap.check_connection(client, body, probe_timeout=settings.sap_probe_timeout)
    return result.model_dump(exclude_none=True)
