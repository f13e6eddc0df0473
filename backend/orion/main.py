"""ORION dashboard FastAPI application."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orion.config import get_settings
from orion.db.store import SnapshotStore
from orion.routers import connections, data_mode, evm, health, onboarding, portfolio, projects, sync
from orion.services.sourcing import STORE_ERRORS

logger = logging.getLogger(__name__)

_settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup/shutdown lifecycle."""
    store = SnapshotStore.from_settings(_settings)
    if store is not None:
        # An unreachable store is not fatal; reads fall back to demonstration data
        try:
            await store.ping()
        except STORE_ERRORS as exc:
            logger.warning("Snapshot store unreachable at startup: %s", exc)
    app.state.store = store

    # P6 and SAP hosts commonly present self-signed certificates
    app.state.http_client = httpx.AsyncClient(
        verify=False,
        timeout=_settings.connection_timeout,
    )
    yield
    await app.state.http_client.aclose()
    if store is not None:
        await store.dispose()


app = FastAPI(
    title="ORION API",
    description="Portfolio EVM dashboard and onboarding for P6 / SAP project controls",
    version=_settings.version,
    lifespan=lifespan,
)

# CORS: allow the frontend origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        _settings.app_url,
        "http://localhost:5173",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Data-Source",
        "X-Data-Mode",
        "X-Tenant-Id",
        "X-Verified-At",
        "X-Fallback-Reason",
    ],
)

app.include_router(health.router)

# JSON API, prefixed with /api/v1
app.include_router(evm.router, prefix="/api/v1")
app.include_router(portfolio.router, prefix="/api/v1")
app.include_router(projects.router, prefix="/api/v1")
app.include_router(sync.router, prefix="/api/v1")
app.include_router(data_mode.router, prefix="/api/v1")
app.include_router(connections.router, prefix="/api/v1")

# Wizard pages
app.include_router(onboarding.router)
