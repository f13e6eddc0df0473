"""
Shared fixtures: in-memory stand-ins for the snapshot store and an API
client wired to them. Nothing here touches a real database or network.
"""

from datetime import date
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient

from orion.db.store import SnapshotStore
from orion.dependencies import get_http_client, get_onboarding_sessions, get_store
from orion.main import app
from orion.services.onboarding import OnboardingSessions


def make_snapshot(project_id="P1", snapshot_date=date(2026, 1, 1), **overrides):
    row = {
        "tenant_id": "tenant-1",
        "project_id": project_id,
        "project_name": f"Project {project_id}",
        "snapshot_date": snapshot_date,
        "percent_complete": 50,
        "bac": 1000,
        "pv": 500,
        "ev": 450,
        "ac": 400,
        "spi": 0.9,
        "cpi": 1.125,
    }
    row.update(overrides)
    return SimpleNamespace(**row)


def make_project(project_id="P1", spi=1.0, cpi=1.0, **overrides):
    row = {
        "tenant_id": "tenant-1",
        "project_id": project_id,
        "project_name": f"Project {project_id}",
        "percent_complete": 40,
        "spi": spi,
        "cpi": cpi,
        "planned_finish_date": date(2026, 12, 31),
        "data_date": date(2026, 1, 1),
    }
    row.update(overrides)
    return SimpleNamespace(**row)


class FakeStore:
    """Answers store queries from lists; ``error`` is raised by every query."""

    table_name = staticmethod(SnapshotStore.table_name)

    def __init__(self, snapshots=(), projects=(), client_config=None, batches=None, error=None):
        self.snapshots = list(snapshots)
        self.projects = list(projects)
        self.client_config = client_config
        self.batches = batches or {}
        self.preferences: dict[tuple[str, str], str] = {}
        self.error = error
        self.health_calls = []

    def _check(self):
        if self.error is not None:
            raise self.error

    async def ping(self):
        self._check()
        return True

    async def fetch_snapshots(self, tenant_id):
        self._check()
        return [s for s in self.snapshots if s.tenant_id == tenant_id]

    async def fetch_projects(self, tenant_id):
        self._check()
        return [p for p in self.projects if p.tenant_id == tenant_id]

    async def fetch_project_health(self, tenant_id, limit, mode):
        self._check()
        self.health_calls.append((tenant_id, limit, mode))
        rows = sorted(
            (p for p in self.projects if p.tenant_id == tenant_id),
            key=lambda p: p.spi,
        )
        return rows[:limit]

    async def get_data_mode(self, tenant_id, user_id):
        self._check()
        return self.preferences.get((tenant_id, user_id))

    async def set_data_mode(self, tenant_id, user_id, mode):
        self._check()
        self.preferences[(tenant_id, user_id)] = mode.value

    async def get_client_config(self, tenant_id):
        self._check()
        return self.client_config

    async def get_latest_batch(self, tenant_id, source):
        self._check()
        return self.batches.get(source)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def outbound_handler():
    """Replaceable handler for outbound integration requests."""
    state = {"handler": lambda request: httpx.Response(404)}

    def dispatch(request):
        return state["handler"](request)

    dispatch.state = state
    return dispatch


@pytest.fixture
def api(fake_store, outbound_handler):
    """TestClient with the store, HTTP client and wizard sessions overridden.

    ``api.store`` may be reassigned (None for an unconfigured store).
    """
    sessions = OnboardingSessions()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(outbound_handler))

    client = TestClient(app)
    client.store = fake_store

    app.dependency_overrides[get_store] = lambda: client.store
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_onboarding_sessions] = lambda: sessions
    client.sessions = sessions
    client.outbound = outbound_handler.state
    yield client
    app.dependency_overrides.clear()
