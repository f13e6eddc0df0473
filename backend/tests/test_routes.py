"""
tests/test_routes.py

Read routes: tenant validation, provenance headers, fallback and errors.
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from conftest import FakeStore, make_project, make_snapshot

READ_ROUTES = [
    "/api/v1/evm/projects",
    "/api/v1/portfolio/summary",
    "/api/v1/projects/health",
    "/api/v1/sync/status",
]


@pytest.mark.parametrize("path", READ_ROUTES)
def test_missing_tenant_is_400(api, path):
    resp = api.get(path)

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Missing tenant parameter"}


@pytest.mark.parametrize("path", READ_ROUTES)
def test_blank_tenant_is_400(api, path):
    assert api.get(path, params={"tenant": "  "}).status_code == 400


@pytest.mark.parametrize("path", READ_ROUTES)
def test_unconfigured_store_serves_demo_data(api, path):
    api.store = None

    resp = api.get(path, params={"tenant": "acme"})

    assert resp.status_code == 200
    assert resp.headers["X-Data-Source"] == "mock"
    assert resp.headers["X-Fallback-Reason"] == "unconfigured"
    assert resp.headers["X-Tenant-Id"] == "acme"
    assert "X-Verified-At" in resp.headers


@pytest.mark.parametrize("path", READ_ROUTES)
def test_store_error_serves_demo_data(api, path):
    api.store = FakeStore(error=OperationalError("SELECT", {}, Exception("down")))

    resp = api.get(path, params={"tenant": "tenant-1"})

    assert resp.status_code == 200
    assert resp.headers["X-Data-Source"] == "mock"
    assert resp.headers["X-Fallback-Reason"] == "unavailable"


@pytest.mark.parametrize(
    "path, extra",
    [(path, {}) for path in READ_ROUTES] + [
        ("/api/v1/data-mode", {}),
        ("/api/v1/data-mode/toggle", {"role": "admin"}),
    ],
)
def test_unexpected_error_is_500(api, path, extra):
    api.store = FakeStore(error=RuntimeError("boom"))

    resp = api.get(path, params={"tenant": "tenant-1", **extra})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


def test_evm_projects_live(api):
    api.store = FakeStore(snapshots=[
        make_snapshot("P1", date(2026, 1, 1)),
        make_snapshot("P1", date(2026, 2, 1), project_name="Latest"),
    ])

    resp = api.get("/api/v1/evm/projects", params={"tenant": "tenant-1"})

    assert resp.status_code == 200
    assert resp.headers["X-Data-Source"] == "postgres:orion_evm.project_snapshots"
    assert "X-Fallback-Reason" not in resp.headers
    projects = resp.json()["projects"]
    assert len(projects) == 1
    assert projects[0]["projectName"] == "Latest"
    assert projects[0]["snapshotDate"] == "2026-02-01"


def test_evm_projects_no_rows_is_demo(api):
    resp = api.get("/api/v1/evm/projects", params={"tenant": "tenant-1"})

    assert resp.headers["X-Fallback-Reason"] == "empty"
    assert len(resp.json()["projects"]) == 5


def test_portfolio_summary_live(api):
    api.store = FakeStore(projects=[make_project("A", 1.0, 1.0), make_project("B", 0.9, 1.0)])

    resp = api.get("/api/v1/portfolio/summary", params={"tenant": "tenant-1"})

    assert resp.json() == {"totalProjects": 2, "onTrack": 1, "atRisk": 1, "critical": 0}
    assert resp.headers["X-Data-Source"] == "postgres:orion_core.projects"


def test_project_health_data_mode_header(api):
    api.store = FakeStore(projects=[make_project("A", 0.8), make_project("B", 1.0)])

    resp = api.get(
        "/api/v1/projects/health",
        params={"tenant": "tenant-1", "limit": 1},
        headers={"X-Data-Mode": "live"},
    )

    assert resp.headers["X-Data-Mode"] == "live"
    assert resp.headers["X-Data-Source"] == "postgres:orion_core.projects"
    body = resp.json()["projects"]
    assert [p["id"] for p in body] == ["A"]
    assert body[0]["status"] == "critical"


def test_project_health_defaults_to_demo_mode(api):
    resp = api.get("/api/v1/projects/health", params={"tenant": "tenant-1", "dataMode": "bogus"})

    assert resp.headers["X-Data-Mode"] == "mock"
    assert resp.headers["X-Data-Source"] == "postgres:client_demo.projects"


def test_project_health_limit_bounds(api):
    assert api.get("/api/v1/projects/health", params={"tenant": "t", "limit": 0}).status_code == 422


def test_health_endpoint(api):
    api.store = None

    body = api.get("/health").json()

    assert body["status"] == "healthy"
    assert body["service"] == "orion-api"
    assert body["services"] == {"database": "unconfigured"}


def test_health_endpoint_reports_store_error(api):
    api.store = FakeStore(error=OperationalError("SELECT 1", {}, Exception("down")))

    assert api.get("/health").json()["services"]["database"] == "error"
