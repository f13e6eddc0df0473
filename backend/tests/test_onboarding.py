"""
tests/test_onboarding.py

The onboarding wizard: linear navigation, optional SAP, payload
validation and completion, both on the progress object and via routes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from orion.services.onboarding import (
    OnboardingProgress,
    OnboardingSessions,
    OnboardingStep,
    StepValidationError,
    WizardError,
    get_started,
)

P6_PAYLOAD = {
    "wsdlBaseUrl": "https://p6.example.com/p6ws/services",
    "databaseInstance": "1",
    "username": "admin",
    "password": "secret",
}

SAP_PAYLOAD = {
    "hostUrl": "https://10.0.1.105:30015",
    "systemId": "HDB",
    "client": "100",
    "username": "sapuser",
    "password": "secret",
}

SELECTION_PAYLOAD = {"selectedProjects": [{"id": 4711, "name": "AKK SEG-1", "code": "10481"}]}


def test_step_paths():
    assert OnboardingStep.WELCOME.path == "/onboarding"
    assert OnboardingStep.P6_CONNECTION.path == "/onboarding/p6"
    assert OnboardingStep.COMPLETE.path == "/onboarding/complete"
    assert OnboardingStep.from_slug("projects") == OnboardingStep.PROJECT_SELECTION
    assert OnboardingStep.from_slug("nope") is None


async def test_full_flow_on_progress():
    progress = OnboardingProgress(session_id="s1")

    assert await get_started(progress) == OnboardingStep.P6_CONNECTION
    assert progress.advance(P6_PAYLOAD) == OnboardingStep.SAP_CONNECTION
    assert progress.advance(SAP_PAYLOAD) == OnboardingStep.PROJECT_SELECTION
    assert progress.advance(SELECTION_PAYLOAD) == OnboardingStep.COMPLETE

    result = progress.complete("Acme")
    assert result["success"] is True
    assert result["tenantId"] == progress.tenant_id
    assert progress.sap_config.system_id == "HDB"
    assert [p.code for p in progress.selected_projects] == ["10481"]


async def test_get_started_failure_stays_on_welcome():
    progress = OnboardingProgress(session_id="s1")
    seen_loading = []

    async def failing(p):
        seen_loading.append(p.is_loading)
        raise RuntimeError("init failed")

    with pytest.raises(RuntimeError):
        await get_started(progress, initializer=failing)

    assert seen_loading == [True]
    assert progress.is_loading is False
    assert progress.current_step == OnboardingStep.WELCOME


def test_back_from_welcome_is_rejected():
    with pytest.raises(WizardError):
        OnboardingProgress(session_id="s1").go_back()


def test_skip_only_on_sap_step():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.P6_CONNECTION)
    with pytest.raises(WizardError):
        progress.skip_sap()

    progress.current_step = OnboardingStep.SAP_CONNECTION
    assert progress.skip_sap() == OnboardingStep.PROJECT_SELECTION
    assert progress.sap_skipped is True


def test_advance_past_complete_is_rejected():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.COMPLETE)
    with pytest.raises(WizardError):
        progress.advance()


def test_invalid_p6_payload_lists_errors():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.P6_CONNECTION)

    with pytest.raises(StepValidationError) as excinfo:
        progress.advance({**P6_PAYLOAD, "wsdlBaseUrl": "not a url", "password": ""})

    assert excinfo.value.errors == {
        "wsdlBaseUrl": "Please enter a valid URL",
        "password": "Password is required",
    }
    assert progress.current_step == OnboardingStep.P6_CONNECTION


def test_invalid_sap_payload_lists_errors():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.SAP_CONNECTION)

    with pytest.raises(StepValidationError) as excinfo:
        progress.advance({**SAP_PAYLOAD, "systemId": "HD", "client": "abc"})

    assert excinfo.value.errors == {
        "systemId": "System ID must be 3 characters",
        "client": "Client must be numeric",
    }


def test_empty_selection_is_rejected():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.PROJECT_SELECTION)

    with pytest.raises(StepValidationError) as excinfo:
        progress.advance({"selectedProjects": []})

    assert "selectedProjects" in excinfo.value.errors


def test_complete_is_idempotent():
    progress = OnboardingProgress(session_id="s1", current_step=OnboardingStep.COMPLETE)

    first = progress.complete()
    second = progress.complete()

    assert first["tenantId"] == second["tenantId"]


def test_sessions_lookup_does_not_create():
    sessions = OnboardingSessions()

    assert sessions.get(None) is None
    assert sessions.get("unknown") is None
    assert len(sessions) == 0

    created = sessions.get_or_create(None)
    assert sessions.get(created.session_id) is created
    assert sessions.get_or_create(created.session_id) is created
    assert len(sessions) == 1


def test_idle_sessions_are_dropped():
    sessions = OnboardingSessions(max_age=timedelta(hours=1))
    stale = sessions.get_or_create(None)
    stale.last_seen = datetime.now(timezone.utc) - timedelta(hours=2)
    fresh = sessions.get_or_create(None)

    assert sessions.get(stale.session_id) is None
    assert sessions.get(fresh.session_id) is fresh
    assert len(sessions) == 1


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

def _post(api, path, json=None):
    return api.post(path, json=json, follow_redirects=False)


def test_welcome_view(api):
    resp = api.get("/onboarding")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["step"] == 1
    assert data["totalSteps"] == 5
    assert data["canGoBack"] is False
    # Viewing alone does not start a session
    assert "orion_onboarding" not in resp.cookies
    assert len(api.sessions) == 0


def test_cookieless_page_views_keep_no_sessions(api):
    for _ in range(20):
        api.cookies.clear()
        assert api.get("/onboarding").status_code == 200
        assert api.get("/onboarding/p6", follow_redirects=False).status_code == 303

    assert len(api.sessions) == 0


def test_next_from_welcome_redirects_to_p6(api):
    resp = _post(api, "/onboarding/next")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/onboarding/p6"


def test_back_returns_to_welcome(api):
    _post(api, "/onboarding/next")

    resp = _post(api, "/onboarding/back")

    assert resp.headers["location"] == "/onboarding"


def test_direct_navigation_redirects_to_current_step(api):
    _post(api, "/onboarding/next")

    resp = api.get("/onboarding/projects", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/onboarding/p6"
    assert api.get("/onboarding/p6").json()["data"]["name"] == "p6_connection"


def test_unknown_step_is_404(api):
    assert api.get("/onboarding/billing").status_code == 404


def test_invalid_payload_is_400_with_errors(api):
    _post(api, "/onboarding/next")

    resp = _post(api, "/onboarding/next", json={"wsdlBaseUrl": "https://p6.example.com"})

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert set(detail["validationErrors"]) == {"databaseInstance", "username", "password"}


def test_skip_sap_and_complete(api):
    _post(api, "/onboarding/next")
    _post(api, "/onboarding/next", json=P6_PAYLOAD)

    resp = _post(api, "/onboarding/sap/skip")
    assert resp.headers["location"] == "/onboarding/projects"

    resp = _post(api, "/onboarding/next", json=SELECTION_PAYLOAD)
    assert resp.headers["location"] == "/onboarding/complete"

    summary = api.get("/onboarding/complete").json()["data"]["summary"]
    assert summary["sapSkipped"] is True
    assert summary["sapConfig"] is None
    assert "password" not in summary["p6Config"]

    done = api.post("/onboarding/complete", json={"tenantName": "Acme"})
    assert done.status_code == 200
    assert done.json()["success"] is True
    assert done.json()["tenantId"]


def test_skip_outside_sap_step_is_409(api):
    assert _post(api, "/onboarding/sap/skip").status_code == 409


def test_complete_before_last_step_is_409(api):
    assert api.post("/onboarding/complete").status_code == 409
