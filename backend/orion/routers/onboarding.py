"""Onboarding wizard routes.

Endpoints:
  GET    /onboarding                 - Welcome step
  GET    /onboarding/{step}          - p6 | sap | projects | complete
  POST   /onboarding/next            - Record the current step's payload, go forward
  POST   /onboarding/back            - Return to the previous step
  POST   /onboarding/sap/skip        - Skip the optional SAP step
  POST   /onboarding/complete        - Finish onboarding

Navigation answers with 303 redirects to the new step's route. Progress is
tracked per browser through the ``orion_onboarding`` cookie.
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from orion.config import get_settings
from orion.dependencies import get_onboarding_sessions
from orion.schemas.onboarding import OnboardingCompleteRequest
from orion.services.onboarding import (
    OnboardingProgress,
    OnboardingSessions,
    OnboardingStep,
    StepValidationError,
    WizardError,
    get_started,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

SESSION_COOKIE = "orion_onboarding"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_progress(
    request: Request,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
) -> OnboardingProgress:
    """Session for state-changing requests, created on first use."""
    return sessions.get_or_create(request.cookies.get(SESSION_COOKIE))


def view_progress(
    request: Request,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
) -> OnboardingProgress:
    """Session for page views. Without one, a fresh unsaved welcome state."""
    progress = sessions.get(request.cookies.get(SESSION_COOKIE))
    return progress or OnboardingProgress(session_id="")


def _set_session_cookie(response: Response, progress: OnboardingProgress) -> None:
    if not progress.session_id:
        return
    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE,
        value=progress.session_id,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
        path="/",
    )


def _redirect(progress: OnboardingProgress) -> RedirectResponse:
    response = RedirectResponse(url=progress.current_step.path, status_code=303)
    _set_session_cookie(response, progress)
    return response


def _render(progress: OnboardingProgress, step: OnboardingStep, response: Response) -> dict:
    _set_session_cookie(response, progress)
    return {"data": progress.view(step)}


def _wizard_error(exc: WizardError) -> HTTPException:
    if isinstance(exc, StepValidationError):
        return HTTPException(
            status_code=400,
            detail={"message": str(exc), "validationErrors": exc.errors},
        )
    return HTTPException(status_code=409, detail=str(exc))


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

@router.post("/next")
async def next_step(
    payload: dict | None = Body(default=None),
    progress: OnboardingProgress = Depends(get_progress),
):
    """Validate and record the current step, then redirect to the next one."""
    try:
        if progress.current_step == OnboardingStep.WELCOME:
            await get_started(progress)
        else:
            progress.advance(payload)
    except WizardError as exc:
        raise _wizard_error(exc) from exc
    return _redirect(progress)


@router.post("/back")
async def previous_step(progress: OnboardingProgress = Depends(get_progress)):
    try:
        progress.go_back()
    except WizardError as exc:
        raise _wizard_error(exc) from exc
    return _redirect(progress)


@router.post("/sap/skip")
async def skip_sap(progress: OnboardingProgress = Depends(get_progress)):
    """SAP is optional; go straight to project selection."""
    try:
        progress.skip_sap()
    except WizardError as exc:
        raise _wizard_error(exc) from exc
    return _redirect(progress)


@router.post("/complete")
async def complete_onboarding(
    response: Response,
    body: OnboardingCompleteRequest | None = None,
    progress: OnboardingProgress = Depends(get_progress),
):
    try:
        result = progress.complete(body.tenant_name if body else None)
    except WizardError as exc:
        raise _wizard_error(exc) from exc
    _set_session_cookie(response, progress)
    return result


# ---------------------------------------------------------------------------
# Step views
# ---------------------------------------------------------------------------

@router.get("")
async def welcome(
    response: Response,
    progress: OnboardingProgress = Depends(view_progress),
):
    if progress.current_step != OnboardingStep.WELCOME:
        return _redirect(progress)
    return _render(progress, OnboardingStep.WELCOME, response)


@router.get("/{slug}")
async def step_view(
    slug: str,
    response: Response,
    progress: OnboardingProgress = Depends(view_progress),
):
    """Render a step. Any step other than the current one redirects to it."""
    step = OnboardingStep.from_slug(slug)
    if step is None or step == OnboardingStep.WELCOME:
        raise HTTPException(status_code=404, detail="Onboarding step not found")
    if step != progress.current_step:
        logger.info(
            "Onboarding %s: %s requested, redirecting to %s",
            progress.session_id, step.name, progress.current_step.name,
        )
        return _redirect(progress)
    return _render(progress, step, response)
