"""Onboarding wizard.

A strictly linear five-step flow:

    Welcome -> P6 connection -> SAP connection -> project selection -> complete

Each forward move validates and records the payload collected by the
current step. Every step except the first can step back to its predecessor.
SAP is optional and can be skipped explicitly. Progress is held in memory
for the life of the process only.
"""

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from pydantic import BaseModel, ValidationError

from orion.models.helpers import generate_cuid
from orion.schemas.onboarding import (
    P6ConnectionConfig,
    ProjectSelectionData,
    SAPConnectionConfig,
    SelectedProject,
)

logger = logging.getLogger(__name__)


class OnboardingStep(enum.IntEnum):
    WELCOME = 1
    P6_CONNECTION = 2
    SAP_CONNECTION = 3
    PROJECT_SELECTION = 4
    COMPLETE = 5

    @property
    def slug(self) -> str:
        return _STEP_SLUGS[self]

    @property
    def path(self) -> str:
        return f"/onboarding/{self.slug}" if self.slug else "/onboarding"

    @classmethod
    def from_slug(cls, slug: str) -> "OnboardingStep | None":
        for step, step_slug in _STEP_SLUGS.items():
            if step_slug == slug:
                return step
        return None


_STEP_SLUGS = {
    OnboardingStep.WELCOME: "",
    OnboardingStep.P6_CONNECTION: "p6",
    OnboardingStep.SAP_CONNECTION: "sap",
    OnboardingStep.PROJECT_SELECTION: "projects",
    OnboardingStep.COMPLETE: "complete",
}

STEP_COPY = {
    OnboardingStep.WELCOME: ("Welcome to ORION", "Connect your schedule and cost systems"),
    OnboardingStep.P6_CONNECTION: ("Connect to Primavera P6", "Enter your P6 SOAP API credentials to connect"),
    OnboardingStep.SAP_CONNECTION: ("Connect to SAP", "Enter your SAP HANA connection details (optional)"),
    OnboardingStep.PROJECT_SELECTION: ("Select Projects", "Choose the P6 projects to sync"),
    OnboardingStep.COMPLETE: ("You're all set", "Review your configuration and start the first sync"),
}

TOTAL_STEPS = len(OnboardingStep)


class WizardError(Exception):
    """Navigation that the current step does not allow."""


class StepValidationError(WizardError):
    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("Step payload is invalid")
        self.errors = errors


# ---------------------------------------------------------------------------
# Payload validation
# ---------------------------------------------------------------------------

def _is_http_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_p6_config(config: P6ConnectionConfig) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not config.wsdl_base_url.strip():
        errors["wsdlBaseUrl"] = "WSDL URL is required"
    elif not _is_http_url(config.wsdl_base_url):
        errors["wsdlBaseUrl"] = "Please enter a valid URL"
    if not config.database_instance.strip():
        errors["databaseInstance"] = "Database instance is required"
    if not config.username.strip():
        errors["username"] = "Username is required"
    if not config.password.strip():
        errors["password"] = "Password is required"
    return errors


def validate_sap_config(config: SAPConnectionConfig) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not config.host_url.strip():
        errors["hostUrl"] = "Host URL is required"
    elif not _is_http_url(config.host_url):
        errors["hostUrl"] = "Please enter a valid URL"
    if not config.system_id.strip():
        errors["systemId"] = "System ID is required"
    elif len(config.system_id) != 3:
        errors["systemId"] = "System ID must be 3 characters"
    if not config.client.strip():
        errors["client"] = "Client is required"
    elif not config.client.isdigit():
        errors["client"] = "Client must be numeric"
    if not config.username.strip():
        errors["username"] = "Username is required"
    if not config.password.strip():
        errors["password"] = "Password is required"
    return errors


def validate_selection(data: ProjectSelectionData) -> dict[str, str]:
    if not data.selected_projects:
        return {"selectedProjects": "Select at least one project"}
    return {}


def _parse(model: type[BaseModel], payload: dict | None) -> BaseModel:
    try:
        return model.model_validate(payload or {})
    except ValidationError as exc:
        errors = {
            ".".join(str(part) for part in err["loc"]) or "body": err["msg"]
            for err in exc.errors()
        }
        raise StepValidationError(errors) from exc


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

@dataclass
class OnboardingProgress:
    session_id: str
    current_step: OnboardingStep = OnboardingStep.WELCOME
    completed_steps: set[OnboardingStep] = field(default_factory=set)
    is_loading: bool = False
    p6_config: P6ConnectionConfig | None = None
    sap_config: SAPConnectionConfig | None = None
    sap_skipped: bool = False
    selected_projects: list[SelectedProject] = field(default_factory=list)
    tenant_id: str | None = None
    completed_at: datetime | None = None
    last_seen: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    def _move_to(self, step: OnboardingStep) -> OnboardingStep:
        logger.info(
            "Onboarding %s: %s -> %s",
            self.session_id, self.current_step.name, step.name,
        )
        self.current_step = step
        return step

    def advance(self, payload: dict | None = None) -> OnboardingStep:
        """Validate and record the current step's payload, then move forward."""
        step = self.current_step
        if step == OnboardingStep.COMPLETE:
            raise WizardError("Onboarding is already at its final step")

        if step == OnboardingStep.P6_CONNECTION:
            config = _parse(P6ConnectionConfig, payload)
            errors = validate_p6_config(config)
            if errors:
                raise StepValidationError(errors)
            self.p6_config = config
            # TODO: persist to orion_xconf.client_config once the tenant exists
            logger.info("P6 connection config: %s", config.model_dump(exclude={"password"}))
        elif step == OnboardingStep.SAP_CONNECTION:
            config = _parse(SAPConnectionConfig, payload)
            errors = validate_sap_config(config)
            if errors:
                raise StepValidationError(errors)
            self.sap_config = config
            self.sap_skipped = False
            logger.info("SAP connection config: %s", config.model_dump(exclude={"password"}))
        elif step == OnboardingStep.PROJECT_SELECTION:
            data = _parse(ProjectSelectionData, payload)
            errors = validate_selection(data)
            if errors:
                raise StepValidationError(errors)
            self.selected_projects = list(data.selected_projects)
            logger.info(
                "Selected projects: %s",
                [project.code for project in self.selected_projects],
            )

        self.completed_steps.add(step)
        return self._move_to(OnboardingStep(step + 1))

    def go_back(self) -> OnboardingStep:
        if self.current_step == OnboardingStep.WELCOME:
            raise WizardError("There is no step before the welcome screen")
        return self._move_to(OnboardingStep(self.current_step - 1))

    def skip_sap(self) -> OnboardingStep:
        if self.current_step != OnboardingStep.SAP_CONNECTION:
            raise WizardError("Only the SAP connection step can be skipped")
        self.sap_config = None
        self.sap_skipped = True
        logger.info("Onboarding %s: SAP connection skipped", self.session_id)
        return self._move_to(OnboardingStep.PROJECT_SELECTION)

    def complete(self, tenant_name: str | None = None) -> dict:
        if self.current_step != OnboardingStep.COMPLETE:
            raise WizardError("Finish the remaining steps before completing onboarding")
        if not self.is_complete:
            self.tenant_id = generate_cuid()
            self.completed_at = datetime.now(timezone.utc)
            self.completed_steps.add(OnboardingStep.COMPLETE)
            # TODO: trigger the initial P6 sync for the selected projects
            logger.info(
                "Onboarding %s complete: tenant %s (%s), %d projects",
                self.session_id, self.tenant_id, tenant_name or "unnamed",
                len(self.selected_projects),
            )

        next_steps = [
            f"Run the initial P6 sync for {len(self.selected_projects)} selected project(s)",
            "Open the portfolio dashboard to review project health",
        ]
        if self.sap_skipped:
            next_steps.append("Connect SAP from settings to enable cost data")
        return {
            "success": True,
            "tenantId": self.tenant_id,
            "message": "Onboarding complete",
            "nextSteps": next_steps,
        }

    def view(self, step: OnboardingStep | None = None) -> dict:
        """Render data for one step of the wizard (the current one by default)."""
        step = step or self.current_step
        title, description = STEP_COPY[step]
        view = {
            "step": int(step),
            "totalSteps": TOTAL_STEPS,
            "name": step.name.lower(),
            "path": step.path,
            "title": title,
            "description": description,
            "isLoading": self.is_loading,
            "canGoBack": step != OnboardingStep.WELCOME,
            "backPath": OnboardingStep(step - 1).path if step != OnboardingStep.WELCOME else None,
            "completedSteps": sorted(int(s) for s in self.completed_steps),
        }
        if step == OnboardingStep.SAP_CONNECTION:
            view["canSkip"] = True
        if step == OnboardingStep.COMPLETE:
            view["summary"] = self.summary()
        return view

    def summary(self) -> dict:
        return {
            "p6Config": (
                self.p6_config.model_dump(by_alias=True, exclude={"password"})
                if self.p6_config else None
            ),
            "sapConfig": (
                self.sap_config.model_dump(by_alias=True, exclude={"password"})
                if self.sap_config else None
            ),
            "sapSkipped": self.sap_skipped,
            "selectedProjects": [p.model_dump() for p in self.selected_projects],
            "tenantId": self.tenant_id,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }


async def _log_start(progress: OnboardingProgress) -> None:
    # TODO: record the start in orion_xconf.onboarding_progress
    logger.info("Onboarding %s: starting", progress.session_id)


async def get_started(
    progress: OnboardingProgress,
    initializer: Callable[[OnboardingProgress], Awaitable[None]] = _log_start,
) -> OnboardingStep:
    """Leave the welcome screen once initialization resolves.

    The welcome view reports ``isLoading`` while the initializer runs; a
    failed initializer leaves the wizard on the welcome screen.
    """
    if progress.current_step != OnboardingStep.WELCOME:
        raise WizardError("Onboarding has already started")

    progress.is_loading = True
    try:
        await initializer(progress)
    except Exception:
        logger.exception("Failed to start onboarding %s", progress.session_id)
        raise
    finally:
        progress.is_loading = False
    return progress.advance()


# ---------------------------------------------------------------------------
# In-memory progress store
# ---------------------------------------------------------------------------

SESSION_MAX_AGE = timedelta(hours=12)


class OnboardingSessions:
    """Per-process progress store keyed by session id.

    Sessions idle for longer than ``max_age`` are dropped on the next lookup.
    """

    def __init__(self, max_age: timedelta = SESSION_MAX_AGE) -> None:
        self._store: dict[str, OnboardingProgress] = {}
        self.max_age = max_age

    def _prune(self, now: datetime) -> None:
        expired = [sid for sid, p in self._store.items() if now - p.last_seen > self.max_age]
        for sid in expired:
            del self._store[sid]
        if expired:
            logger.info("Onboarding: dropped %d idle sessions", len(expired))

    def get(self, session_id: str | None) -> OnboardingProgress | None:
        """Existing session for the id, or None. Never creates one."""
        now = datetime.now(timezone.utc)
        self._prune(now)
        progress = self._store.get(session_id) if session_id else None
        if progress is not None:
            progress.last_seen = now
        return progress

    def get_or_create(self, session_id: str | None) -> OnboardingProgress:
        progress = self.get(session_id)
        if progress is not None:
            return progress
        progress = OnboardingProgress(session_id=generate_cuid())
        self._store[progress.session_id] = progress
        logger.info("Onboarding session %s created", progress.session_id)
        return progress

    def __len__(self) -> int:
        return len(self._store)


# Shared instance for the running process
onboarding_sessions = OnboardingSessions()
