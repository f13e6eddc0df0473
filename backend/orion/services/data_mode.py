"""Demonstration vs. live data mode.

The preference is stored per (tenant, user). Individual requests pick their
mode from the ``X-Data-Mode`` header or the ``dataMode`` query parameter and
default to demonstration data.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from orion.models.enums import DataMode
from orion.models.preferences import DataModePreference
from orion.services.sourcing import (
    STORE_ERRORS,
    FallbackReason,
    Sourced,
    fallback,
    store_source,
)

logger = logging.getLogger(__name__)

DEFAULT_USER = "default"
ADMIN_ROLES = frozenset({"admin", "super_admin", "developer"})


def parse_data_mode(value: str | None) -> DataMode | None:
    try:
        return DataMode(value) if value else None
    except ValueError:
        return None


def resolve_data_mode(header_value: str | None, query_value: str | None) -> DataMode:
    """Header wins over query; anything unrecognised means demonstration data."""
    return parse_data_mode(header_value) or parse_data_mode(query_value) or DataMode.MOCK


def is_admin_role(role: str | None) -> bool:
    return (role or "").lower() in ADMIN_ROLES


async def get_preference(store, tenant_id: str, user_id: str | None) -> Sourced[DataMode]:
    if store is None:
        return fallback(DataMode.MOCK, FallbackReason.UNCONFIGURED)

    try:
        stored = await store.get_data_mode(tenant_id, user_id or DEFAULT_USER)
    except STORE_ERRORS as exc:
        logger.error("Data mode: preference query failed for tenant %s: %s", tenant_id, exc)
        return fallback(DataMode.MOCK, FallbackReason.UNAVAILABLE)

    mode = parse_data_mode(stored)
    if mode is None:
        return fallback(DataMode.MOCK, FallbackReason.EMPTY)
    return Sourced(data=mode, source=store_source(store.table_name(DataModePreference)))


async def save_preference(store, tenant_id: str, user_id: str | None, mode: DataMode) -> bool:
    """Persist the preference. Returns False when there is no store to write to.

    Store errors propagate to the caller.
    """
    if store is None:
        logger.info("Data mode: store not configured, %s not persisted", mode.value)
        return False
    await store.set_data_mode(tenant_id, user_id or DEFAULT_USER, mode)
    logger.info("Data mode for tenant %s user %s set to %s", tenant_id, user_id or DEFAULT_USER, mode.value)
    return True


def format_relative_time(value: datetime | None, now: datetime | None = None) -> str:
    if value is None:
        return "Never"
    now = now or datetime.now(timezone.utc)
    minutes = int((now - value).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return value.date().isoformat()


@dataclass
class DataModeToggle:
    """View model for the admin-only data mode switch.

    Holds no state beyond what it displays; switching is delegated to
    ``on_toggle``.
    """

    mode: DataMode
    is_admin: bool
    is_loading: bool = False
    on_toggle: Callable[[DataMode], None] | None = None
    p6_last_sync: datetime | None = None
    sap_last_sync: datetime | None = None

    @property
    def target_mode(self) -> DataMode:
        return DataMode.LIVE if self.mode == DataMode.MOCK else DataMode.MOCK

    def render(self, now: datetime | None = None) -> dict | None:
        if not self.is_admin or self.is_loading:
            return None

        is_mock = self.mode == DataMode.MOCK
        view = {
            "mode": self.mode.value,
            "label": "Demo Data" if is_mock else "Live Data",
            "ariaLabel": f"Switch to {'Live' if is_mock else 'Mock'} data",
            "targetMode": self.target_mode.value,
        }
        if not is_mock:
            view["syncStatus"] = {
                "p6": format_relative_time(self.p6_last_sync, now),
                "sap": format_relative_time(self.sap_last_sync, now),
            }
        return view

    def toggle(self) -> DataMode:
        target = self.target_mode
        if self.on_toggle is not None:
            self.on_toggle(target)
        return target
