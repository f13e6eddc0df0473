"""Enumerations shared by models, services and routers."""

import enum


class HealthStatus(str, enum.Enum):
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    CRITICAL = "critical"


class DataMode(str, enum.Enum):
    MOCK = "mock"
    LIVE = "live"


class SyncSource(str, enum.Enum):
    P6 = "p6"
    SAP = "sap"


class SyncState(str, enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    RUNNING = "running"
    NEVER = "never"
