"""SQLAlchemy models, imported here so Base.metadata sees every table."""

from orion.models.evm import CoreProject, ProjectSnapshot
from orion.models.preferences import DataModePreference
from orion.models.sync import ClientConfig, SyncBatch

__all__ = [
    "ProjectSnapshot",
    "CoreProject",
    "DataModePreference",
    "SyncBatch",
    "ClientConfig",
]
