"""Provenance of read-path results.

Every read route answers from the store when it can and from fixed
demonstration data when it cannot. ``Sourced`` carries which of the two
happened so the router can report it in the diagnostic headers.
"""

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError

T = TypeVar("T")

MOCK_SOURCE = "mock"

# Failures that mean "store unreachable or misconfigured"
STORE_ERRORS = (SQLAlchemyError, OSError)


class FallbackReason(str, enum.Enum):
    UNCONFIGURED = "unconfigured"
    UNAVAILABLE = "unavailable"
    EMPTY = "empty"


@dataclass
class Sourced(Generic[T]):
    data: T
    source: str
    fallback_reason: FallbackReason | None = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None


def store_source(table: str) -> str:
    return f"postgres:{table}"


def fallback(data: T, reason: FallbackReason) -> Sourced[T]:
    return Sourced(data=data, source=MOCK_SOURCE, fallback_reason=reason)
