"""SQLAlchemy declarative base for the external dashboard schema."""

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Models map to tables owned by the hosted backend, spread across several
    Postgres schemas (orion_core, orion_evm, orion_sync, orion_xconf,
    client_demo). Column names are snake_case there already, so no column
    aliasing is needed. This service never creates or migrates them.
    """

    metadata = sa.MetaData()
