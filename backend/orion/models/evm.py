"""ProjectSnapshot and CoreProject models (read-only)."""

from datetime import date
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from orion.db.base import Base


class ProjectSnapshot(Base):
    """One EVM measurement row per (tenant, project, snapshot date)."""

    __tablename__ = "project_snapshots"

    tenant_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    project_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    snapshot_date: Mapped[date] = mapped_column(sa.Date, primary_key=True)
    project_name: Mapped[str | None] = mapped_column(sa.Text)
    percent_complete: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    bac: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    pv: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    ev: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    ac: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    spi: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    cpi: Mapped[Decimal | None] = mapped_column(sa.Numeric)

    __table_args__ = (
        sa.Index("project_snapshots_tenant_date_idx", "tenant_id", "snapshot_date"),
        {"schema": "orion_evm"},
    )


class CoreProject(Base):
    """Current project record with its latest performance indices."""

    __tablename__ = "projects"

    tenant_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    project_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    project_name: Mapped[str | None] = mapped_column(sa.Text)
    percent_complete: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    spi: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    cpi: Mapped[Decimal | None] = mapped_column(sa.Numeric)
    planned_finish_date: Mapped[date | None] = mapped_column(sa.Date)
    data_date: Mapped[date | None] = mapped_column(sa.Date)

    __table_args__ = ({"schema": "orion_core"},)
