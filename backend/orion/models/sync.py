"""SyncBatch and ClientConfig models."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from orion.db.base import Base


class SyncBatch(Base):
    __tablename__ = "batches"

    id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(sa.Text, nullable=False)
    source: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str | None] = mapped_column(sa.Text)
    completed_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True))

    __table_args__ = (
        sa.Index("batches_tenant_source_completed_idx", "tenant_id", "source", "completed_at"),
        {"schema": "orion_sync"},
    )


class ClientConfig(Base):
    __tablename__ = "client_config"

    tenant_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    p6_wsdl_url: Mapped[str | None] = mapped_column(sa.Text)
    sap_host: Mapped[str | None] = mapped_column(sa.Text)
    sync_schedule_cron: Mapped[str | None] = mapped_column(sa.Text)

    __table_args__ = ({"schema": "orion_xconf"},)
