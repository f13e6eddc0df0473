"""DataModePreference model."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from orion.db.base import Base


class DataModePreference(Base):
    __tablename__ = "data_mode_preferences"

    tenant_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    user_id: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    data_mode: Mapped[str] = mapped_column(sa.Text, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True))

    __table_args__ = ({"schema": "client_demo"},)
