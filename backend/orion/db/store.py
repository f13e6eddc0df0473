"""Read access to the hosted dashboard schema.

One ``SnapshotStore`` is built per process from explicit settings (see
``orion.main.lifespan``). When the store is not configured no instance
exists and every caller takes its demonstration-data path.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncEngine

from orion.config import Settings
from orion.db.session import create_session_factory, create_store_engine
from orion.models.enums import DataMode, SyncSource
from orion.models.evm import CoreProject, ProjectSnapshot
from orion.models.preferences import DataModePreference
from orion.models.sync import ClientConfig, SyncBatch

logger = logging.getLogger(__name__)

# Demonstration mode reads the same tables from the client_demo schema
DEMO_SCHEMA_MAP = {
    "orion_core": "client_demo",
    "orion_evm": "client_demo",
}


class SnapshotStore:
    """Query client for snapshots, projects, preferences and sync state."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessions = {
            DataMode.LIVE: create_session_factory(engine),
            DataMode.MOCK: create_session_factory(
                engine.execution_options(schema_translate_map=DEMO_SCHEMA_MAP)
            ),
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "SnapshotStore | None":
        engine = create_store_engine(settings)
        if engine is None:
            logger.warning("Snapshot store not configured, serving demonstration data")
            return None
        return cls(engine)

    @staticmethod
    def table_name(model, mode: DataMode = DataMode.LIVE) -> str:
        """Schema-qualified table name as queried in the given mode."""
        schema = model.__table__.schema
        if mode == DataMode.MOCK:
            schema = DEMO_SCHEMA_MAP.get(schema, schema)
        return f"{schema}.{model.__tablename__}"

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def dispose(self) -> None:
        await self.engine.dispose()

    # ------------------------------------------------------------------
    # EVM / portfolio
    # ------------------------------------------------------------------

    async def fetch_snapshots(self, tenant_id: str) -> list[ProjectSnapshot]:
        """All snapshots for a tenant, newest first."""
        async with self._sessions[DataMode.LIVE]() as session:
            result = await session.execute(
                select(ProjectSnapshot)
                .where(ProjectSnapshot.tenant_id == tenant_id)
                .order_by(ProjectSnapshot.snapshot_date.desc())
            )
            return list(result.scalars().all())

    async def fetch_projects(self, tenant_id: str) -> list[CoreProject]:
        async with self._sessions[DataMode.LIVE]() as session:
            result = await session.execute(
                select(CoreProject).where(CoreProject.tenant_id == tenant_id)
            )
            return list(result.scalars().all())

    async def fetch_project_health(
        self, tenant_id: str, limit: int, mode: DataMode
    ) -> list[CoreProject]:
        """Worst-scheduled projects first, in the requested data mode."""
        async with self._sessions[mode]() as session:
            result = await session.execute(
                select(CoreProject)
                .where(CoreProject.tenant_id == tenant_id)
                .order_by(CoreProject.spi.asc())
                .limit(limit)
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Data mode preference
    # ------------------------------------------------------------------

    async def get_data_mode(self, tenant_id: str, user_id: str) -> str | None:
        async with self._sessions[DataMode.LIVE]() as session:
            result = await session.execute(
                select(DataModePreference.data_mode).where(
                    DataModePreference.tenant_id == tenant_id,
                    DataModePreference.user_id == user_id,
                )
            )
            return result.scalar_one_or_none()

    async def set_data_mode(self, tenant_id: str, user_id: str, mode: DataMode) -> None:
        now = datetime.now(timezone.utc)
        stmt = insert(DataModePreference).values(
            tenant_id=tenant_id,
            user_id=user_id,
            data_mode=mode.value,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DataModePreference.tenant_id, DataModePreference.user_id],
            set_={"data_mode": mode.value, "updated_at": now},
        )
        async with self._sessions[DataMode.LIVE]() as session:
            try:
                await session.execute(stmt)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    # ------------------------------------------------------------------
    # Sync state
    # ------------------------------------------------------------------

    async def get_client_config(self, tenant_id: str) -> ClientConfig | None:
        async with self._sessions[DataMode.LIVE]() as session:
            result = await session.execute(
                select(ClientConfig).where(ClientConfig.tenant_id == tenant_id)
            )
            return result.scalar_one_or_none()

    async def get_latest_batch(self, tenant_id: str, source: SyncSource) -> SyncBatch | None:
        async with self._sessions[DataMode.LIVE]() as session:
            result = await session.execute(
                select(SyncBatch)
                .where(
                    SyncBatch.tenant_id == tenant_id,
                    SyncBatch.source == source.value,
                )
                .order_by(SyncBatch.completed_at.desc().nulls_last())
                .limit(1)
            )
            return result.scalar_one_or_none()
