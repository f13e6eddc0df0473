"""Fixed demonstration data served when the store cannot answer."""

from datetime import datetime, timedelta, timezone

from orion.models.enums import HealthStatus, SyncState
from orion.schemas.evm import EVMProjectMetrics
from orion.schemas.portfolio import PortfolioSummary, ProjectHealth
from orion.schemas.sync import SyncStatus, SystemSyncStatus

DEMO_EVM_PROJECTS: tuple[EVMProjectMetrics, ...] = (
    EVMProjectMetrics(
        project_id="10481", project_name="AKK SEG-1 Gas Pipeline", snapshot_date="2026-01-01",
        percent_complete=77, bac=250_000_000, pv=235_000_000, ev=192_500_000, ac=80_000_000,
        sv=-42_500_000, cv=112_500_000, vac=145_833_333, spi=0.83, cpi=2.40, tcpi=0.65,
        eac=104_166_667, etc=24_166_667,
    ),
    EVMProjectMetrics(
        project_id="OSLNNPC", project_name="NNPC - NLNG Project", snapshot_date="2026-01-01",
        percent_complete=92, bac=400_000_000, pv=380_000_000, ev=368_000_000, ac=375_510_204,
        sv=-12_000_000, cv=-7_510_204, vac=-8_163_265, spi=1.05, cpi=0.98, tcpi=1.31,
        eac=408_163_265, etc=32_653_061,
    ),
    EVMProjectMetrics(
        project_id="OSLSDPC", project_name="SDPC Project", snapshot_date="2026-01-01",
        percent_complete=45, bac=180_000_000, pv=112_500_000, ev=81_000_000, ac=91_800_000,
        sv=-31_500_000, cv=-10_800_000, vac=-24_545_455, spi=0.72, cpi=0.88, tcpi=1.12,
        eac=204_545_455, etc=112_745_455,
    ),
    EVMProjectMetrics(
        project_id="OSLUBET", project_name="UBET Project", snapshot_date="2026-01-01",
        percent_complete=68, bac=150_000_000, pv=112_000_000, ev=102_000_000, ac=108_510_638,
        sv=-10_000_000, cv=-6_510_638, vac=-9_574_468, spi=0.91, cpi=0.94, tcpi=1.16,
        eac=159_574_468, etc=51_063_830,
    ),
    EVMProjectMetrics(
        project_id="OSLOB3", project_name="OB3 Project", snapshot_date="2026-01-01",
        percent_complete=85, bac=120_000_000, pv=105_000_000, ev=102_000_000, ac=100_000_000,
        sv=-3_000_000, cv=2_000_000, vac=2_352_941, spi=0.97, cpi=1.02, tcpi=0.90,
        eac=117_647_059, etc=17_647_059,
    ),
)

DEMO_PORTFOLIO_SUMMARY = PortfolioSummary(
    total_projects=5,
    on_track=2,
    at_risk=2,
    critical=1,
)

DEMO_PROJECT_HEALTH: tuple[ProjectHealth, ...] = (
    ProjectHealth(
        id="10481", name="AKK SEG-1 Gas Pipeline Project", percent_complete=77,
        spi=0.83, cpi=2.40, status=HealthStatus.CRITICAL,
        planned_finish="2025-12-31", data_date="2026-01-01",
    ),
    ProjectHealth(
        id="OSLNNPC", name="NNPC - NLNG Project", percent_complete=92,
        spi=1.05, cpi=0.98, status=HealthStatus.ON_TRACK,
        planned_finish="2026-06-30", data_date="2026-01-01",
    ),
    ProjectHealth(
        id="OSLSDPC", name="SDPC Project", percent_complete=45,
        spi=0.72, cpi=0.88, status=HealthStatus.CRITICAL,
        planned_finish="2027-03-15", data_date="2026-01-01",
    ),
    ProjectHealth(
        id="OSLUBET", name="UBET Project", percent_complete=68,
        spi=0.91, cpi=0.94, status=HealthStatus.AT_RISK,
        planned_finish="2026-09-30", data_date="2026-01-01",
    ),
    ProjectHealth(
        id="OSLOB3", name="OB3 Project", percent_complete=85,
        spi=0.97, cpi=1.02, status=HealthStatus.ON_TRACK,
        planned_finish="2026-04-15", data_date="2026-01-01",
    ),
)


def demo_sync_status(now: datetime | None = None) -> SyncStatus:
    """Both systems connected and recently synced, relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    return SyncStatus(
        p6=SystemSyncStatus(
            connected=True,
            last_sync=now - timedelta(minutes=15),
            status=SyncState.SUCCESS,
        ),
        sap=SystemSyncStatus(
            connected=True,
            last_sync=now - timedelta(minutes=30),
            status=SyncState.SUCCESS,
        ),
        next_scheduled=now + timedelta(minutes=45),
    )
