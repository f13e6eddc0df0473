"""
tests/test_evm.py

Latest-snapshot selection and the derived EVM metric set:
- one row per project, independent of input order
- EAC = BAC / CPI (BAC when CPI <= 0), ETC = EAC - AC, VAC = BAC - EAC
- null money counts as 0, null indices as 1
- half-up rounding of money and indices
"""

import itertools
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from conftest import FakeStore, make_snapshot
from orion.services.evm import (
    UNNAMED_PROJECT,
    compute_metrics,
    get_project_metrics,
    latest_per_project,
    round_half_up,
    round_money,
)
from orion.services.sourcing import FallbackReason


def _rows():
    return [
        make_snapshot("P1", date(2026, 1, 1), project_name="January"),
        make_snapshot("P1", date(2026, 3, 1), project_name="March"),
        make_snapshot("P1", date(2026, 2, 1), project_name="February"),
        make_snapshot("P2", date(2025, 12, 1), project_name="Only"),
    ]


@pytest.mark.parametrize("order", list(itertools.permutations(range(4))))
def test_latest_per_project_ignores_input_order(order):
    rows = _rows()
    latest = latest_per_project([rows[i] for i in order])

    by_id = {s.project_id: s.project_name for s in latest}
    assert by_id == {"P1": "March", "P2": "Only"}


def test_latest_per_project_tie_keeps_first_row():
    first = make_snapshot("P1", date(2026, 1, 1), project_name="first")
    second = make_snapshot("P1", date(2026, 1, 1), project_name="second")

    assert [s.project_name for s in latest_per_project([first, second])] == ["first"]


def test_compute_metrics_core_values():
    m = compute_metrics(make_snapshot())

    assert m.sv == -50
    assert m.cv == 50
    # 1000 / 1.125 = 888.89
    assert m.eac == 889
    assert m.etc == 889 - 400
    assert m.vac == 1000 - 889
    # (1000 - 450) / (1000 - 400) = 0.9167
    assert m.tcpi == 0.92
    assert m.spi == 0.9
    assert m.cpi == 1.13
    assert m.snapshot_date == "2026-01-01"


@pytest.mark.parametrize("cpi", [0, -0.5])
def test_eac_falls_back_to_bac_when_cpi_not_positive(cpi):
    m = compute_metrics(make_snapshot(cpi=cpi))

    assert m.eac == 1000
    assert m.vac == 0
    assert m.etc == 600


def test_eac_identities_hold_after_rounding():
    m = compute_metrics(make_snapshot(bac=1234.56, ac=321.09, cpi=0.87))

    # 1234.56 / 0.87 = 1419.03
    assert m.eac == 1419
    assert m.etc == round_money(m.eac - 321.09) == 1098
    assert m.vac == round_money(1234.56 - m.eac) == -184


def test_null_fields_use_defaults():
    m = compute_metrics(make_snapshot(
        bac=None, pv=None, ev=None, ac=None, spi=None, cpi=None,
        percent_complete=None, project_name=None,
    ))

    assert (m.bac, m.pv, m.ev, m.ac) == (0, 0, 0, 0)
    assert (m.spi, m.cpi) == (1.0, 1.0)
    assert m.eac == 0
    # bac - ac is 0, so tcpi defaults to 1
    assert m.tcpi == 1.0
    assert m.project_name == UNNAMED_PROJECT
    assert m.percent_complete == 0


def test_missing_snapshot_date_defaults_to_today():
    m = compute_metrics(make_snapshot(snapshot_date=None))
    assert m.snapshot_date == date.today().isoformat()


def test_rounding_is_half_up():
    assert round_money(2.5) == 3
    assert round_money(-2.5) == -2
    assert round_money(-0.5) == 0
    assert round_half_up(0.125, 2) == 0.13

    m = compute_metrics(make_snapshot(ev=100.5, pv=100, ac=101))
    assert m.sv == 1
    assert m.cv == 0


def test_json_uses_camel_case():
    payload = compute_metrics(make_snapshot()).model_dump(by_alias=True)
    assert {"projectId", "projectName", "snapshotDate", "percentComplete"} <= payload.keys()


async def test_get_project_metrics_from_store():
    store = FakeStore(snapshots=_rows())

    result = await get_project_metrics(store, "tenant-1")

    assert not result.is_fallback
    assert result.source == "postgres:orion_evm.project_snapshots"
    assert sorted(p.project_id for p in result.data) == ["P1", "P2"]


@pytest.mark.parametrize(
    "store, reason",
    [
        (None, FallbackReason.UNCONFIGURED),
        (FakeStore(error=OperationalError("SELECT", {}, Exception("down"))), FallbackReason.UNAVAILABLE),
        (FakeStore(), FallbackReason.EMPTY),
    ],
)
async def test_get_project_metrics_falls_back(store, reason):
    result = await get_project_metrics(store, "tenant-1")

    assert result.source == "mock"
    assert result.fallback_reason == reason
    assert len(result.data) == 5
