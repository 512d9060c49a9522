from datetime import date

import pytest

from station_dashboard.kpis import (
    calc_trend,
    classify_rate,
    goal_calculation,
    goal_candidates,
    headline_stats,
)
from station_dashboard.models import (
    AggregateRecord,
    DailyRecord,
    ShipmentRecord,
    ShipmentStatus,
    StationTotal,
    WorkerDayEntry,
    success_rate,
)
from station_dashboard.simulator import generate_history


def test_success_rate_zero_total():
    assert success_rate(0, 0) == 0.0
    assert success_rate(5, 0) == 0.0


def test_success_rate_not_clamped():
    assert success_rate(12, 10) == pytest.approx(120.0)


def test_entry_ignores_stored_rate():
    entry = WorkerDayEntry("A", 10, 9, success_rate=12.0)
    assert entry.computed_success_rate == pytest.approx(90.0)
    assert entry.failed == 1


def test_status_counts_without_details():
    assert WorkerDayEntry("A", 3, 3).status_counts() == {"delivered": 0, "failed": 0, "ofd": 0, "rto": 0}


def test_shipment_from_dict_rejects_unknown_status():
    assert ShipmentRecord.from_dict({"id": "X", "status": "ignored"}) is None
    shipment = ShipmentRecord.from_dict({"id": " X1 ", "status": "OFD"})
    assert shipment.tracking_id == "X1"
    assert shipment.to_dict() == {"id": "X1", "status": "ofd"}


def test_daily_record_effective_total(record):
    rec = record(date(2026, 3, 2), ("A", 10, 9), station=StationTotal(50, 1))
    assert rec.effective_station_total().total == 10
    empty = DailyRecord(date(2026, 3, 3), StationTotal(40, 20))
    assert empty.effective_station_total().success_rate == pytest.approx(50.0)


def test_classify_rate_bands():
    assert classify_rate(97) == "excellent"
    assert classify_rate(95) == "excellent"
    assert classify_rate(92) == "good"
    assert classify_rate(85) == "average"
    assert classify_rate(10) == "poor"
    assert classify_rate(None) == "grey"


def test_calc_trend():
    assert calc_trend(110, 100) == pytest.approx(10.0)
    assert calc_trend(5, 0) == 0.0


def test_headline_stats_empty():
    stats = headline_stats(StationTotal(), [], 0)
    assert stats["overall_rate"] == 0.0
    assert stats["band"] == "grey"


def test_simulator_is_seeded_and_consistent():
    a = generate_history("2026-01-01", 10, seed=1, with_shipments=True)
    b = generate_history("2026-01-01", 10, seed=1, with_shipments=True)
    assert [r.to_dict() for r in a] == [r.to_dict() for r in b]
    for rec in a:
        assert rec.station_total.total == rec.recomputed_station_total().total
        for w in rec.workers:
            assert len(w.shipment_details) == w.total
            assert w.status_counts()["delivered"] == w.delivered


@pytest.mark.parametrize("raw, expected", [
    ("OUT_FOR_DELIVERY", ShipmentStatus.OFD),
    ("cash_in_associate", ShipmentStatus.DELIVERED),
    ("REJECTED", ShipmentStatus.RTO),
    ("DELIVERY_ATTEMPTED", ShipmentStatus.FAILED),
])
def test_shipment_from_dict_maps_carrier_statuses(raw, expected):
    assert ShipmentRecord.from_dict({"id": "T", "status": raw}).status is expected


def _aggregate(name, total, delivered):
    rate = delivered / total * 100 if total else 0.0
    return AggregateRecord(name, total, delivered, total - delivered, 1, rate)


def test_goal_calculation_reachable():
    calc = goal_calculation(_aggregate("A", 50, 40), 90, pending=8)
    assert calc.needed == 5
    assert calc.possible
    assert calc.max_rate == pytest.approx(96.0)


def test_goal_calculation_out_of_reach():
    calc = goal_calculation(_aggregate("A", 50, 40), 100, pending=4)
    assert calc.needed == 10
    assert not calc.possible
    assert calc.max_rate == pytest.approx(88.0)


def test_goal_calculation_already_met():
    calc = goal_calculation(_aggregate("A", 50, 50), 90, pending=0)
    assert calc.needed == 0
    assert not calc.possible


def test_goal_calculation_zero_total():
    calc = goal_calculation(_aggregate("A", 0, 0), 95, pending=0)
    assert (calc.needed, calc.possible, calc.max_rate) == (0, False, 0.0)


def test_goal_candidates_need_pending_and_room_to_improve():
    aggregates = [_aggregate("LOW", 50, 40), _aggregate("STUCK", 50, 40), _aggregate("TOP", 50, 50)]
    pending = {"LOW": 3, "TOP": 2}
    assert [a.name for a in goal_candidates(aggregates, 95, pending)] == ["LOW"]
