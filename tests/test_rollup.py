from collections import defaultdict
from datetime import date

import pytest

from station_dashboard.identity import resolve
from station_dashboard.models import StationTotal
from station_dashboard.rollup import rollup, rollup_frame
from station_dashboard.simulator import generate_aliases, generate_history


def naive_totals(records, alias_map=None):
    totals = defaultdict(lambda: [0, 0])
    for rec in records:
        for w in rec.workers:
            bucket = totals[resolve(w.name, alias_map)]
            bucket[0] += w.total
            bucket[1] += w.delivered
    return {name: tuple(v) for name, v in totals.items()}


def test_rollup_matches_naive_reference_on_simulated_history():
    history = generate_history("2026-01-01", 60, seed=7)
    aliases = generate_aliases()

    result = rollup(history, history[0].date, history[-1].date, aliases)

    got = {a.name: (a.total, a.delivered) for a in result.per_worker}
    assert got == naive_totals(history, aliases)
    assert result.days == 60


def test_rollup_window_is_inclusive(march_records):
    result = rollup(march_records, date(2026, 3, 2), date(2026, 3, 11))
    by_name = {a.name: a for a in result.per_worker}

    assert set(by_name) == {"JOHN", "SARA", "ALI"}
    assert by_name["JOHN"].total == 110
    assert by_name["JOHN"].days_worked == 2
    assert result.days == 2


def test_rollup_rate_is_sum_then_divide(record):
    records = [
        record(date(2026, 3, 1), ("A", 100, 100)),
        record(date(2026, 3, 2), ("A", 1, 0)),
    ]
    a = rollup(records).per_worker[0]
    # mean of daily rates would be 50%
    assert a.success_rate == pytest.approx(100 / 101 * 100)
    assert a.failed == 1


def test_rollup_counts_days_once_per_record_after_resolution(record):
    records = [record(date(2026, 3, 1), ("Jon", 5, 5), ("JON ", 3, 2))]
    a = rollup(records).per_worker[0]
    assert a.name == "JON"
    assert a.total == 8
    assert a.days_worked == 1


def test_rollup_keeps_zero_volume_worker_seen_in_window(record):
    records = [record(date(2026, 3, 1), ("Idle", 0, 0), ("Busy", 10, 9))]
    by_name = {a.name: a for a in rollup(records).per_worker}
    assert by_name["IDLE"].total == 0
    assert by_name["IDLE"].success_rate == 0.0


def test_rollup_ignores_workers_outside_window(march_records):
    result = rollup(march_records, date(2026, 3, 31), date(2026, 3, 31))
    assert [a.name for a in result.per_worker] == ["JOHN"]


def test_rollup_empty_window_is_zeroed(march_records):
    result = rollup(march_records, date(2025, 1, 1), date(2025, 1, 31))
    assert result.per_worker == []
    assert result.station_total == StationTotal(0, 0, 0.0)
    assert result.days == 0


def test_rollup_of_empty_history():
    result = rollup([])
    assert result.per_worker == []
    assert result.station_total.total == 0


def test_rollup_recomputes_station_total_from_workers(record):
    bogus = StationTotal(total=999, delivered=1, success_rate=0.1)
    records = [record(date(2026, 3, 1), ("A", 10, 8), station=bogus)]
    result = rollup(records)
    assert result.station_total.total == 10
    assert result.station_total.delivered == 8
    assert result.station_total.success_rate == pytest.approx(80.0)


def test_rollup_surfaces_inconsistent_rates_unclamped(record):
    records = [record(date(2026, 3, 1), ("A", 4, 5))]
    a = rollup(records).per_worker[0]
    assert a.success_rate == pytest.approx(125.0)
    assert a.failed == -1


def test_rollup_frame_columns(march_records):
    df = rollup_frame(march_records)
    assert list(df.columns) == ["name", "total", "delivered", "failed", "days_worked", "success_rate"]
    assert df["total"].sum() == sum(w.total for r in march_records for w in r.workers)
