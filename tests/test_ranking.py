import pytest

from station_dashboard.models import AggregateRecord, success_rate
from station_dashboard.ranking import (
    RankingPolicy,
    assign_badges,
    low_performers,
    opportunities,
    podium,
    precision_threshold,
    top_performers,
    top_precision,
    top_simple,
)


def agg(name, total, delivered):
    return AggregateRecord(
        name=name,
        total=total,
        delivered=delivered,
        failed=total - delivered,
        days_worked=1,
        success_rate=success_rate(delivered, total),
    )


def test_policies_differ_on_low_volume_outlier():
    a = agg("A", 100, 96)
    b = agg("B", 10, 10)

    assert [x.name for x in top_performers([a, b], 1, RankingPolicy.PRECISION)] == ["A"]
    assert [x.name for x in top_performers([a, b], 1, RankingPolicy.SIMPLE, min_volume_floor=5)] == ["B"]


def test_precision_threshold():
    assert precision_threshold([]) == 5
    assert precision_threshold([agg("A", 10, 10), agg("B", 10, 10)]) == 5
    assert precision_threshold([agg("A", 100, 96), agg("B", 10, 10)]) == pytest.approx(11.0)


def test_precision_excludes_workers_below_threshold():
    pool = [agg(f"W{i}", total, total) for i, total in enumerate([3, 8, 40, 200, 300, 12])]
    threshold = precision_threshold(pool)
    result = top_precision(pool, 10)
    assert result
    assert all(a.total >= threshold for a in result)
    assert {a.name for a in result} == {a.name for a in pool if a.total >= threshold}


def test_precision_tie_window_orders_by_volume():
    # 95.0% vs 95.05%: within 0.1 points, so volume decides
    low_volume = agg("LOW", 2000, 1901)
    high_volume = agg("HIGH", 4000, 3800)
    assert abs(low_volume.success_rate - high_volume.success_rate) <= 0.1

    result = top_precision([low_volume, high_volume], 2)
    assert [a.name for a in result] == ["HIGH", "LOW"]


def test_precision_outside_tie_window_orders_by_rate():
    better = agg("BETTER", 200, 198)
    busier = agg("BUSIER", 1000, 950)
    result = top_precision([busier, better], 2)
    assert [a.name for a in result] == ["BETTER", "BUSIER"]


def test_precision_full_tie_falls_back_to_name():
    result = top_precision([agg("ZED", 50, 45), agg("AMY", 50, 45)], 2)
    assert [a.name for a in result] == ["AMY", "ZED"]


def test_simple_policy_floor_is_strict():
    result = top_simple([agg("FIVE", 5, 5), agg("SIX", 6, 5)], 10, min_volume_floor=5)
    assert [a.name for a in result] == ["SIX"]


def test_low_performers_ascending():
    pool = [agg("A", 10, 9), agg("B", 10, 5), agg("C", 10, 10)]
    assert [a.name for a in low_performers(pool, 2)] == ["B", "A"]


def test_opportunities_below_ninety():
    pool = [agg("A", 10, 9), agg("B", 10, 5), agg("C", 4, 1), agg("D", 20, 17)]
    assert [a.name for a in opportunities(pool)] == ["B", "D"]


def test_podium_requires_volume_above_twenty():
    pool = [agg("A", 20, 20), agg("B", 21, 20), agg("C", 50, 45), agg("D", 30, 27), agg("E", 40, 30)]
    assert [a.name for a in podium(pool)] == ["B", "C", "D"]


def test_top_n_truncates():
    pool = [agg(f"W{i}", 50, 40 + i) for i in range(8)]
    assert len(top_performers(pool, 3, RankingPolicy.PRECISION)) == 3
    assert len(top_performers(pool, 3, RankingPolicy.SIMPLE)) == 3


def test_unknown_policy_raises():
    with pytest.raises(ValueError):
        top_performers([], 1, "precision")


def test_badges():
    assert assign_badges(agg("A", 130, 130), rto=0) == ["sniper", "turbo", "guardian", "fire", "beast"]
    assert assign_badges(agg("B", 9, 9)) == []
    assert "guardian" not in assign_badges(agg("C", 30, 25))
    assert assign_badges(agg("D", 60, 59), rto=1) == ["fire"]
