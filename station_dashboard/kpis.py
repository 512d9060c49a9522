"""
Rate helpers — pure functions with no side effects.

Provides rate band classification, period-over-period trend, the
station-level headline stats used by the dashboard cards and the
per-worker goal calculator.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

import pandas as pd

from .config import RATE_BANDS
from .models import AggregateRecord, StationTotal, success_rate

logger = logging.getLogger(__name__)


def calc_trend(current: float, previous: float) -> float:
    """Return the percentage change from ``previous`` to ``current``.

    0 when there is no previous value to compare against.
    """
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


def classify_rate(rate: float | None) -> str:
    """Return 'excellent', 'good', 'average', 'poor' or 'grey' for a percent rate.

    Logic
    -----
    excellent  if rate >= 95
    good       if rate >= 90
    average    if rate >= 80
    poor       otherwise
    grey       if rate is missing
    """
    if rate is None or pd.isna(rate):
        return "grey"
    for band in ("excellent", "good", "average"):
        if rate >= RATE_BANDS[band]:
            return band
    return "poor"


def headline_stats(
    station_total: StationTotal,
    aggregates: list[AggregateRecord],
    days: int,
) -> dict:
    """Return a dict suitable for top-level dashboard cards.

    Returns
    -------
    {
        "total_volume": ..., "total_delivered": ..., "total_failed": ...,
        "overall_rate": ..., "active_workers": ..., "total_days": ...,
        "band": "good",
    }
    """
    rate = success_rate(station_total.delivered, station_total.total)
    return {
        "total_volume": station_total.total,
        "total_delivered": station_total.delivered,
        "total_failed": station_total.total - station_total.delivered,
        "overall_rate": rate,
        "active_workers": len(aggregates),
        "total_days": days,
        "band": classify_rate(rate) if station_total.total else "grey",
    }


@dataclass(frozen=True)
class GoalCalculation:
    needed: int
    possible: bool
    max_rate: float


def goal_calculation(aggregate: AggregateRecord, target: float, pending: int) -> GoalCalculation:
    """How many pending shipments a worker must convert to reach ``target`` percent.

    ``pending`` counts the shipments still convertible to delivered
    (out for delivery plus failed attempts). The goal is possible only
    when at least one and at most ``pending`` conversions are needed.

    Returns
    -------
    GoalCalculation(needed, possible, max_rate)
    """
    if aggregate.total == 0:
        return GoalCalculation(needed=0, possible=False, max_rate=0.0)
    needed = math.ceil(target / 100 * aggregate.total - aggregate.delivered)
    return GoalCalculation(
        needed=max(0, needed),
        possible=0 < needed <= pending,
        max_rate=success_rate(aggregate.delivered + pending, aggregate.total),
    )


def goal_candidates(
    aggregates: list[AggregateRecord],
    target: float,
    pending: Mapping[str, int],
) -> list[AggregateRecord]:
    """Workers below ``target`` who still have pending shipments."""
    return [a for a in aggregates if a.success_rate < target and pending.get(a.name, 0) > 0]
