"""
Calendar analytics over a set of daily records: best/worst/busiest day,
weekday volume averages and the daily station trend series.

Extremes are found over records sorted by date, and only a strictly better
value replaces the current pick, so the earliest date wins a tie.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from .config import WEEKDAY_LABELS
from .models import DailyRecord
from .transforms import build_fact_station_day

logger = logging.getLogger(__name__)


@dataclass
class TrendSummary:
    best_day: DailyRecord | None = None
    worst_day: DailyRecord | None = None
    busiest_day: DailyRecord | None = None
    best_weekday: str | None = None
    avg_daily_volume: int = 0
    weekday_averages: dict[str, float] = field(default_factory=dict)


def weekday_averages(records: Iterable[DailyRecord]) -> dict[str, float]:
    """Mean station volume per weekday label, for weekdays that occur.

    Keys are in order of first occurrence by date.
    """
    sums: dict[str, list[int]] = {}
    for rec in sorted(records, key=lambda r: r.date):
        label = WEEKDAY_LABELS[rec.date.weekday()]
        bucket = sums.setdefault(label, [0, 0])
        bucket[0] += rec.effective_station_total().total
        bucket[1] += 1
    return {label: total / count for label, (total, count) in sums.items()}


def analyze(records: Iterable[DailyRecord]) -> TrendSummary:
    """Compute best/worst/busiest day, best weekday and average daily volume.

    An empty record set returns a summary with no days and zero volume.
    """
    records = sorted(records, key=lambda r: r.date)
    if not records:
        logger.warning("No records to analyse; returning empty trend summary")
        return TrendSummary()

    best = worst = busiest = records[0]
    best_rate = worst_rate = best.effective_station_total().computed_success_rate
    busiest_volume = busiest.effective_station_total().total
    grand_total = 0

    for rec in records:
        station = rec.effective_station_total()
        rate = station.computed_success_rate
        grand_total += station.total
        if rate > best_rate:
            best, best_rate = rec, rate
        if rate < worst_rate:
            worst, worst_rate = rec, rate
        if station.total > busiest_volume:
            busiest, busiest_volume = rec, station.total

    averages = weekday_averages(records)
    best_weekday = None
    best_avg = -math.inf
    for label, avg in averages.items():
        if avg > best_avg:
            best_weekday, best_avg = label, avg

    # Half-up rounding of a non-negative mean
    avg_daily = math.floor(grand_total / len(records) + 0.5)

    return TrendSummary(
        best_day=best,
        worst_day=worst,
        busiest_day=busiest,
        best_weekday=best_weekday,
        avg_daily_volume=int(avg_daily),
        weekday_averages=averages,
    )


def station_trend(records: Iterable[DailyRecord]) -> pd.DataFrame:
    """Date-sorted daily series for charts.

    Returns
    -------
    DataFrame with columns:
        date, volume, delivered, rate (percent)
    """
    df = build_fact_station_day(records)
    if df.empty:
        return pd.DataFrame(columns=["date", "volume", "delivered", "rate"])

    df = df.rename(columns={"total": "volume"})
    df["rate"] = [
        d / t * 100 if t else 0.0 for d, t in zip(df["delivered"], df["volume"])
    ]
    return df[["date", "volume", "delivered", "rate"]]
