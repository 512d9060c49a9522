"""
Time-window rollup: per-worker and station totals over an inclusive date range.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from .models import AggregateRecord, DailyRecord, StationTotal, success_rate
from .transforms import build_fact_worker_day, filter_window

logger = logging.getLogger(__name__)

ROLLUP_COLUMNS = ["name", "total", "delivered", "failed", "days_worked", "success_rate"]


@dataclass
class RollupResult:
    per_worker: list[AggregateRecord] = field(default_factory=list)
    station_total: StationTotal = field(default_factory=StationTotal)
    days: int = 0


def rollup_frame(
    records: Iterable[DailyRecord],
    start: date | None = None,
    end: date | None = None,
    alias_map: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Aggregate the window to one row per canonical worker.

    Rules
    -----
    - total, delivered: sum over every entry in the window
    - failed: total - delivered
    - days_worked: number of distinct dates the worker appears on
    - success_rate: delivered / total * 100, computed after summing

    Returns
    -------
    DataFrame with columns:
        name, total, delivered, failed, days_worked, success_rate
    Row order is not significant.
    """
    window = filter_window(records, start, end)
    fact = build_fact_worker_day(window, alias_map)

    if fact.empty:
        logger.warning("No worker entries between %s and %s", start, end)
        return pd.DataFrame(columns=ROLLUP_COLUMNS)

    result = (
        fact.groupby("worker")
        .agg(
            total=("total", "sum"),
            delivered=("delivered", "sum"),
            days_worked=("date", "nunique"),
        )
        .reset_index()
        .rename(columns={"worker": "name"})
    )
    result["failed"] = result["total"] - result["delivered"]
    result["success_rate"] = [
        success_rate(d, t) for d, t in zip(result["delivered"], result["total"])
    ]

    logger.info("Rolled up %d records into %d workers", len(window), len(result))
    return result[ROLLUP_COLUMNS]


def rollup(
    records: Iterable[DailyRecord],
    start: date | None = None,
    end: date | None = None,
    alias_map: Mapping[str, str] | None = None,
) -> RollupResult:
    """Sum worker metrics over ``start <= date <= end``.

    An empty window yields no workers and a zeroed station total. The station
    total is recomputed from the worker entries, never read from storage.
    """
    records = list(records)
    days = len(filter_window(records, start, end))
    df = rollup_frame(records, start, end, alias_map)

    per_worker = [
        AggregateRecord(
            name=row.name,
            total=int(row.total),
            delivered=int(row.delivered),
            failed=int(row.failed),
            days_worked=int(row.days_worked),
            success_rate=float(row.success_rate),
        )
        for row in df.itertuples(index=False)
    ]

    total = sum(a.total for a in per_worker)
    delivered = sum(a.delivered for a in per_worker)
    station = StationTotal(total, delivered, success_rate(delivered, total))

    return RollupResult(per_worker=per_worker, station_total=station, days=days)
