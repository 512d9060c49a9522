"""
Data transforms: flatten daily history records into long fact tables and
scope them to a date window.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date

import pandas as pd

from .identity import resolve
from .models import DailyRecord

logger = logging.getLogger(__name__)

FACT_WORKER_DAY_COLUMNS = ["date", "worker", "raw_name", "total", "delivered"]
FACT_STATION_DAY_COLUMNS = ["date", "total", "delivered"]


def filter_window(
    records: Iterable[DailyRecord],
    start: date | None = None,
    end: date | None = None,
) -> list[DailyRecord]:
    """Return records with ``start <= date <= end``, sorted by date.

    A missing bound is open on that side.
    """
    kept = [
        rec for rec in records
        if (start is None or rec.date >= start) and (end is None or rec.date <= end)
    ]
    kept.sort(key=lambda rec: rec.date)
    return kept


def build_fact_worker_day(
    records: Iterable[DailyRecord],
    alias_map: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Melt history records into one row per (date, worker entry).

    Parameters
    ----------
    records : Daily history records.
    alias_map : Alias map used to resolve each raw name to its canonical name.

    Returns
    -------
    fact_worker_day DataFrame with columns:
        date, worker, raw_name, total, delivered
    """
    rows = []
    for rec in records:
        for entry in rec.workers:
            rows.append({
                "date": rec.date,
                "worker": resolve(entry.name, alias_map),
                "raw_name": entry.name,
                "total": int(entry.total),
                "delivered": int(entry.delivered),
            })

    if not rows:
        return pd.DataFrame(columns=FACT_WORKER_DAY_COLUMNS).astype(
            {"total": "int64", "delivered": "int64"}
        )

    df = pd.DataFrame(rows, columns=FACT_WORKER_DAY_COLUMNS)
    logger.debug("Built fact_worker_day with %d rows", len(df))
    return df


def build_fact_station_day(records: Iterable[DailyRecord]) -> pd.DataFrame:
    """One row per date with the station total recomputed from worker entries.

    Records without worker entries fall back to their stored station total.

    Returns
    -------
    fact_station_day DataFrame with columns:
        date, total, delivered
    """
    rows = []
    for rec in records:
        station = rec.effective_station_total()
        rows.append({
            "date": rec.date,
            "total": station.total,
            "delivered": station.delivered,
        })

    if not rows:
        return pd.DataFrame(columns=FACT_STATION_DAY_COLUMNS)

    df = pd.DataFrame(rows, columns=FACT_STATION_DAY_COLUMNS).sort_values("date")
    return df.reset_index(drop=True)
