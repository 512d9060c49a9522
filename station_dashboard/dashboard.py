"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end.
Each function returns plain dicts, dataclasses or DataFrames suitable for
rendering cards, charts, leaderboards and tables.
"""

import calendar
import logging
from collections.abc import Mapping, Sequence
from datetime import date, timedelta

import pandas as pd

from .config import LEADERBOARD_SIZE, MIN_VOLUME_FLOOR
from .identity import resolve
from .kpis import calc_trend, goal_candidates, headline_stats
from .models import AggregateRecord, DailyRecord, ShipmentStatus
from .pivot import build_pivot
from .ranking import low_performers, opportunities, podium, top_precision, top_simple
from .rollup import rollup
from .transforms import filter_window
from .trends import analyze, station_trend

logger = logging.getLogger(__name__)


def _by_rate(aggregates: Sequence[AggregateRecord]) -> list[AggregateRecord]:
    ranked = sorted(aggregates, key=lambda a: a.name)
    ranked.sort(key=lambda a: a.success_rate, reverse=True)
    return ranked


def get_overview(
    records: Sequence[DailyRecord],
    start: date | None = None,
    end: date | None = None,
    alias_map: Mapping[str, str] | None = None,
    search: str = "",
) -> dict:
    """Overview tab: headline stats, simple-policy leaderboards and the trend.

    Returns
    -------
    {
        "stats": {...headline_stats...},
        "top": [AggregateRecord], "low": [AggregateRecord],
        "workers": [AggregateRecord] sorted by rate, filtered by ``search``,
        "trend": DataFrame(date, volume, delivered, rate),
        "deltas": {"total_volume": %, "total_delivered": %, "overall_rate": %},
    }

    ``deltas`` compare against the window of the same length ending the day
    before ``start``; it is empty when the window is open-ended.
    """
    result = rollup(records, start, end, alias_map)
    window = filter_window(records, start, end)
    stats = headline_stats(result.station_total, result.per_worker, result.days)

    workers = _by_rate(result.per_worker)
    if search:
        needle = search.lower()
        workers = [a for a in workers if needle in a.name.lower()]

    deltas = {}
    if start is not None and end is not None:
        span = end - start + timedelta(days=1)
        prev = rollup(records, start - span, start - timedelta(days=1), alias_map)
        prev_stats = headline_stats(prev.station_total, prev.per_worker, prev.days)
        deltas = {
            key: calc_trend(stats[key], prev_stats[key])
            for key in ("total_volume", "total_delivered", "overall_rate")
        }

    return {
        "stats": stats,
        "deltas": deltas,
        "top": top_simple(result.per_worker, LEADERBOARD_SIZE, MIN_VOLUME_FLOOR),
        "low": low_performers(result.per_worker, LEADERBOARD_SIZE, MIN_VOLUME_FLOOR),
        "workers": workers,
        "trend": station_trend(window),
    }


def report_window(
    report_type: str,
    year: int | None = None,
    month: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> tuple[date | None, date | None, str]:
    """Return (start, end, title) for a 'yearly', 'monthly' or 'custom' report."""
    if report_type == "yearly":
        return date(year, 1, 1), date(year, 12, 31), f"Yearly Report - {year}"
    if report_type == "monthly":
        last = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last), f"Monthly Report - {month}/{year}"
    if report_type == "custom":
        return start, end, f"Custom Range ({start} - {end})"
    raise ValueError(f"Unknown report type: {report_type!r}")


def get_advanced_report(
    records: Sequence[DailyRecord],
    report_type: str = "monthly",
    year: int | None = None,
    month: int | None = None,
    start: date | None = None,
    end: date | None = None,
    alias_map: Mapping[str, str] | None = None,
) -> dict:
    """Advanced tab: precision leaderboard, podium, calendar insights and pivot.

    Returns
    -------
    {
        "title": str,
        "report": [AggregateRecord] sorted by rate,
        "top10": precision-policy leaderboard,
        "podium": up to three workers,
        "stats": {...headline_stats..., "avg_daily_volume", "best_weekday",
                  "best_day", "worst_day", "busiest_day"},
        "trend": DataFrame, "pivot": PivotMatrix, "records": [DailyRecord],
    }
    """
    start, end, title = report_window(report_type, year, month, start, end)
    window = filter_window(records, start, end)
    result = rollup(window, alias_map=alias_map)
    summary = analyze(window)

    stats = headline_stats(result.station_total, result.per_worker, result.days)
    stats.update({
        "avg_daily_volume": summary.avg_daily_volume,
        "best_weekday": summary.best_weekday,
        "best_day": summary.best_day,
        "worst_day": summary.worst_day,
        "busiest_day": summary.busiest_day,
    })

    return {
        "title": title,
        "report": _by_rate(result.per_worker),
        "top10": top_precision(result.per_worker, LEADERBOARD_SIZE),
        "podium": podium(result.per_worker),
        "stats": stats,
        "trend": station_trend(window),
        "pivot": build_pivot(window, alias_map),
        "records": window,
    }


def filter_report(
    aggregates: Sequence[AggregateRecord],
    search: str = "",
    min_volume: int = 0,
    min_rate: float = 0.0,
    max_rate: float = 100.0,
) -> list[AggregateRecord]:
    """Table filters: name substring, minimum volume and a rate range."""
    needle = search.lower()
    return [
        a for a in aggregates
        if needle in a.name.lower()
        and a.total >= min_volume
        and min_rate <= a.success_rate <= max_rate
    ]


def pending_counts(
    records: Sequence[DailyRecord],
    alias_map: Mapping[str, str] | None = None,
) -> dict[str, int]:
    """Shipments per canonical worker that could still turn into deliveries.

    Counts out-for-delivery and failed shipments. Entries without shipment
    details count every undelivered shipment as pending.
    """
    pending: dict[str, int] = {}
    for rec in records:
        for entry in rec.workers:
            name = resolve(entry.name, alias_map)
            if entry.shipment_details is None:
                n = entry.failed
            else:
                counts = entry.status_counts()
                n = counts["ofd"] + counts["failed"]
            pending[name] = pending.get(name, 0) + n
    return pending


def get_standup(
    records: Sequence[DailyRecord],
    start: date | None = None,
    end: date | None = None,
    alias_map: Mapping[str, str] | None = None,
    target: float = 95.0,
) -> dict:
    """Stand-up tab: worst workers under the opportunity cut-off and goal candidates.

    Returns
    -------
    {
        "opportunities": [AggregateRecord], worst first,
        "candidates": [AggregateRecord] below ``target`` with pending shipments,
        "pending": {name: pending shipments},
    }
    """
    window = filter_window(records, start, end)
    result = rollup(window, alias_map=alias_map)
    pending = pending_counts(window, alias_map)
    return {
        "opportunities": opportunities(result.per_worker),
        "candidates": goal_candidates(_by_rate(result.per_worker), target, pending),
        "pending": pending,
    }


def get_worker_history(
    records: Sequence[DailyRecord],
    name: str,
    alias_map: Mapping[str, str] | None = None,
) -> dict:
    """Per-day history for one worker plus shipment status counts.

    Returns
    -------
    {
        "name": canonical name,
        "history": DataFrame(date, total, delivered, failed, rate),
        "status_counts": {"delivered": n, "failed": n, "ofd": n, "rto": n},
    }
    """
    canonical = resolve(name, alias_map)
    rows = []
    counts = {s.value: 0 for s in ShipmentStatus}

    for rec in sorted(records, key=lambda r: r.date):
        entries = [w for w in rec.workers if resolve(w.name, alias_map) == canonical]
        if not entries:
            continue
        total = sum(w.total for w in entries)
        delivered = sum(w.delivered for w in entries)
        for w in entries:
            for status, n in w.status_counts().items():
                counts[status] += n
        rows.append({
            "date": rec.date,
            "total": total,
            "delivered": delivered,
            "failed": total - delivered,
            "rate": delivered / total * 100 if total else 0.0,
        })

    history = pd.DataFrame(rows, columns=["date", "total", "delivered", "failed", "rate"])
    return {"name": canonical, "history": history, "status_counts": counts}


def search_tracking(
    records: Sequence[DailyRecord],
    query: str,
    alias_map: Mapping[str, str] | None = None,
    status: str | None = None,
) -> pd.DataFrame:
    """Find shipments whose tracking id or note contains ``query``.

    Returns
    -------
    DataFrame with columns:
        date, worker, tracking_id, status, note
    """
    needle = query.strip().lower()
    rows = []
    for rec in sorted(records, key=lambda r: r.date):
        for entry in rec.workers:
            for shipment in entry.shipment_details or []:
                if status and shipment.status.value != status:
                    continue
                haystack = [shipment.tracking_id.lower(), (shipment.note or "").lower()]
                if needle and not any(needle in h for h in haystack):
                    continue
                rows.append({
                    "date": rec.date,
                    "worker": resolve(entry.name, alias_map),
                    "tracking_id": shipment.tracking_id,
                    "status": shipment.status.value,
                    "note": shipment.note,
                })

    logger.debug("Tracking search '%s' matched %d shipments", query, len(rows))
    return pd.DataFrame(rows, columns=["date", "worker", "tracking_id", "status", "note"])


def get_available_years(records: Sequence[DailyRecord]) -> list[int]:
    """Years present in the history, newest first, for UI dropdowns."""
    return sorted({rec.date.year for rec in records}, reverse=True)


def get_worker_directory(
    records: Sequence[DailyRecord],
    alias_map: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Alias-management listing: one row per canonical worker, busiest first.

    Returns
    -------
    DataFrame with columns:
        name, total, delivered, days_worked, last_seen
    """
    result = rollup(records, alias_map=alias_map)
    last_seen: dict[str, date] = {}
    for rec in records:
        for w in rec.workers:
            canonical = resolve(w.name, alias_map)
            if canonical not in last_seen or rec.date > last_seen[canonical]:
                last_seen[canonical] = rec.date

    rows = [
        {
            "name": a.name,
            "total": a.total,
            "delivered": a.delivered,
            "days_worked": a.days_worked,
            "last_seen": last_seen.get(a.name),
        }
        for a in result.per_worker
    ]
    df = pd.DataFrame(rows, columns=["name", "total", "delivered", "days_worked", "last_seen"])
    return df.sort_values(["total", "name"], ascending=[False, True]).reset_index(drop=True)
