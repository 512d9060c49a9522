"""
Delivery Station — Performance Reporting Dashboard

Rollup and pivot engine over daily per-worker delivery outcomes, with
alias-aware identity resolution and volume-aware leaderboards.

To swap the JSON history for a database feed:
    Replace the functions in station_dashboard.loaders with queries that
    return DailyRecord lists. The engine only ever reads whole records.

To connect to Streamlit/Dash:
    Call dashboard.get_overview(records, start, end, aliases) or
    dashboard.get_advanced_report(...) to get plain dicts suitable for
    rendering cards, trend charts (Plotly) and leaderboard tables.

To change leaderboard rules:
    Adjust the ranking thresholds in config (MIN_VOLUME_FLOOR,
    PRECISION_VOLUME_FRACTION, RATE_TIE_TOLERANCE).
"""

from .identity import AliasCycleError, AliasStore, normalize_name, rename, resolve
from .models import AggregateRecord, DailyRecord, ShipmentRecord, StationTotal, WorkerDayEntry
from .pivot import PivotMatrix, PivotMode, build_pivot
from .ranking import RankingPolicy, top_performers
from .rollup import RollupResult, rollup
from .trends import TrendSummary, analyze

__all__ = [
    "AliasCycleError",
    "AliasStore",
    "normalize_name",
    "rename",
    "resolve",
    "AggregateRecord",
    "DailyRecord",
    "ShipmentRecord",
    "StationTotal",
    "WorkerDayEntry",
    "PivotMatrix",
    "PivotMode",
    "build_pivot",
    "RankingPolicy",
    "top_performers",
    "RollupResult",
    "rollup",
    "TrendSummary",
    "analyze",
]
