"""
Configuration: file paths, reporting thresholds, pivot layouts, status mapping.

RATE_BANDS maps each performance band to the minimum success rate (percent)
a worker or station needs to land in it.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths — adjust these if the history store moves
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

HISTORY_FILE = DATA_DIR / "history.json"
ALIASES_FILE = DATA_DIR / "aliases.json"
EXPORT_DIR = DATA_DIR / "exports"

# ---------------------------------------------------------------------------
# Station identity
# ---------------------------------------------------------------------------
STATION_NAME = "DQN3"
GRAND_TOTAL_LABEL = "GRAND TOTAL"

# ---------------------------------------------------------------------------
# Shipment status mapping
# ---------------------------------------------------------------------------
# Raw carrier statuses -> engine status. Anything unmapped is ignored.
STATUS_MAPPING: dict[str, str] = {
    "DELIVERED": "delivered",
    "CASH_IN_ASSOCIATE": "delivered",
    "SUCCESS": "delivered",
    "AT_STATION": "ofd",
    "ON_ROAD_WITH_DELIVERY_ASSOCIATE": "ofd",
    "OUT_FOR_DELIVERY": "ofd",
    "OFD": "ofd",
    "REJECTED": "rto",
    "DEPARTED_FOR_FC": "rto",
    "RTO": "rto",
    "RETURNED": "rto",
    "DAMAGED": "rto",
    "DELIVERY_ATTEMPTED": "failed",
    "HOLD_FOR_REDELIVERY": "failed",
    "FAILED": "failed",
    "FLD": "failed",
    "DELAYED": "failed",
}

# ---------------------------------------------------------------------------
# Pivot mode selection
# ---------------------------------------------------------------------------
# Record sets spanning more than this many days pivot by month.
YEARLY_MODE_SPAN_DAYS = 35

MONTH_LABELS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

# ---------------------------------------------------------------------------
# Ranking thresholds
# ---------------------------------------------------------------------------
MIN_VOLUME_FLOOR = 5           # simple policy: total must exceed this
PRECISION_VOLUME_FLOOR = 5     # precision policy: threshold never drops below this
PRECISION_VOLUME_FRACTION = 0.2
RATE_TIE_TOLERANCE = 0.1       # percentage points
LEADERBOARD_SIZE = 10
PODIUM_MIN_TOTAL = 20
OPPORTUNITY_MAX_RATE = 90.0

# ---------------------------------------------------------------------------
# Rate bands (percent)
# ---------------------------------------------------------------------------
RATE_BANDS: dict[str, float] = {
    "excellent": 95.0,
    "good": 90.0,
    "average": 80.0,
    "poor": 0.0,
}

# ---------------------------------------------------------------------------
# Badges: name -> minimum requirements
# ---------------------------------------------------------------------------
BADGE_RULES: dict[str, dict] = {
    "sniper": {"min_rate": 100.0, "min_total": 10},
    "turbo": {"min_total": 80},
    "guardian": {"max_rto": 0, "min_total": 20},
    "fire": {"min_rate": 98.0, "min_total": 50},
    "beast": {"min_total": 120},
}

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
