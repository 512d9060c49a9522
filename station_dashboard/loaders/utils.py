"""
Shared utilities for history ingestion: date normalisation and count coercion.
"""

import logging
from datetime import date
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_date(val: Any) -> date | None:
    """Convert an ISO string, Excel serial number or datetime to a date.

    Excel serial numbers use the 1899-12-30 epoch. Returns None for
    unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        return val.date()
    if isinstance(val, date):
        return val if type(val) is date else val.date()
    if isinstance(val, (int, float)):
        try:
            return (pd.Timestamp("1899-12-30") + pd.Timedelta(days=int(val))).date()
        except (ValueError, OverflowError):
            logger.warning("Could not convert serial number %s to date", val)
            return None
    try:
        return pd.Timestamp(str(val).strip()).date()
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None


def safe_int(val: Any) -> int:
    """Coerce a count to int, returning 0 for missing or non-numeric values."""
    if val is None:
        return 0
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return 0
    try:
        return int(float(val))
    except (ValueError, TypeError):
        logger.warning("Non-numeric count %r treated as 0", val)
        return 0
