"""
Loader for the station history backup and alias map.

History file: JSON list of daily records, one object per date:
    {"date": "YYYY-MM-DD",
     "stationTotal": {"total", "delivered", "successRate"},
     "agents": [{"daName", "total", "delivered", "successRate",
                 "shipmentDetails": [{"id", "status", "notes"}]}]}

Alias file: JSON object mapping normalised raw name -> canonical name.

Edits are whole-record replacements; every helper returns a new list.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path

from ..identity import normalize_name
from ..models import DailyRecord
from .utils import normalise_date, safe_int

logger = logging.getLogger(__name__)


def parse_history(raw_records: Iterable[dict]) -> list[DailyRecord]:
    """Build DailyRecords from decoded JSON objects.

    Records without a parseable date are skipped. A later record for the
    same date replaces an earlier one.
    """
    if isinstance(raw_records, Mapping):
        logger.error("History backup is a JSON object, expected a list of daily records")
        raise ValueError("History backup must be a JSON list of daily records")

    by_date: dict[date, DailyRecord] = {}
    for raw in raw_records:
        if not isinstance(raw, dict):
            logger.warning("Skipping history entry that is not an object: %r", raw)
            continue
        day = normalise_date(raw.get("date"))
        if day is None:
            logger.warning("Skipping history record without a valid date: %r", raw.get("date"))
            continue
        try:
            cleaned = dict(raw, date=day.isoformat())
            cleaned["agents"] = [
                dict(a, total=safe_int(a.get("total")), delivered=safe_int(a.get("delivered")))
                for a in raw.get("agents") or []
            ]
            record = DailyRecord.from_dict(cleaned)
        except Exception:
            logger.exception("Failed to parse history record for %s", day)
            continue
        if day in by_date:
            logger.warning("Duplicate history record for %s; keeping the later one", day)
        by_date[day] = record

    records = sorted(by_date.values(), key=lambda r: r.date)
    logger.info("Parsed %d history records", len(records))
    return records


def load_history(path: str | Path) -> list[DailyRecord]:
    """Load the JSON history backup. A missing file yields an empty history."""
    path = Path(path)
    if not path.exists():
        logger.warning("History file not found: %s", path)
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        logger.exception("Failed to read history file: %s", path)
        raise
    return parse_history(raw)


def save_history(records: Iterable[DailyRecord], path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [rec.to_dict() for rec in sorted(records, key=lambda r: r.date)]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved %d history records to %s", len(payload), path)


def load_aliases(path: str | Path) -> dict[str, str]:
    """Load the alias map, normalising keys and values."""
    path = Path(path)
    if not path.exists():
        return {}
    raw = json.loads(path.read_text(encoding="utf-8"))
    aliases = {normalize_name(k): normalize_name(v) for k, v in raw.items()}
    logger.info("Loaded %d aliases", len(aliases))
    return aliases


def save_aliases(aliases: Mapping[str, str], path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dict(sorted(aliases.items())), indent=2, ensure_ascii=False),
                    encoding="utf-8")


def upsert_record(records: Iterable[DailyRecord], record: DailyRecord) -> list[DailyRecord]:
    """Return history with ``record`` replacing any record on the same date."""
    kept = [r for r in records if r.date != record.date]
    kept.append(record)
    kept.sort(key=lambda r: r.date)
    return kept


def delete_record(records: Iterable[DailyRecord], day: date) -> list[DailyRecord]:
    return [r for r in records if r.date != day]


def prune_before(records: Iterable[DailyRecord], cutoff: date) -> list[DailyRecord]:
    """Drop every record dated before ``cutoff``."""
    kept = [r for r in records if r.date >= cutoff]
    logger.info("Pruned history before %s; %d records remain", cutoff, len(kept))
    return kept
