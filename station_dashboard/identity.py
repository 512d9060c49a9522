"""
Worker identity resolution.

Raw display names are normalised (trimmed, whitespace collapsed, upper-cased)
and then followed through an alias map to their canonical name. The alias map
is a plain ``dict[str, str]`` that is never mutated in place: ``rename``
returns a new version, and ``AliasStore`` swaps versions atomically.
"""

import logging
import re
import threading
from collections.abc import Iterable, Iterator, Mapping
from datetime import date
from types import MappingProxyType

from .models import DailyRecord, StationTotal, WorkerDayEntry, success_rate

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class AliasCycleError(ValueError):
    """Raised when a rename would make a name resolve back to itself."""


def normalize_name(raw: str | None) -> str:
    """Trim, collapse internal whitespace and upper-case a display name."""
    if raw is None:
        return ""
    return _WHITESPACE.sub(" ", str(raw).strip()).upper()


def _chain(name: str, alias_map: Mapping[str, str]) -> Iterator[str]:
    """Yield ``name`` and every alias hop after it, stopping at a fixed point.

    Bounded by the size of the map so a hand-edited cyclic map cannot loop.
    """
    current = name
    yield current
    for _ in range(len(alias_map)):
        target = alias_map.get(current)
        if target is None:
            return
        target = normalize_name(target)
        if target == current:
            return
        current = target
        yield current
    target = alias_map.get(current)
    if target is None or normalize_name(target) == current:
        return
    logger.warning("Alias chain starting at '%s' did not settle; map contains a cycle", name)


def resolve(raw_name: str | None, alias_map: Mapping[str, str] | None = None) -> str:
    """Return the canonical name for a raw display name.

    An unmapped normalised name is its own canonical name.
    """
    normalized = normalize_name(raw_name)
    if not alias_map:
        return normalized
    last = normalized
    for last in _chain(normalized, alias_map):
        pass
    return last


def rename(
    old_canonical: str,
    new_canonical: str,
    alias_map: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a new alias map in which ``old_canonical`` resolves to ``new_canonical``.

    Raises AliasCycleError if ``new_canonical`` already resolves through
    ``old_canonical``; the input map is left unchanged either way.
    """
    alias_map = dict(alias_map or {})
    old = normalize_name(old_canonical)
    new = normalize_name(new_canonical)

    if not old or not new:
        raise ValueError("Alias names must not be empty")
    if old == new:
        return alias_map

    if old in _chain(new, alias_map):
        raise AliasCycleError(
            f"Cannot alias '{old}' to '{new}': '{new}' already resolves to '{old}'"
        )

    alias_map[old] = new
    logger.info("Alias '%s' -> '%s' (%d entries)", old, new, len(alias_map))
    return alias_map


class AliasStore:
    """Current alias map version, replaced atomically on rename.

    Readers get an immutable snapshot; concurrent renames serialise on a lock
    so the last writer wins and no rename is ever half-applied.
    """

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._lock = threading.Lock()
        self._aliases: dict[str, str] = {
            normalize_name(k): normalize_name(v) for k, v in (initial or {}).items()
        }

    def snapshot(self) -> Mapping[str, str]:
        return MappingProxyType(self._aliases)

    def resolve(self, raw_name: str) -> str:
        return resolve(raw_name, self._aliases)

    def rename(self, old_canonical: str, new_canonical: str) -> Mapping[str, str]:
        with self._lock:
            self._aliases = rename(old_canonical, new_canonical, self._aliases)
            return MappingProxyType(self._aliases)

    def replace(self, aliases: Mapping[str, str]) -> None:
        with self._lock:
            self._aliases = {normalize_name(k): normalize_name(v) for k, v in aliases.items()}


def _merge_entries(name: str, entries: list[WorkerDayEntry]) -> WorkerDayEntry:
    if len(entries) == 1:
        e = entries[0]
        return WorkerDayEntry(name, e.total, e.delivered, e.computed_success_rate,
                              list(e.shipment_details) if e.shipment_details is not None else None)

    total = sum(e.total for e in entries)
    delivered = sum(e.delivered for e in entries)
    details = None
    if any(e.shipment_details is not None for e in entries):
        details = [s for e in entries for s in (e.shipment_details or [])]
    return WorkerDayEntry(name, total, delivered, success_rate(delivered, total), details)


def apply_aliases(
    records: Iterable[DailyRecord],
    alias_map: Mapping[str, str] | None = None,
) -> list[DailyRecord]:
    """Return copies of ``records`` with every worker name resolved.

    Entries that resolve to the same canonical name on one day are merged.
    """
    result = []
    for rec in records:
        grouped: dict[str, list[WorkerDayEntry]] = {}
        for entry in rec.workers:
            grouped.setdefault(resolve(entry.name, alias_map), []).append(entry)
        workers = [_merge_entries(name, entries) for name, entries in grouped.items()]
        station = StationTotal(
            rec.station_total.total, rec.station_total.delivered, rec.station_total.success_rate
        )
        result.append(DailyRecord(rec.date, station, workers))
    return result


def relabel_history(
    records: Iterable[DailyRecord],
    old_name: str,
    new_name: str,
    dates: Iterable[date] | None = None,
) -> list[DailyRecord]:
    """Return records where entries named ``old_name`` become ``new_name``.

    Only the given ``dates`` are touched when supplied. Matching is on the
    normalised name; the rewritten entries are merged with any existing
    ``new_name`` entry on the same day.
    """
    old = normalize_name(old_name)
    new = normalize_name(new_name)
    selected = set(dates) if dates is not None else None

    result = []
    changed = 0
    for rec in records:
        if selected is not None and rec.date not in selected:
            result.append(rec)
            continue
        if not any(normalize_name(w.name) == old for w in rec.workers):
            result.append(rec)
            continue
        relabelled = apply_aliases([rec], {old: new})[0]
        result.append(relabelled)
        changed += 1

    logger.info("Relabelled '%s' -> '%s' in %d records", old, new, changed)
    return result


def remove_worker(
    records: Iterable[DailyRecord],
    name: str,
    alias_map: Mapping[str, str] | None = None,
) -> list[DailyRecord]:
    """Return records with every entry resolving to ``name`` dropped."""
    target = resolve(name, alias_map)
    result = []
    for rec in records:
        kept = [w for w in rec.workers if resolve(w.name, alias_map) != target]
        if len(kept) == len(rec.workers):
            result.append(rec)
            continue
        summed = DailyRecord(rec.date, rec.station_total, kept).recomputed_station_total()
        result.append(DailyRecord(rec.date, summed, kept))
    return result


def known_names(records: Iterable[DailyRecord], alias_map: Mapping[str, str] | None = None) -> list[str]:
    """Sorted canonical names appearing anywhere in ``records``."""
    return sorted({resolve(w.name, alias_map) for rec in records for w in rec.workers})
