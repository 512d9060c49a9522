"""
Period pivot: a worker x slot matrix over a record set, with block subtotals.

Two fixed layouts exist. Monthly mode uses 31 day-slots grouped into three
10-day periods (1-10, 11-20, 21-31); yearly mode uses 12 month-slots grouped
into four quarters. Pivot rates are fractions in [0, 1].
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

import pandas as pd

from .config import GRAND_TOTAL_LABEL, MONTH_LABELS, YEARLY_MODE_SPAN_DAYS
from .identity import resolve
from .models import DailyRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockSpec:
    label: str
    first_slot: int
    last_slot: int  # inclusive

    @property
    def slots(self) -> range:
        return range(self.first_slot, self.last_slot + 1)


@dataclass(frozen=True)
class PivotLayout:
    slot_count: int
    blocks: tuple[BlockSpec, ...]
    slot_labels: tuple[str, ...]


class PivotMode(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def layout(self) -> PivotLayout:
        return _LAYOUTS[self]

    def slot_index(self, day: date) -> int:
        if self is PivotMode.YEARLY:
            return day.month - 1
        return day.day - 1


_LAYOUTS = {
    PivotMode.MONTHLY: PivotLayout(
        slot_count=31,
        blocks=(
            BlockSpec("PERIOD 1 (1-10)", 0, 9),
            BlockSpec("PERIOD 2 (11-20)", 10, 19),
            BlockSpec("PERIOD 3 (21-31)", 20, 30),
        ),
        slot_labels=tuple(str(d) for d in range(1, 32)),
    ),
    PivotMode.YEARLY: PivotLayout(
        slot_count=12,
        blocks=(
            BlockSpec("Q1 (JAN-MAR)", 0, 2),
            BlockSpec("Q2 (APR-JUN)", 3, 5),
            BlockSpec("Q3 (JUL-SEP)", 6, 8),
            BlockSpec("Q4 (OCT-DEC)", 9, 11),
        ),
        slot_labels=MONTH_LABELS,
    ),
}


@dataclass
class PivotCell:
    total: int = 0
    delivered: int = 0

    @property
    def rate(self) -> float:
        return self.delivered / self.total if self.total else 0.0


@dataclass
class PivotRow:
    name: str
    slots: list[PivotCell]
    blocks: list[PivotCell] = field(default_factory=list)
    summary: PivotCell = field(default_factory=PivotCell)
    is_grand_total: bool = False


@dataclass
class PivotMatrix:
    mode: PivotMode
    rows: list[PivotRow]
    start: date | None = None
    end: date | None = None
    record_count: int = 0
    skipped_records: int = 0

    @property
    def layout(self) -> PivotLayout:
        return self.mode.layout

    @property
    def worker_rows(self) -> list[PivotRow]:
        return [r for r in self.rows if not r.is_grand_total]

    @property
    def grand_total(self) -> PivotRow:
        return self.rows[-1]

    def row(self, name: str) -> PivotRow:
        for r in self.rows:
            if r.name == name:
                return r
        raise KeyError(name)

    def cell(self, name: str, slot: int) -> PivotCell:
        return self.row(name).slots[slot]

    def to_frame(self) -> pd.DataFrame:
        """Flatten to one row per worker (grand total last).

        Columns: name, then ``<slot>_total``/``<slot>_delivered`` per slot, then
        ``<block>_total``/``_delivered``/``_rate`` per block, then
        total, delivered, rate.
        """
        layout = self.layout
        records = []
        for r in self.rows:
            out: dict = {"name": r.name}
            for label, c in zip(layout.slot_labels, r.slots):
                out[f"{label}_total"] = c.total
                out[f"{label}_delivered"] = c.delivered
            for spec, c in zip(layout.blocks, r.blocks):
                out[f"{spec.label}_total"] = c.total
                out[f"{spec.label}_delivered"] = c.delivered
                out[f"{spec.label}_rate"] = c.rate
            out["total"] = r.summary.total
            out["delivered"] = r.summary.delivered
            out["rate"] = r.summary.rate
            records.append(out)
        return pd.DataFrame(records)


def select_mode(records: Iterable[DailyRecord]) -> PivotMode:
    """Yearly when the date span exceeds YEARLY_MODE_SPAN_DAYS, else monthly."""
    dates = [rec.date for rec in records]
    if not dates:
        return PivotMode.MONTHLY
    span = (max(dates) - min(dates)).days
    return PivotMode.YEARLY if span > YEARLY_MODE_SPAN_DAYS else PivotMode.MONTHLY


def _summarise(name: str, slots: list[PivotCell], layout: PivotLayout, is_grand_total=False) -> PivotRow:
    blocks = []
    for spec in layout.blocks:
        blocks.append(PivotCell(
            total=sum(slots[i].total for i in spec.slots),
            delivered=sum(slots[i].delivered for i in spec.slots),
        ))
    summary = PivotCell(
        total=sum(b.total for b in blocks),
        delivered=sum(b.delivered for b in blocks),
    )
    return PivotRow(name, slots, blocks, summary, is_grand_total)


def build_pivot(
    records: Iterable[DailyRecord],
    alias_map: Mapping[str, str] | None = None,
    mode: PivotMode | None = None,
) -> PivotMatrix:
    """Build the worker x slot matrix for ``records``.

    Parameters
    ----------
    records : Daily history records, any order.
    alias_map : Names are resolved through this map before grouping.
    mode : Force a layout; by default chosen from the record span.

    Returns
    -------
    PivotMatrix with worker rows sorted by canonical name and the
    GRAND TOTAL row last. Records whose slot falls outside the layout are
    skipped and counted in ``skipped_records``.
    """
    records = sorted(records, key=lambda rec: rec.date)
    if mode is None:
        mode = select_mode(records)
    layout = mode.layout

    names = sorted({resolve(w.name, alias_map) for rec in records for w in rec.workers})
    grid: dict[str, list[PivotCell]] = {
        name: [PivotCell() for _ in range(layout.slot_count)] for name in names
    }
    grand = [PivotCell() for _ in range(layout.slot_count)]

    skipped = 0
    for rec in records:
        slot = mode.slot_index(rec.date)
        if slot < 0 or slot >= layout.slot_count:
            skipped += 1
            continue
        for entry in rec.workers:
            cell = grid[resolve(entry.name, alias_map)][slot]
            cell.total += entry.total
            cell.delivered += entry.delivered
            grand[slot].total += entry.total
            grand[slot].delivered += entry.delivered

    if skipped:
        logger.warning("Skipped %d records outside the %s pivot layout", skipped, mode.value)

    rows = [_summarise(name, grid[name], layout) for name in names]
    rows.append(_summarise(GRAND_TOTAL_LABEL, grand, layout, is_grand_total=True))

    logger.info(
        "Built %s pivot: %d workers x %d slots from %d records",
        mode.value, len(names), layout.slot_count, len(records),
    )
    return PivotMatrix(
        mode=mode,
        rows=rows,
        start=records[0].date if records else None,
        end=records[-1].date if records else None,
        record_count=len(records) - skipped,
        skipped_records=skipped,
    )
