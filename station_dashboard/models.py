"""
Record types for the station history.

DailyRecord and WorkerDayEntry mirror the persisted history shape. Derived
rates are always recomputed from counts; the stored ``success_rate`` fields
are kept only as presentation hints.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .config import STATUS_MAPPING

logger = logging.getLogger(__name__)


class ShipmentStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"
    OFD = "ofd"
    RTO = "rto"


def success_rate(delivered: float, total: float) -> float:
    """Return delivered/total as a percentage, 0 when total is 0.

    Not clamped: delivered > total yields a rate above 100.
    """
    if not total:
        return 0.0
    return delivered / total * 100


@dataclass(frozen=True)
class ShipmentRecord:
    tracking_id: str
    status: ShipmentStatus
    note: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ShipmentRecord | None":
        """Build from the persisted ``{id, status, notes}`` shape.

        Raw carrier statuses are mapped through STATUS_MAPPING. Returns None
        for ignored or unknown statuses.
        """
        raw_status = str(raw.get("status", "")).strip()
        try:
            status = ShipmentStatus(STATUS_MAPPING.get(raw_status.upper(), raw_status.lower()))
        except ValueError:
            return None
        return cls(
            tracking_id=str(raw.get("id", "")).strip(),
            status=status,
            note=raw.get("notes"),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {"id": self.tracking_id, "status": self.status.value}
        if self.note:
            out["notes"] = self.note
        return out


@dataclass
class WorkerDayEntry:
    name: str
    total: int
    delivered: int
    success_rate: float = 0.0
    shipment_details: list[ShipmentRecord] | None = None

    @property
    def failed(self) -> int:
        return self.total - self.delivered

    @property
    def computed_success_rate(self) -> float:
        return success_rate(self.delivered, self.total)

    def status_counts(self) -> dict[str, int]:
        """Count shipment details by status (all four statuses present)."""
        counts = {s.value: 0 for s in ShipmentStatus}
        for shipment in self.shipment_details or []:
            counts[shipment.status.value] += 1
        return counts

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "WorkerDayEntry":
        details = raw.get("shipmentDetails")
        shipments = None
        if details is not None:
            shipments = [s for s in (ShipmentRecord.from_dict(d) for d in details) if s]
        return cls(
            name=str(raw.get("daName", "")),
            total=int(raw.get("total") or 0),
            delivered=int(raw.get("delivered") or 0),
            success_rate=float(raw.get("successRate") or 0.0),
            shipment_details=shipments,
        )

    def to_dict(self) -> dict[str, Any]:
        out = {
            "daName": self.name,
            "delivered": self.delivered,
            "total": self.total,
            "successRate": self.computed_success_rate,
        }
        if self.shipment_details is not None:
            out["shipmentDetails"] = [s.to_dict() for s in self.shipment_details]
        return out


@dataclass
class StationTotal:
    total: int = 0
    delivered: int = 0
    success_rate: float = 0.0

    @property
    def failed(self) -> int:
        return self.total - self.delivered

    @property
    def computed_success_rate(self) -> float:
        return success_rate(self.delivered, self.total)


@dataclass
class DailyRecord:
    date: date
    station_total: StationTotal
    workers: list[WorkerDayEntry] = field(default_factory=list)

    def recomputed_station_total(self) -> StationTotal:
        """Station total summed from the worker entries."""
        total = sum(w.total for w in self.workers)
        delivered = sum(w.delivered for w in self.workers)
        return StationTotal(total, delivered, success_rate(delivered, total))

    def effective_station_total(self) -> StationTotal:
        """Recomputed total when worker entries exist, else the stored one."""
        if self.workers:
            return self.recomputed_station_total()
        stored = self.station_total
        return StationTotal(
            stored.total, stored.delivered, success_rate(stored.delivered, stored.total)
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DailyRecord":
        station = raw.get("stationTotal") or {}
        workers = [WorkerDayEntry.from_dict(a) for a in raw.get("agents") or []]
        record = cls(
            date=date.fromisoformat(str(raw["date"])[:10]),
            station_total=StationTotal(
                total=int(station.get("total") or 0),
                delivered=int(station.get("delivered") or 0),
                success_rate=float(station.get("successRate") or 0.0),
            ),
            workers=workers,
        )
        stored, summed = record.station_total, record.recomputed_station_total()
        if workers and (stored.total, stored.delivered) != (summed.total, summed.delivered):
            logger.warning(
                "Stored station total for %s (%d/%d) disagrees with worker sum (%d/%d)",
                record.date, stored.delivered, stored.total, summed.delivered, summed.total,
            )
        return record

    def to_dict(self) -> dict[str, Any]:
        station = self.recomputed_station_total() if self.workers else self.station_total
        return {
            "date": self.date.isoformat(),
            "stationTotal": {
                "delivered": station.delivered,
                "total": station.total,
                "successRate": station.computed_success_rate,
            },
            "agents": [w.to_dict() for w in self.workers],
        }


@dataclass
class AggregateRecord:
    """Per-worker totals over a window. Rate is a percentage in [0, 100]."""

    name: str
    total: int = 0
    delivered: int = 0
    failed: int = 0
    days_worked: int = 0
    success_rate: float = 0.0
