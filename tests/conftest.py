from datetime import date

import pytest

from station_dashboard.models import (
    DailyRecord,
    ShipmentRecord,
    ShipmentStatus,
    StationTotal,
    WorkerDayEntry,
)


def make_record(day, *workers, station=None):
    """Build a DailyRecord from ``(name, total, delivered)`` tuples."""
    entries = [WorkerDayEntry(name, total, delivered) for name, total, delivered in workers]
    if station is None:
        station = StationTotal(sum(e.total for e in entries), sum(e.delivered for e in entries))
    return DailyRecord(day, station, entries)


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def march_records():
    return [
        make_record(date(2026, 3, 1), ("Jon", 40, 38), ("Sara", 30, 30)),
        make_record(date(2026, 3, 2), ("JOHN", 50, 45), ("Sara", 20, 18), ("Ali", 5, 2)),
        make_record(date(2026, 3, 11), ("John", 60, 57)),
        make_record(date(2026, 3, 21), ("sara ", 25, 25), ("Ali", 10, 9)),
        make_record(date(2026, 3, 31), ("John", 10, 10)),
    ]


@pytest.fixture
def shipment_record():
    entry = WorkerDayEntry(
        "Omar Khaled", 3, 1,
        shipment_details=[
            ShipmentRecord("TRK001", ShipmentStatus.DELIVERED),
            ShipmentRecord("TRK002", ShipmentStatus.FAILED, "Customer not available"),
            ShipmentRecord("TRK003", ShipmentStatus.RTO, "Refused at door"),
        ],
    )
    return DailyRecord(date(2026, 4, 6), StationTotal(3, 1), [entry])
