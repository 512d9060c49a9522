"""
Simulated history generator for the station dashboard.

Generates realistic daily delivery outcomes for a roster of workers.
All values are synthetic — no real operational data is used.
"""

from datetime import date, timedelta

import numpy as np
import pandas as pd

from .models import DailyRecord, ShipmentRecord, ShipmentStatus, StationTotal, WorkerDayEntry

# ---------------------------------------------------------------------------
# Typical roster parameters (realistic ranges)
# ---------------------------------------------------------------------------
_ROSTER = {
    "Ahmed Hassan": {"volume": 95, "std": 12, "rate": 0.97},
    "Mohamed Ali": {"volume": 80, "std": 15, "rate": 0.94},
    "Omar Khaled": {"volume": 60, "std": 10, "rate": 0.91},
    "Youssef Ibrahim": {"volume": 110, "std": 18, "rate": 0.95},
    "Karim Mostafa": {"volume": 45, "std": 9, "rate": 0.86},
    "Mahmoud Said": {"volume": 70, "std": 11, "rate": 0.89},
    "Tarek Nabil": {"volume": 30, "std": 8, "rate": 0.82},
    "Hany Adel": {"volume": 8, "std": 3, "rate": 0.99},
}

# Share of undelivered shipments by final status
_UNDELIVERED_SPLIT = {
    ShipmentStatus.FAILED: 0.6,
    ShipmentStatus.OFD: 0.25,
    ShipmentStatus.RTO: 0.15,
}

# Chance a worker is off on a given day
_ABSENCE_RATE = 0.12

# Alternate spellings that show up in some uploads
_SPELLING_VARIANTS = {
    "Mohamed Ali": "Mohammed  Ali",
    "Youssef Ibrahim": "yousef ibrahim",
}
_VARIANT_RATE = 0.2


def generate_history(
    start: str | date = "2026-01-01",
    n_days: int = 90,
    seed: int = 42,
    with_shipments: bool = False,
) -> list[DailyRecord]:
    """Generate ``n_days`` of simulated daily records starting at ``start``.

    Fridays are quieter. Worker volumes and rates vary around roster
    parameters; shipment details are generated only when requested.
    """
    rng = np.random.default_rng(seed)
    start = pd.Timestamp(start).date()
    records = []

    for offset in range(n_days):
        day = start + timedelta(days=offset)
        weekday_factor = 0.6 if day.weekday() == 4 else 1.0
        workers = []

        for name, params in _ROSTER.items():
            if rng.random() < _ABSENCE_RATE:
                continue
            total = max(0, int(round(rng.normal(params["volume"], params["std"]) * weekday_factor)))
            delivered = int(rng.binomial(total, params["rate"])) if total else 0

            details = None
            if with_shipments:
                details = _generate_shipments(rng, name, day, total, delivered)

            recorded_name = name
            if name in _SPELLING_VARIANTS and rng.random() < _VARIANT_RATE:
                recorded_name = _SPELLING_VARIANTS[name]

            workers.append(WorkerDayEntry(
                name=recorded_name,
                total=total,
                delivered=delivered,
                success_rate=round(delivered / total * 100, 2) if total else 0.0,
                shipment_details=details,
            ))

        station_total = sum(w.total for w in workers)
        station_delivered = sum(w.delivered for w in workers)
        records.append(DailyRecord(
            date=day,
            station_total=StationTotal(
                station_total,
                station_delivered,
                station_delivered / station_total * 100 if station_total else 0.0,
            ),
            workers=workers,
        ))

    return records


def _generate_shipments(rng, name: str, day: date, total: int, delivered: int) -> list[ShipmentRecord]:
    statuses = list(_UNDELIVERED_SPLIT)
    weights = list(_UNDELIVERED_SPLIT.values())
    prefix = "".join(part[0] for part in name.split()).upper()

    shipments = []
    for i in range(total):
        if i < delivered:
            status = ShipmentStatus.DELIVERED
        else:
            status = statuses[rng.choice(len(statuses), p=weights)]
        note = "Customer not available" if status is ShipmentStatus.FAILED else None
        shipments.append(ShipmentRecord(
            tracking_id=f"{prefix}{day:%y%m%d}{i:04d}",
            status=status,
            note=note,
        ))
    return shipments


def generate_aliases() -> dict[str, str]:
    """Alias map merging a couple of common misspellings into roster names."""
    return {
        "MOHAMMED ALI": "MOHAMED ALI",
        "YOUSEF IBRAHIM": "YOUSSEF IBRAHIM",
    }
