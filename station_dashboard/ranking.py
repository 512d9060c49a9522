"""
Leaderboards over per-worker aggregates.

Two selection policies are kept separate on purpose:

SIMPLE     filter to ``total > min_volume_floor`` and sort by success rate.
           Used for low-performer and opportunity lists.
PRECISION  filter to ``total >= max(5, avg_total * 0.2)`` and sort by success
           rate, treating rates within 0.1 points as tied and ordering ties
           by descending volume. Used for the "true" top performers.
"""

import functools
import logging
from collections.abc import Sequence
from enum import Enum

from .config import (
    BADGE_RULES,
    LEADERBOARD_SIZE,
    MIN_VOLUME_FLOOR,
    OPPORTUNITY_MAX_RATE,
    PODIUM_MIN_TOTAL,
    PRECISION_VOLUME_FLOOR,
    PRECISION_VOLUME_FRACTION,
    RATE_TIE_TOLERANCE,
)
from .models import AggregateRecord

logger = logging.getLogger(__name__)


class RankingPolicy(Enum):
    SIMPLE = "simple"
    PRECISION = "precision"


def top_simple(
    aggregates: Sequence[AggregateRecord],
    n: int = LEADERBOARD_SIZE,
    min_volume_floor: float = MIN_VOLUME_FLOOR,
    ascending: bool = False,
) -> list[AggregateRecord]:
    """Workers with ``total > min_volume_floor``, sorted by success rate."""
    eligible = [a for a in aggregates if a.total > min_volume_floor]
    eligible.sort(key=lambda a: a.name)
    eligible.sort(key=lambda a: a.success_rate, reverse=not ascending)
    return eligible[:n]


def precision_threshold(aggregates: Sequence[AggregateRecord]) -> float:
    """Minimum volume for the precision leaderboard: max(5, 20% of the average)."""
    if not aggregates:
        return float(PRECISION_VOLUME_FLOOR)
    avg_volume = sum(a.total for a in aggregates) / len(aggregates)
    return max(PRECISION_VOLUME_FLOOR, avg_volume * PRECISION_VOLUME_FRACTION)


def _compare_precision(a: AggregateRecord, b: AggregateRecord) -> float:
    if abs(b.success_rate - a.success_rate) > RATE_TIE_TOLERANCE:
        return b.success_rate - a.success_rate
    if a.total != b.total:
        return b.total - a.total
    return (a.name > b.name) - (a.name < b.name)


def top_precision(
    aggregates: Sequence[AggregateRecord],
    n: int = LEADERBOARD_SIZE,
) -> list[AggregateRecord]:
    """Top ``n`` workers above the dynamic volume threshold.

    Rates within RATE_TIE_TOLERANCE of each other are ordered by volume.
    That tie window is not transitive: when three or more workers chain
    inside it (95.00 / 95.08 / 95.16) the result can depend on input order.
    """
    threshold = precision_threshold(aggregates)
    eligible = [a for a in aggregates if a.total >= threshold]
    eligible.sort(key=functools.cmp_to_key(_compare_precision))

    logger.debug(
        "Precision leaderboard: %d of %d workers at or above %.1f shipments",
        len(eligible), len(aggregates), threshold,
    )
    return eligible[:n]


def top_performers(
    aggregates: Sequence[AggregateRecord],
    n: int = LEADERBOARD_SIZE,
    policy: RankingPolicy = RankingPolicy.PRECISION,
    min_volume_floor: float = MIN_VOLUME_FLOOR,
) -> list[AggregateRecord]:
    """Leaderboard under an explicit policy.

    ``min_volume_floor`` applies to the simple policy only.
    """
    if policy is RankingPolicy.SIMPLE:
        return top_simple(aggregates, n, min_volume_floor)
    if policy is RankingPolicy.PRECISION:
        return top_precision(aggregates, n)
    raise ValueError(f"Unknown ranking policy: {policy!r}")


def low_performers(
    aggregates: Sequence[AggregateRecord],
    n: int = LEADERBOARD_SIZE,
    min_volume_floor: float = MIN_VOLUME_FLOOR,
) -> list[AggregateRecord]:
    return top_simple(aggregates, n, min_volume_floor, ascending=True)


def opportunities(
    aggregates: Sequence[AggregateRecord],
    n: int = 5,
    max_rate: float = OPPORTUNITY_MAX_RATE,
    min_volume_floor: float = MIN_VOLUME_FLOOR,
) -> list[AggregateRecord]:
    """Stand-up list: workers under ``max_rate`` with real volume, worst first."""
    below = [a for a in aggregates if a.success_rate < max_rate]
    return top_simple(below, n, min_volume_floor, ascending=True)


def podium(
    aggregates: Sequence[AggregateRecord],
    min_total: int = PODIUM_MIN_TOTAL,
) -> list[AggregateRecord]:
    """Best three by rate among workers with more than ``min_total`` shipments."""
    ranked = sorted(aggregates, key=lambda a: a.name)
    ranked.sort(key=lambda a: a.success_rate, reverse=True)
    return [a for a in ranked if a.total > min_total][:3]


def assign_badges(aggregate: AggregateRecord, rto: int | None = None) -> list[str]:
    """Badge names earned by one aggregate.

    ``guardian`` needs a known RTO count; it is never awarded when ``rto`` is None.
    """
    badges = []
    for badge, rule in BADGE_RULES.items():
        if aggregate.total < rule.get("min_total", 0):
            continue
        if "min_rate" in rule and aggregate.success_rate < rule["min_rate"]:
            continue
        if "max_rto" in rule and (rto is None or rto > rule["max_rto"]):
            continue
        badges.append(badge)
    return badges
