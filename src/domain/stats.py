"""
Earnings and revenue aggregates.

Every figure is recomputed from the completed missions passed in; nothing
is maintained incrementally.  Callers re-run these on each poll.
"""

from __future__ import annotations

from typing import Iterable

from .entities import Mission
from .enums import ACTIVE_STATUSES, MissionStatus

DEFAULT_RATING = 5.0


def completed(missions: Iterable[Mission]) -> list[Mission]:
    return [m for m in missions if m.status == MissionStatus.COMPLETED]


def total_revenue(missions: Iterable[Mission]) -> int:
    """Platform revenue: sum of prices over completed missions."""
    return sum(m.price for m in completed(missions))


def driver_earnings(missions: Iterable[Mission], driver_id: str) -> int:
    return sum(m.price for m in completed(missions) if m.driver_id == driver_id)


def average_rating(missions: Iterable[Mission]) -> float:
    """Mean rating over completed missions; unrated ones count as 5."""
    done = completed(missions)
    if not done:
        return DEFAULT_RATING
    return sum(m.rating or DEFAULT_RATING for m in done) / len(done)


def earnings_by_weekday(missions: Iterable[Mission]) -> list[int]:
    """Completed-mission earnings bucketed Monday..Sunday by creation day."""
    buckets = [0] * 7
    for m in completed(missions):
        if m.created_at is not None:
            buckets[m.created_at.weekday()] += m.price
    return buckets


def count_active(missions: Iterable[Mission]) -> int:
    return sum(1 for m in missions if m.status in ACTIVE_STATUSES)
