"""Current daily streak from a user's time entries.

Days are UTC calendar days of each entry's start time. Naive datetimes are
taken to already be in UTC.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from hours_rank.models import TimeEntry

logger = logging.getLogger(__name__)


@dataclass
class StreakInfo:
    current_streak: int
    last_active_date: str | None  # YYYY-MM-DD
    active_days: int


def day_of(ts: datetime) -> date:
    """Project a timestamp onto its UTC calendar day."""
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(timezone.utc).date()


def active_days(entries: Iterable[TimeEntry]) -> set[date]:
    """Distinct days with at least one qualifying entry."""
    return {day_of(e.start_time) for e in entries if e.qualifies}


def get_streak_from_dates(days_desc: list[date]) -> int:
    """Count consecutive days walking back from the first (most recent) day.

    days_desc must be distinct and sorted newest first. The most recent day
    always counts, whether or not it is today.
    """
    if not days_desc:
        return 0

    streak = 1
    for prev, curr in zip(days_desc, days_desc[1:]):
        if prev - curr != timedelta(days=1):
            break
        streak += 1
    return streak


def calculate_streak(entries: Iterable[TimeEntry]) -> StreakInfo:
    days = sorted(active_days(entries), reverse=True)
    if not days:
        return StreakInfo(current_streak=0, last_active_date=None, active_days=0)

    streak = get_streak_from_dates(days)
    logger.debug("streak=%d over %d active days, latest %s", streak, len(days), days[0])
    return StreakInfo(
        current_streak=streak,
        last_active_date=days[0].isoformat(),
        active_days=len(days),
    )


def current_streak(entries: Iterable[TimeEntry]) -> int:
    return calculate_streak(entries).current_streak
