"""Single-user statistics view, computed fresh on every call."""

from __future__ import annotations

import logging
import math

from hours_rank.errors import IdentityUnresolved
from hours_rank.levels import classify, hours_to_next_tier
from hours_rank.models import EntryStore, IdentityResolver, RequestContext, UserStats
from hours_rank.rank import compute_rank
from hours_rank.streaks import calculate_streak

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero: 2.35 -> 2.4, 2.25 -> 2.3."""
    return math.floor(value * 10 + 0.5) / 10


def profile_stats(
    store: EntryStore,
    user_id: str,
    resolver: IdentityResolver | None = None,
    ctx: RequestContext | None = None,
) -> UserStats:
    """Build the UserStats view for user_id.

    DataUnavailable from the entry fetch propagates. A failing aggregation
    only zeroes the rank; a missing profile only leaves the identity fields empty.
    """
    entries = [e for e in store.entries_for_user(user_id) if e.qualifies]

    total_seconds = sum(e.duration_seconds for e in entries)
    total_sessions = len(entries)
    total_hours = total_seconds / SECONDS_PER_HOUR
    # Divide once from whole seconds so exact halves reach round1 intact.
    daily_avg = total_seconds / (SECONDS_PER_HOUR * total_sessions) if total_sessions else 0.0

    level, level_color = classify(total_hours)
    streak = calculate_streak(entries)
    stats = UserStats(
        user_id=user_id,
        total_hours=round1(total_hours),
        total_sessions=total_sessions,
        daily_average_hours=round1(daily_avg),
        current_streak=streak.current_streak,
        rank=compute_rank(store, total_seconds),
        level=level,
        level_color=level_color,
        active_days=streak.active_days,
        last_active_date=streak.last_active_date,
    )

    next_tier = hours_to_next_tier(level, total_hours)
    if next_tier is not None:
        stats.next_level, hours_left = next_tier
        stats.seconds_to_next_level = round(hours_left * SECONDS_PER_HOUR)

    if resolver is not None:
        try:
            identity = resolver.resolve_identity(user_id)
        except IdentityUnresolved:
            logger.info("no profile for %s, omitting identity fields", user_id)
        else:
            stats.display_name = identity.display_name
            stats.profile_picture_url = identity.profile_picture_url
            stats.member_since = identity.member_since

    if ctx is not None and ctx.caller_id == user_id:
        stats.email = ctx.caller_email

    return stats
