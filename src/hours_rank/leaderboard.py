"""Top-N leaderboard across all users by total tracked time.

Rows are ranked by list position, not by the global rank function, so tied
totals still get distinct ranks here.
"""
from __future__ import annotations

import logging

from hours_rank.errors import DataUnavailable, IdentityUnresolved
from hours_rank.levels import classify
from hours_rank.models import EntryStore, IdentityResolver, LeaderboardEntry, RequestContext
from hours_rank.stats import SECONDS_PER_HOUR, round1
from hours_rank.streaks import current_streak

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 5


def top_totals(totals: dict[str, int], limit: int = LEADERBOARD_SIZE) -> list[tuple[str, int]]:
    """Sort (user_id, seconds) by seconds descending and keep the first `limit`.

    Tie-break: user_id ascending, so the order is reproducible.
    """
    ranked = sorted(
        ((uid, total) for uid, total in totals.items() if total > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return ranked[:limit]


def _streak_for(store: EntryStore, user_id: str) -> int:
    try:
        return current_streak(store.entries_for_user(user_id))
    except DataUnavailable as exc:
        logger.warning("entries unavailable for %s, streak reported as 0: %s", user_id, exc)
        return 0


def build_leaderboard(
    store: EntryStore,
    resolver: IdentityResolver,
    ctx: RequestContext | None = None,
) -> list[LeaderboardEntry]:
    """Build the top-5 leaderboard.

    Users without a resolvable identity are dropped; their position is not
    reassigned. DataUnavailable from the totals query propagates.
    """
    caller_id = ctx.caller_id if ctx is not None else None
    rows: list[LeaderboardEntry] = []

    for position, (user_id, seconds) in enumerate(top_totals(store.total_duration_per_user()), start=1):
        try:
            identity = resolver.resolve_identity(user_id)
        except IdentityUnresolved:
            logger.info("skipping %s on leaderboard: no profile", user_id)
            continue

        hours = seconds / SECONDS_PER_HOUR
        level, level_color = classify(hours)
        rows.append(
            LeaderboardEntry(
                user_id=user_id,
                display_name=identity.display_name,
                profile_picture_url=identity.profile_picture_url,
                total_hours=round1(hours),
                level=level,
                level_color=level_color,
                rank=position,
                current_streak=_streak_for(store, user_id),
                is_current_user=caller_id is not None and user_id == caller_id,
            )
        )

    return rows
