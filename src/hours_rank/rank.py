"""Position of one user among all users by total tracked duration."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from hours_rank.errors import DataUnavailable
from hours_rank.models import EntryStore

logger = logging.getLogger(__name__)

# Returned when the per-user totals cannot be read.
RANK_UNAVAILABLE = 0


def rank_from_totals(target_seconds: int, totals: Mapping[str, int]) -> int:
    """1 + number of users whose total strictly exceeds target_seconds.

    Equal totals share a rank. A target of 0 is ranked the same way.
    """
    return 1 + sum(1 for total in totals.values() if total > target_seconds)


def compute_rank(store: EntryStore, target_seconds: int) -> int:
    """Rank against the store's aggregation, falling back to 0 if it fails."""
    try:
        totals = store.total_duration_per_user()
    except DataUnavailable as exc:
        logger.warning("rank unavailable, reporting %d: %s", RANK_UNAVAILABLE, exc)
        return RANK_UNAVAILABLE
    return rank_from_totals(target_seconds, totals)
