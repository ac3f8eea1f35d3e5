"""Tests for the hours-based level tiers."""

import pytest

from hours_rank.levels import TIERS, classify, hours_to_next_tier, tier_from_hours


class TestTierTable:
    def test_twenty_tiers(self):
        assert len(TIERS) == 20

    def test_bounds_strictly_increasing(self):
        uppers = [t["upper"] for t in TIERS]
        assert uppers == sorted(uppers)
        assert len(set(uppers)) == len(uppers)

    def test_first_and_last(self):
        assert TIERS[0]["name"] == "Newbie"
        assert TIERS[-1]["name"] == "Eternal"


class TestClassify:
    @pytest.mark.parametrize(
        "hours, expected",
        [
            (0.0, ("Newbie", "#00d4ff")),
            (0.999, ("Newbie", "#00d4ff")),
            (1.0, ("Beginner", "#00e5ff")),
            (4.99, ("Beginner", "#00e5ff")),
            (5.0, ("Learner", "#1de9b6")),
            (25.0, ("Practitioner", "#76ff03")),
            (99.9, ("Skilled", "#aeea00")),
            (150.0, ("Professional", "#ffab00")),
            (499.0, ("Master", "#ff1744")),
            (750.0, ("Elite", "#d500f9")),
            (2999.0, ("Legend", "#3d5afe")),
            (4999.0, ("Immortal", "#00b0ff")),
            (7499.999, ("Divine", "#00e5ff")),
            (7500.0, ("Eternal", "#1de9b6")),
            (1_000_000.0, ("Eternal", "#1de9b6")),
        ],
    )
    def test_boundaries(self, hours, expected):
        assert classify(hours) == expected

    def test_every_lower_bound_enters_next_tier(self):
        for prev, tier in zip(TIERS, TIERS[1:]):
            assert classify(prev["upper"])[0] == tier["name"]

    def test_monotonic(self):
        order = [t["name"] for t in TIERS]
        hours = [0, 0.5, 1, 3, 8, 30, 120, 600, 2500, 8000]
        positions = [order.index(classify(h)[0]) for h in hours]
        assert positions == sorted(positions)


class TestTierFromHours:
    def test_returns_dict(self):
        tier = tier_from_hours(12)
        assert tier["name"] == "Apprentice"
        assert tier["tier"] == 4


class TestHoursToNextTier:
    def test_newbie(self):
        name, remaining = hours_to_next_tier("Newbie", 0.25)
        assert name == "Beginner"
        assert remaining == pytest.approx(0.75)

    def test_never_negative(self):
        assert hours_to_next_tier("Newbie", 1.0) == ("Beginner", 0.0)

    def test_top_tier(self):
        assert hours_to_next_tier("Eternal", 9000) is None

    def test_unknown_name(self):
        assert hours_to_next_tier("Bronze", 3) is None
