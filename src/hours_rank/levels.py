"""Level tiers by cumulative tracked hours. Pure functions, no side effects."""

import math

# Ordered by exclusive upper bound in hours. A tier covers [previous bound, upper).
TIERS: list[dict] = [
    {"tier": 1, "upper": 1, "name": "Newbie", "color": "#00d4ff"},
    {"tier": 2, "upper": 5, "name": "Beginner", "color": "#00e5ff"},
    {"tier": 3, "upper": 10, "name": "Learner", "color": "#1de9b6"},
    {"tier": 4, "upper": 25, "name": "Apprentice", "color": "#00e676"},
    {"tier": 5, "upper": 50, "name": "Practitioner", "color": "#76ff03"},
    {"tier": 6, "upper": 100, "name": "Skilled", "color": "#aeea00"},
    {"tier": 7, "upper": 150, "name": "Experienced", "color": "#ffd600"},
    {"tier": 8, "upper": 200, "name": "Professional", "color": "#ffab00"},
    {"tier": 9, "upper": 300, "name": "Expert", "color": "#ff6d00"},
    {"tier": 10, "upper": 400, "name": "Veteran", "color": "#ff3d00"},
    {"tier": 11, "upper": 500, "name": "Master", "color": "#ff1744"},
    {"tier": 12, "upper": 750, "name": "Grandmaster", "color": "#f50057"},
    {"tier": 13, "upper": 1000, "name": "Elite", "color": "#d500f9"},
    {"tier": 14, "upper": 1500, "name": "Champion", "color": "#aa00ff"},
    {"tier": 15, "upper": 2000, "name": "Hero", "color": "#651fff"},
    {"tier": 16, "upper": 3000, "name": "Legend", "color": "#3d5afe"},
    {"tier": 17, "upper": 4000, "name": "Mythic", "color": "#2979ff"},
    {"tier": 18, "upper": 5000, "name": "Immortal", "color": "#00b0ff"},
    {"tier": 19, "upper": 7500, "name": "Divine", "color": "#00e5ff"},
    {"tier": 20, "upper": math.inf, "name": "Eternal", "color": "#1de9b6"},
]


def tier_from_hours(total_hours: float) -> dict:
    """Return the tier dict whose half-open range contains total_hours."""
    for tier in TIERS:
        if total_hours < tier["upper"]:
            return tier
    return TIERS[-1]


def classify(total_hours: float) -> tuple[str, str]:
    """Return (level name, hex color) for a cumulative hours value."""
    tier = tier_from_hours(total_hours)
    return tier["name"], tier["color"]


def hours_to_next_tier(level_name: str, total_hours: float) -> tuple[str, float] | None:
    """Return (next tier name, hours still needed), or None at the top tier."""
    for i, tier in enumerate(TIERS[:-1]):
        if tier["name"] == level_name:
            return TIERS[i + 1]["name"], max(tier["upper"] - total_hours, 0.0)
    return None
