"""Core-goal tallies across all profiles (dashboard counts).

Free-form looking_for / offering tags are mapped onto five canonical goals
through a fixed alias table; anything unrecognised is ignored.
"""

from collections.abc import Iterable

from profile_matching.matching.types import ProfileRecord

CORE_GOALS = ("hiring", "networking", "investment", "entertainment", "learning")

# Keys must match after lowercasing and trimming
GOAL_ALIASES = {
    # hiring
    "hire": "hiring",
    "recruit": "hiring",
    "recruiting": "hiring",
    "job": "hiring",
    "jobs": "hiring",
    # networking
    "network": "networking",
    "connections": "networking",
    "meet people": "networking",
    "mingle": "networking",
    # investment
    "investor": "investment",
    "investors": "investment",
    "funding": "investment",
    "fund": "investment",
    "vc": "investment",
    "venture capital": "investment",
    "angel": "investment",
    # entertainment
    "fun": "entertainment",
    "party": "entertainment",
    "music": "entertainment",
    "show": "entertainment",
    # learning
    "learn": "learning",
    "education": "learning",
    "talks": "learning",
    "workshops": "learning",
    "lecture": "learning",
    "classes": "learning",
    "mentor": "learning",
    "mentoring": "learning",
}


def normalize_core_goal(tag: object) -> str | None:
    """Map a tag to its core goal, or None if it is not one."""
    text = str(tag or "").lower().strip()
    goal = GOAL_ALIASES.get(text, text)
    return goal if goal in CORE_GOALS else None


def tally_core_goals(profiles: Iterable[ProfileRecord]) -> dict[str, dict[str, int]]:
    """Count unique profiles per core goal, separately for looking_for and offering.

    Returns:
        {"looking": {goal: n, ...}, "offering": {goal: n, ...}} with every goal present.
    """
    looking: dict[str, set[str]] = {goal: set() for goal in CORE_GOALS}
    offering: dict[str, set[str]] = {goal: set() for goal in CORE_GOALS}

    for index, profile in enumerate(profiles):
        # Profiles without an id still count once
        key = profile.id or f"#{index}"
        for tag in profile.tags.looking_for:
            goal = normalize_core_goal(tag)
            if goal:
                looking[goal].add(key)
        for tag in profile.tags.offering:
            goal = normalize_core_goal(tag)
            if goal:
                offering[goal].add(key)

    return {
        "looking": {goal: len(ids) for goal, ids in looking.items()},
        "offering": {goal: len(ids) for goal, ids in offering.items()},
    }
