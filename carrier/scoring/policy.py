"""
Challenge configuration interpreter.

Turns the raw JSON configuration stored with a challenge into an immutable
ScoringPolicy. Parsing is permissive: every field has a default, so a
challenge author can omit whole sections and still get a usable policy.

Expected shape (all keys optional):

    {
        "goals": {"items": [{"id": "W1AW"}, ...], "targetValue": 500},
        "scoring": {"method": "count" | "percentage" | "points", "tiers": [...]},
        "tiers": [{"id": "bronze", "threshold": 10}, ...]
    }
"""

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Optional, Tuple

DEFAULT_TARGET_VALUE = 100.0


class GoalType(str, Enum):
    COLLECTION = "collection"
    CUMULATIVE = "cumulative"
    TIME_BOUNDED = "timeBounded"


class ScoringMethod(str, Enum):
    COUNT = "count"
    PERCENTAGE = "percentage"
    POINTS = "points"


@dataclass(frozen=True)
class Tier:
    """A named milestone unlocked once the score reaches its threshold."""
    threshold: int
    tier_id: str


@dataclass(frozen=True)
class ScoringPolicy:
    """Typed scoring rules for one challenge."""
    goal_type: GoalType = GoalType.COLLECTION
    total_goals: int = 0
    target_value: float = DEFAULT_TARGET_VALUE
    scoring_method: ScoringMethod = ScoringMethod.COUNT
    tiers: Tuple[Tier, ...] = ()


def _is_number(value: Any) -> bool:
    # bool is an int subclass; "true" is not a threshold
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _section(configuration: dict, key: str) -> dict:
    section = configuration.get(key)
    return section if isinstance(section, dict) else {}


def _parse_goal_type(challenge_type: Optional[str]) -> GoalType:
    try:
        return GoalType(challenge_type)
    except ValueError:
        return GoalType.COLLECTION


def _parse_scoring_method(raw: Any) -> ScoringMethod:
    try:
        return ScoringMethod(raw)
    except ValueError:
        return ScoringMethod.COUNT


def _parse_target_value(raw: Any) -> float:
    if _is_number(raw) and raw > 0:
        return float(raw)
    return DEFAULT_TARGET_VALUE


def _parse_tiers(raw: Any) -> Tuple[Tier, ...]:
    if not isinstance(raw, list):
        return ()

    tiers = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        threshold = entry.get("threshold")
        tier_id = entry.get("id")
        if not _is_number(threshold) or not isinstance(tier_id, str) or not tier_id:
            continue
        tiers.append(Tier(threshold=math.ceil(threshold), tier_id=tier_id))

    # Stable sort, then keep the first tier declared at each threshold
    tiers.sort(key=lambda tier: tier.threshold)
    unique = []
    for tier in tiers:
        if unique and unique[-1].threshold == tier.threshold:
            continue
        unique.append(tier)
    return tuple(unique)


def parse_policy(configuration: Any, challenge_type: Optional[str]) -> ScoringPolicy:
    """
    Build a ScoringPolicy from a challenge's raw configuration.

    Never raises: malformed or missing sections degrade to defaults.

    Args:
        configuration: The challenge's configuration document (decoded JSON)
        challenge_type: Declared goal type category of the challenge

    Returns:
        ScoringPolicy with tiers sorted by strictly increasing threshold
    """
    goal_type = _parse_goal_type(challenge_type)
    if not isinstance(configuration, dict):
        return ScoringPolicy(goal_type=goal_type)

    goals = _section(configuration, "goals")
    scoring = _section(configuration, "scoring")

    items = goals.get("items")
    total_goals = len(items) if isinstance(items, list) else 0

    raw_tiers = configuration.get("tiers")
    if raw_tiers is None:
        raw_tiers = scoring.get("tiers")

    return ScoringPolicy(
        goal_type=goal_type,
        total_goals=total_goals,
        target_value=_parse_target_value(goals.get("targetValue")),
        scoring_method=_parse_scoring_method(scoring.get("method")),
        tiers=_parse_tiers(raw_tiers),
    )
