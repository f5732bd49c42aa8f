"""Challenge scoring: configuration interpreter and progress evaluator."""

from .policy import GoalType, ScoringMethod, ScoringPolicy, Tier, parse_policy
from .evaluator import Evaluation, evaluate, tier_for_score

__all__ = [
    "GoalType",
    "ScoringMethod",
    "ScoringPolicy",
    "Tier",
    "parse_policy",
    "Evaluation",
    "evaluate",
    "tier_for_score",
]
