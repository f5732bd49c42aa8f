"""
Progress evaluator.

Pure scoring: (policy, reported progress) -> (score, percentage, tier).
No I/O and no failure modes; the policy has already been sanitized by
parse_policy().
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .policy import GoalType, ScoringMethod, ScoringPolicy, Tier


@dataclass(frozen=True)
class Evaluation:
    """Result of scoring one progress report."""
    score: int
    percentage: float  # 0.0 - 100.0
    tier: Optional[str]


def compute_score(policy: ScoringPolicy, completed_count: int, current_value: int) -> int:
    if policy.scoring_method is ScoringMethod.PERCENTAGE:
        if policy.total_goals == 0:
            return 0
        return (100 * completed_count) // policy.total_goals
    if policy.scoring_method is ScoringMethod.POINTS:
        # Client-reported value is trusted as-is
        return int(current_value)
    return completed_count


def compute_percentage(policy: ScoringPolicy, completed_count: int, current_value: int) -> float:
    if policy.goal_type is GoalType.COLLECTION:
        if policy.total_goals == 0:
            return 0.0
        percentage = 100.0 * completed_count / policy.total_goals
    elif policy.goal_type is GoalType.CUMULATIVE:
        if policy.target_value <= 0:
            return 0.0
        percentage = 100.0 * current_value / policy.target_value
    else:
        return 0.0
    return min(max(percentage, 0.0), 100.0)


def tier_for_score(tiers: Sequence[Tier], score: int) -> Optional[str]:
    """Return the id of the highest tier whose threshold is <= score."""
    current = None
    for tier in tiers:
        if tier.threshold > score:
            break
        current = tier.tier_id
    return current


def evaluate(
    policy: ScoringPolicy,
    completed_goals: Iterable[str],
    current_value: int,
) -> Evaluation:
    """
    Score a progress report against a challenge's policy.

    Args:
        policy: Parsed scoring policy for the challenge
        completed_goals: Goal ids the participant reports as done (set semantics)
        current_value: Running value for cumulative / points challenges

    Returns:
        Evaluation with score, percentage in [0, 100] and tier id (or None)
    """
    completed_count = len(set(completed_goals))
    score = compute_score(policy, completed_count, current_value)
    return Evaluation(
        score=score,
        percentage=compute_percentage(policy, completed_count, current_value),
        tier=tier_for_score(policy.tiers, score),
    )
