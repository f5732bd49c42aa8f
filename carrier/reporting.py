"""
Progress reporting and leaderboard reads.

Glue between the challenge directory, the scoring policy, the progress
store and the ranking engine. Each call is one bounded unit of work with no
internal retries.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from .config import AROUND_DEFAULT_RADIUS
from .db import ChallengeDirectory, ProgressStore
from .db.models import utcnow
from .errors import NotParticipating
from .ranking import LeaderboardEngine, LeaderboardEntry
from .scoring import evaluate, parse_policy

logger = logging.getLogger(__name__)


@dataclass
class ProgressReport:
    """Progress as reported by a participant's client."""
    completed_goals: List[str]
    current_value: int = 0
    qualifying_qso_count: int = 0
    last_qso_date: Optional[datetime] = None


@dataclass
class ProgressResult:
    """Server view of a participant's progress after a report."""
    accepted: bool
    completed_goals: List[str]
    current_value: int
    percentage: float
    score: int
    rank: int  # 0 when the participant has no stored progress yet
    current_tier: Optional[str]
    new_badges: List[str] = field(default_factory=list)


@dataclass
class LeaderboardPage:
    entries: List[LeaderboardEntry]
    total: int
    user_position: Optional[LeaderboardEntry]
    last_updated: datetime


def _as_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _require_participant(directory: ChallengeDirectory, challenge_id: str, callsign: str):
    challenge = directory.get(challenge_id)
    if not directory.is_participating(challenge_id, callsign):
        raise NotParticipating(challenge_id, callsign)
    return challenge


def submit_progress(
    db: Session,
    challenge_id: str,
    callsign: str,
    report: ProgressReport,
    store: Optional[ProgressStore] = None,
) -> ProgressResult:
    """
    Score a progress report and persist it.

    Reports against an inactive challenge are not stored; the result carries
    accepted=False and the progress the server already has.

    Raises:
        ChallengeNotFound: Unknown challenge id
        NotParticipating: Callsign has no active join for the challenge
        StorageFailure: Database I/O failed
    """
    directory = ChallengeDirectory(db)
    challenge = _require_participant(directory, challenge_id, callsign)
    store = store or ProgressStore(db)
    engine = LeaderboardEngine(db)
    policy = parse_policy(challenge.configuration, challenge.challenge_type)

    if not challenge.is_active:
        logger.info("Rejected report from %s: challenge %s is inactive", callsign, challenge_id)
        existing = store.get(challenge_id, callsign)
        if existing is None:
            return ProgressResult(
                accepted=False, completed_goals=[], current_value=0,
                percentage=0.0, score=0, rank=0, current_tier=None,
            )
        stored = evaluate(policy, existing.completed_goals, existing.current_value)
        return ProgressResult(
            accepted=False,
            completed_goals=list(existing.completed_goals),
            current_value=existing.current_value,
            percentage=stored.percentage,
            score=existing.score,
            rank=engine.rank_of(challenge_id, callsign),
            current_tier=existing.current_tier,
        )

    result = evaluate(policy, report.completed_goals, report.current_value)
    record = store.upsert(
        challenge_id,
        callsign,
        completed_goals=report.completed_goals,
        current_value=report.current_value,
        score=result.score,
        tier=result.tier,
        last_qso_date=_as_utc_naive(report.last_qso_date),
    )
    rank = engine.rank_of(challenge_id, callsign)

    logger.info(
        "Progress %s in %s: score=%d tier=%s rank=%d qsos=%d",
        callsign, challenge_id, result.score, result.tier, rank, report.qualifying_qso_count,
    )
    return ProgressResult(
        accepted=True,
        completed_goals=list(record.completed_goals),
        current_value=record.current_value,
        percentage=result.percentage,
        score=record.score,
        rank=rank,
        current_tier=record.current_tier,
    )


def get_progress(db: Session, challenge_id: str, callsign: str) -> ProgressResult:
    """Stored progress of one participant, re-evaluated for its percentage."""
    directory = ChallengeDirectory(db)
    challenge = directory.get(challenge_id)
    record = ProgressStore(db).get(challenge_id, callsign)
    if record is None:
        raise NotParticipating(challenge_id, callsign)

    policy = parse_policy(challenge.configuration, challenge.challenge_type)
    stored = evaluate(policy, record.completed_goals, record.current_value)
    return ProgressResult(
        accepted=True,
        completed_goals=list(record.completed_goals),
        current_value=record.current_value,
        percentage=stored.percentage,
        score=record.score,
        rank=LeaderboardEngine(db).rank_of(challenge_id, callsign),
        current_tier=record.current_tier,
    )


def get_leaderboard(
    db: Session,
    challenge_id: str,
    limit: int,
    offset: int = 0,
    around: Optional[str] = None,
    viewer: Optional[str] = None,
    radius: int = AROUND_DEFAULT_RADIUS,
) -> LeaderboardPage:
    """
    One page of a challenge's leaderboard.

    With `around`, the page is the window centered on that callsign and
    `offset` is ignored. `user_position` is the entry of `around`, falling
    back to `viewer`, when that callsign has progress.
    """
    ChallengeDirectory(db).get(challenge_id)
    engine = LeaderboardEngine(db)

    if around:
        entries = engine.around(challenge_id, around, radius)
    else:
        entries = engine.top(challenge_id, limit, offset)

    focus = around or viewer
    user_position = engine.entry_for(challenge_id, focus) if focus else None

    return LeaderboardPage(
        entries=entries,
        total=engine.total(challenge_id),
        user_position=user_position,
        last_updated=engine.last_updated(challenge_id) or utcnow(),
    )


def leave_challenge(db: Session, challenge_id: str, callsign: str) -> None:
    """Drop a participation together with its progress record."""
    directory = ChallengeDirectory(db)
    directory.get(challenge_id)
    directory.leave(challenge_id, callsign)
