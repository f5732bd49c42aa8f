"""
Leaderboard ranking engine.

Every query ranks the current progress rows of one challenge inside the
database, using window functions over the leaderboard index:

    display order:  score DESC, updated_at ASC, callsign ASC
    rank:           RANK() OVER (ORDER BY score DESC)

Rank is competition ranking on score: equal scores share a rank and the
next score skips (100, 100, 50 -> 1, 1, 3). Earlier achievers are listed
first within a shared rank. Windows ("around me") are cut on display
position, so a radius of 0 is always exactly one row.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import AROUND_MAX_RADIUS, LEADERBOARD_MAX_LIMIT
from ..db.models import ChallengeSnapshot, Progress, as_utc, utcnow
from ..errors import NotParticipating, StorageFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardEntry:
    """One computed leaderboard row. Never persisted."""
    rank: int
    position: int
    callsign: str
    score: int
    tier: Optional[str]
    completed_at: Optional[datetime]  # Only set once score > 0

    def as_dict(self) -> dict:
        return {
            "rank": self.rank,
            "callsign": self.callsign,
            "score": self.score,
            "currentTier": self.tier,
            "completedAt": as_utc(self.completed_at).isoformat() if self.completed_at else None,
        }


class LeaderboardEngine:
    """Top-N, single-rank and windowed queries over a challenge's progress."""

    def __init__(self, db: Session):
        self.db = db

    def _ranked(self, challenge_id: str):
        """Subquery of a challenge's rows with rank and display position."""
        return select(
            Progress.callsign,
            Progress.score,
            Progress.current_tier,
            Progress.updated_at,
            func.rank().over(order_by=Progress.score.desc()).label("rank"),
            func.row_number().over(
                order_by=(
                    Progress.score.desc(),
                    Progress.updated_at.asc(),
                    Progress.callsign.asc(),
                )
            ).label("position"),
        ).where(Progress.challenge_id == challenge_id).subquery()

    def _fetch(self, stmt) -> list:
        try:
            return self.db.execute(stmt).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Leaderboard query failed")
            raise StorageFailure(f"Failed to read leaderboard: {e}") from e

    def _scalar(self, stmt):
        try:
            return self.db.execute(stmt).scalar()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Leaderboard query failed")
            raise StorageFailure(f"Failed to read leaderboard: {e}") from e

    @staticmethod
    def _to_entry(row) -> LeaderboardEntry:
        return LeaderboardEntry(
            rank=row.rank,
            position=row.position,
            callsign=row.callsign,
            score=row.score,
            tier=row.current_tier,
            completed_at=row.updated_at if row.score > 0 else None,
        )

    def top(self, challenge_id: str, limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        """Entries [offset, offset + limit) of the display order."""
        limit = max(1, min(limit, LEADERBOARD_MAX_LIMIT))
        offset = max(0, offset)

        ranked = self._ranked(challenge_id)
        rows = self._fetch(
            select(ranked).order_by(ranked.c.position).offset(offset).limit(limit)
        )
        return [self._to_entry(row) for row in rows]

    def entry_for(self, challenge_id: str, callsign: str) -> Optional[LeaderboardEntry]:
        ranked = self._ranked(challenge_id)
        rows = self._fetch(select(ranked).where(ranked.c.callsign == callsign))
        return self._to_entry(rows[0]) if rows else None

    def _require_entry(self, challenge_id: str, callsign: str) -> LeaderboardEntry:
        entry = self.entry_for(challenge_id, callsign)
        if entry is None:
            raise NotParticipating(challenge_id, callsign)
        return entry

    def rank_of(self, challenge_id: str, callsign: str) -> int:
        """Rank of one participant, identical to what top() reports for it."""
        return self._require_entry(challenge_id, callsign).rank

    def position_of(self, challenge_id: str, callsign: str) -> int:
        """1-based display position of one participant."""
        return self._require_entry(challenge_id, callsign).position

    def around(self, challenge_id: str, callsign: str, radius: int) -> List[LeaderboardEntry]:
        """
        Entries within `radius` display positions of the participant.

        Raises:
            NotParticipating: The callsign has no progress in the challenge
        """
        radius = max(0, min(radius, AROUND_MAX_RADIUS))
        center = self.position_of(challenge_id, callsign)

        ranked = self._ranked(challenge_id)
        rows = self._fetch(
            select(ranked)
            .where(ranked.c.position.between(center - radius, center + radius))
            .order_by(ranked.c.position)
        )
        return [self._to_entry(row) for row in rows]

    def total(self, challenge_id: str) -> int:
        return self._scalar(
            select(func.count()).select_from(Progress).where(Progress.challenge_id == challenge_id)
        ) or 0

    def last_updated(self, challenge_id: str) -> Optional[datetime]:
        return self._scalar(
            select(func.max(Progress.updated_at)).where(Progress.challenge_id == challenge_id)
        )

    def snapshot(self, challenge_id: str, ended_at: Optional[datetime] = None) -> ChallengeSnapshot:
        """Freeze the full standings and summary statistics of a challenge."""
        ranked = self._ranked(challenge_id)
        standings = [
            self._to_entry(row).as_dict()
            for row in self._fetch(select(ranked).order_by(ranked.c.position))
        ]
        stats = self._fetch(
            select(
                func.count(Progress.id),
                func.max(Progress.score),
                func.avg(Progress.score),
            ).where(Progress.challenge_id == challenge_id)
        )[0]
        participants, top_score, mean_score = stats

        snapshot = ChallengeSnapshot(
            challenge_id=challenge_id,
            ended_at=ended_at or utcnow(),
            final_standings=standings,
            statistics={
                "participants": participants,
                "topScore": top_score or 0,
                "meanScore": round(float(mean_score), 2) if mean_score is not None else 0.0,
            },
        )
        try:
            self.db.add(snapshot)
            self.db.commit()
            self.db.refresh(snapshot)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Snapshot failed for %s", challenge_id)
            raise StorageFailure(f"Failed to store snapshot: {e}") from e

        logger.info("Snapshot %s of challenge %s: %d standings", snapshot.id, challenge_id, participants)
        return snapshot

    def latest_snapshot(self, challenge_id: str) -> Optional[ChallengeSnapshot]:
        try:
            return self.db.execute(
                select(ChallengeSnapshot)
                .where(ChallengeSnapshot.challenge_id == challenge_id)
                .order_by(ChallengeSnapshot.created_at.desc(), ChallengeSnapshot.ended_at.desc())
                .limit(1)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Snapshot lookup failed for %s", challenge_id)
            raise StorageFailure(f"Failed to load snapshot: {e}") from e
