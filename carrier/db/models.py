"""SQLAlchemy models for Carrier Challenges."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey,
    ForeignKeyConstraint, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored naive UTC timestamp, tagged as UTC for the wire."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Challenge(Base):
    """A challenge definition. Owned by the upstream challenge service."""

    __tablename__ = "challenges"

    id = Column(String(36), primary_key=True, default=new_id)
    version = Column(Integer, nullable=False, default=1)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=False, default="")
    author = Column(String(128), nullable=True)
    category = Column(String(32), nullable=False, default="other")
    challenge_type = Column(String(32), nullable=False)  # collection, cumulative, timeBounded
    configuration = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    participants = relationship(
        "ChallengeParticipant", back_populates="challenge", cascade="all, delete-orphan"
    )
    snapshots = relationship(
        "ChallengeSnapshot", back_populates="challenge", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "category IN ('award', 'event', 'club', 'personal', 'other')",
            name="ck_challenges_category",
        ),
        CheckConstraint(
            "challenge_type IN ('collection', 'cumulative', 'timeBounded')",
            name="ck_challenges_type",
        ),
    )

    def __repr__(self):
        return f"<Challenge {self.id[:8]} {self.name!r}>"


class ChallengeParticipant(Base):
    """A callsign's join of a challenge. Owns the progress record."""

    __tablename__ = "challenge_participants"

    id = Column(String(36), primary_key=True, default=new_id)
    challenge_id = Column(
        String(36), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    callsign = Column(String(32), nullable=False)
    invite_token = Column(String(128), nullable=True)
    joined_at = Column(DateTime, nullable=False, default=utcnow)
    status = Column(String(16), nullable=False, default="active")  # active, left, completed

    challenge = relationship("Challenge", back_populates="participants")
    progress = relationship(
        "Progress",
        back_populates="participation",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("challenge_id", "callsign", name="uq_participants_challenge_callsign"),
        CheckConstraint(
            "status IN ('active', 'left', 'completed')", name="ck_participants_status"
        ),
        Index("ix_participants_callsign", "callsign"),
    )

    def __repr__(self):
        return f"<ChallengeParticipant {self.callsign} in {self.challenge_id[:8]}>"


class Progress(Base):
    """Canonical progress record, one per (challenge, callsign)."""

    __tablename__ = "progress"

    id = Column(String(36), primary_key=True, default=new_id)
    challenge_id = Column(String(36), nullable=False)
    callsign = Column(String(32), nullable=False)

    completed_goals = Column(JSON, nullable=False, default=list)
    current_value = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=False, default=0)
    current_tier = Column(String(64), nullable=True)
    last_qso_date = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    participation = relationship("ChallengeParticipant", back_populates="progress")

    __table_args__ = (
        UniqueConstraint("challenge_id", "callsign", name="uq_progress_challenge_callsign"),
        ForeignKeyConstraint(
            ["challenge_id", "callsign"],
            ["challenge_participants.challenge_id", "challenge_participants.callsign"],
            ondelete="CASCADE",
        ),
        # Every leaderboard read walks this index
        Index(
            "ix_progress_leaderboard",
            challenge_id,
            score.desc(),
            updated_at.asc(),
        ),
    )

    def __repr__(self):
        return f"<Progress {self.callsign} score={self.score}>"


class ChallengeSnapshot(Base):
    """Frozen final standings of a challenge."""

    __tablename__ = "challenge_snapshots"

    id = Column(String(36), primary_key=True, default=new_id)
    challenge_id = Column(
        String(36), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    ended_at = Column(DateTime, nullable=False)
    final_standings = Column(JSON, nullable=False)
    statistics = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    challenge = relationship("Challenge", back_populates="snapshots")

    __table_args__ = (
        Index("ix_snapshots_challenge", "challenge_id"),
    )

    def __repr__(self):
        return f"<ChallengeSnapshot {self.id[:8]} ended={self.ended_at}>"
