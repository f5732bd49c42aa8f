"""Database module."""

from .database import get_db, init_db, build_engine, SessionLocal
from .models import Base, Challenge, ChallengeParticipant, Progress, ChallengeSnapshot
from .progress_store import ProgressStore
from .directory import ChallengeDirectory, ChallengeView

__all__ = [
    "get_db", "init_db", "build_engine", "SessionLocal",
    "Base", "Challenge", "ChallengeParticipant", "Progress", "ChallengeSnapshot",
    "ProgressStore", "ChallengeDirectory", "ChallengeView",
]
