"""Leaderboard ranking."""

from .engine import LeaderboardEngine, LeaderboardEntry

__all__ = ["LeaderboardEngine", "LeaderboardEntry"]
