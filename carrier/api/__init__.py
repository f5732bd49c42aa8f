"""API routes."""

from .progress import router as progress_router
from .leaderboard import router as leaderboard_router

__all__ = ["progress_router", "leaderboard_router"]
