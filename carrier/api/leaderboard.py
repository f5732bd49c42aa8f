"""Leaderboard API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..config import AROUND_DEFAULT_RADIUS, LEADERBOARD_DEFAULT_LIMIT
from ..db import ChallengeDirectory, get_db
from ..db.models import as_utc
from ..ranking import LeaderboardEngine, LeaderboardEntry
from ..reporting import get_leaderboard
from .deps import optional_callsign
from .schemas import Leaderboard, LeaderboardEntryInfo, SnapshotInfo

router = APIRouter(prefix="/challenges", tags=["leaderboard"])


def to_entry_info(entry: LeaderboardEntry) -> LeaderboardEntryInfo:
    return LeaderboardEntryInfo(
        rank=entry.rank,
        callsign=entry.callsign,
        score=entry.score,
        current_tier=entry.tier,
        completed_at=as_utc(entry.completed_at),
    )


@router.get("/{challenge_id}/leaderboard", response_model=Leaderboard)
def read_leaderboard(
    challenge_id: str,
    limit: int = Query(LEADERBOARD_DEFAULT_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    around: Optional[str] = None,
    radius: int = Query(AROUND_DEFAULT_RADIUS, ge=0),
    viewer: Optional[str] = Depends(optional_callsign),
    db: Session = Depends(get_db),
):
    """
    Get the leaderboard for a challenge.

    Pass `around=<callsign>` for the window centered on that participant
    instead of an offset page. `limit` is capped server-side.
    """
    page = get_leaderboard(
        db,
        challenge_id,
        limit=limit,
        offset=offset,
        around=around.strip().upper() if around else None,
        viewer=viewer,
        radius=radius,
    )
    return Leaderboard(
        leaderboard=[to_entry_info(entry) for entry in page.entries],
        total=page.total,
        user_position=to_entry_info(page.user_position) if page.user_position else None,
        last_updated=as_utc(page.last_updated),
    )


def to_snapshot_info(snapshot) -> SnapshotInfo:
    return SnapshotInfo(
        id=snapshot.id,
        challenge_id=snapshot.challenge_id,
        ended_at=as_utc(snapshot.ended_at),
        final_standings=snapshot.final_standings,
        statistics=snapshot.statistics,
    )


@router.post("/{challenge_id}/snapshot", response_model=SnapshotInfo, status_code=201)
def create_snapshot(challenge_id: str, db: Session = Depends(get_db)):
    """Freeze the current standings of a challenge."""
    ChallengeDirectory(db).get(challenge_id)
    return to_snapshot_info(LeaderboardEngine(db).snapshot(challenge_id))


@router.get("/{challenge_id}/snapshot", response_model=SnapshotInfo)
def read_snapshot(challenge_id: str, db: Session = Depends(get_db)):
    """Get the most recent frozen standings of a challenge."""
    ChallengeDirectory(db).get(challenge_id)
    snapshot = LeaderboardEngine(db).latest_snapshot(challenge_id)
    if snapshot is None:
        raise HTTPException(
            status_code=404,
            detail={"error_code": "NOT_FOUND", "message": "No snapshot for this challenge"},
        )
    return to_snapshot_info(snapshot)
