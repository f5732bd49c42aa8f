"""Progress API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..reporting import (
    ProgressReport, ProgressResult, get_progress, leave_challenge, submit_progress,
)
from .deps import require_callsign
from .schemas import ProgressReportIn, ProgressReportResult, ServerProgress

router = APIRouter(prefix="/challenges", tags=["progress"])


def to_server_progress(result: ProgressResult) -> ServerProgress:
    return ServerProgress(
        completed_goals=result.completed_goals,
        current_value=result.current_value,
        percentage=result.percentage,
        score=result.score,
        rank=result.rank,
        current_tier=result.current_tier,
    )


@router.post("/{challenge_id}/progress", response_model=ProgressReportResult)
def report_progress(
    challenge_id: str,
    body: ProgressReportIn,
    callsign: str = Depends(require_callsign),
    db: Session = Depends(get_db),
):
    """
    Report progress toward a challenge.

    The server re-scores the report, stores it (overwriting the previous
    report) and answers with its own view of the participant's progress.
    """
    result = submit_progress(
        db,
        challenge_id,
        callsign,
        ProgressReport(
            completed_goals=body.completed_goals,
            current_value=body.current_value,
            qualifying_qso_count=body.qualifying_qso_count,
            last_qso_date=body.last_qso_date,
        ),
    )
    return ProgressReportResult(
        accepted=result.accepted,
        server_progress=to_server_progress(result),
        new_badges=result.new_badges,
    )


@router.get("/{challenge_id}/progress", response_model=ServerProgress)
def read_progress(
    challenge_id: str,
    callsign: str = Depends(require_callsign),
    db: Session = Depends(get_db),
):
    """Get the caller's stored progress."""
    return to_server_progress(get_progress(db, challenge_id, callsign))


@router.delete("/{challenge_id}/participation", status_code=204)
def leave(
    challenge_id: str,
    callsign: str = Depends(require_callsign),
    db: Session = Depends(get_db),
):
    """Leave a challenge. The caller's progress is deleted with the participation."""
    leave_challenge(db, challenge_id, callsign)
    return Response(status_code=204)
