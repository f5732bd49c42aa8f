"""
Progress store: one canonical progress row per (challenge, callsign).

Writes go through a single INSERT ... ON CONFLICT DO UPDATE statement so two
concurrent reports for the same participant can never create two rows; the
later commit wins. No domain checks happen here - callers verify
participation first.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageFailure
from .models import Progress, new_id, utcnow

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class ProgressStore:
    """Atomic create-or-update and point lookup of progress records."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect](Progress)
        except KeyError:
            raise StorageFailure(f"Upsert not supported on '{dialect}' databases") from None

    def upsert(
        self,
        challenge_id: str,
        callsign: str,
        completed_goals: Iterable[str],
        current_value: int,
        score: int,
        tier: Optional[str],
        last_qso_date: Optional[datetime] = None,
    ) -> Progress:
        """
        Create the record or fully overwrite it.

        Every mutable column is replaced (not merged) and updated_at is
        refreshed, even when the content is unchanged.
        """
        values = {
            "completed_goals": sorted(set(completed_goals)),
            "current_value": current_value,
            "score": score,
            "current_tier": tier,
            "last_qso_date": last_qso_date,
            "updated_at": self.clock(),
        }
        stmt = self._insert().values(
            id=new_id(), challenge_id=challenge_id, callsign=callsign, **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Progress.challenge_id, Progress.callsign],
            set_=values,
        )

        try:
            self.db.execute(stmt)
            self.db.commit()
            record = self.db.execute(
                select(Progress)
                .where(Progress.challenge_id == challenge_id, Progress.callsign == callsign)
                .execution_options(populate_existing=True)
            ).scalar_one()
        except (SQLAlchemyError, OverflowError) as e:
            self.db.rollback()
            logger.exception("Progress upsert failed for %s in %s", callsign, challenge_id)
            raise StorageFailure(f"Failed to store progress: {e}") from e

        return record

    def get(self, challenge_id: str, callsign: str) -> Optional[Progress]:
        try:
            return self.db.execute(
                select(Progress).where(
                    Progress.challenge_id == challenge_id,
                    Progress.callsign == callsign,
                )
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Progress lookup failed for %s in %s", callsign, challenge_id)
            raise StorageFailure(f"Failed to load progress: {e}") from e
