"""Read access to challenges and participations owned by upstream services."""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ChallengeNotFound, NotParticipating, StorageFailure
from .models import Challenge, ChallengeParticipant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeView:
    """What the scoring core needs to know about a challenge."""
    id: str
    challenge_type: str
    configuration: Any
    is_active: bool


class ChallengeDirectory:
    """Challenge lookup and participation checks."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, challenge_id: str) -> ChallengeView:
        try:
            challenge = self.db.get(Challenge, challenge_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Challenge lookup failed for %s", challenge_id)
            raise StorageFailure(f"Failed to load challenge: {e}") from e
        if challenge is None:
            raise ChallengeNotFound(challenge_id)
        return ChallengeView(
            id=challenge.id,
            challenge_type=challenge.challenge_type,
            configuration=challenge.configuration,
            is_active=challenge.is_active,
        )

    def _participation(self, challenge_id: str, callsign: str):
        try:
            return self.db.execute(
                select(ChallengeParticipant).where(
                    ChallengeParticipant.challenge_id == challenge_id,
                    ChallengeParticipant.callsign == callsign,
                    ChallengeParticipant.status == "active",
                )
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Participation lookup failed for %s in %s", callsign, challenge_id)
            raise StorageFailure(f"Failed to load participation: {e}") from e

    def is_participating(self, challenge_id: str, callsign: str) -> bool:
        return self._participation(challenge_id, callsign) is not None

    def leave(self, challenge_id: str, callsign: str) -> None:
        """Remove the participation; its progress record goes with it."""
        participation = self._participation(challenge_id, callsign)
        if participation is None:
            raise NotParticipating(challenge_id, callsign)
        try:
            self.db.delete(participation)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Leave failed for %s in %s", callsign, challenge_id)
            raise StorageFailure(f"Failed to leave challenge: {e}") from e
        logger.info("%s left challenge %s", callsign, challenge_id)
