"""Domain errors surfaced to callers of the core."""


class CarrierError(Exception):
    """Base exception for errors reported to the caller."""

    error_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ChallengeNotFound(CarrierError):
    """Challenge id is unknown."""

    error_code = "CHALLENGE_NOT_FOUND"
    status_code = 404

    def __init__(self, challenge_id: str):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge '{challenge_id}' not found")


class NotParticipating(CarrierError):
    """Callsign has no active join (or no progress) for the challenge."""

    error_code = "NOT_PARTICIPATING"
    status_code = 403

    def __init__(self, challenge_id: str, callsign: str):
        self.challenge_id = challenge_id
        self.callsign = callsign
        super().__init__(f"'{callsign}' is not participating in challenge '{challenge_id}'")


class StorageFailure(CarrierError):
    """Underlying database I/O failed."""

    error_code = "STORAGE_FAILURE"
    status_code = 500
