from __future__ import annotations


class ParkingError(Exception):
    """
    Base class for expected, caller-facing failures.

    Each subclass carries the HTTP status the request surface answers with.
    """

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# -------------------------
# 404
# -------------------------
class NotFound(ParkingError):
    status_code = 404
    default_message = "Not found"


class ZoneNotFound(NotFound):
    default_message = "Zone not found"


class SpotNotFound(NotFound):
    default_message = "Spot not found"


class ReservationNotFound(NotFound):
    default_message = "Reservation not found"


# -------------------------
# 400
# -------------------------
class InvalidState(ParkingError):
    default_message = "Invalid state"


class SpotUnavailable(InvalidState):
    default_message = "Spot is not available"


class DuplicateUser(ParkingError):
    default_message = "Username or KLU ID already exists"


class ValidationError(ParkingError):
    default_message = "Invalid request"


# -------------------------
# 401
# -------------------------
class InvalidCredentials(ParkingError):
    status_code = 401
    default_message = "Invalid credentials"


# -------------------------
# 500
# -------------------------
class InvariantViolation(ParkingError):
    """Zone counters would drift from the spot list. Always a bug."""

    status_code = 500
    default_message = "Zone counters out of balance"
