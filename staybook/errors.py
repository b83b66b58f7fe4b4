"""Domain errors raised by the booking core.

Each error carries the HTTP status the API layer answers with; the
handler lives in ``staybook.main``.
"""


class StayBookError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StayBookError):
    """Malformed input: date order, non-positive price or capacity, missing field."""
    status_code = 400


class AuthorizationError(StayBookError):
    """The principal has no rights over the target entity."""
    status_code = 403


class NotFoundError(StayBookError):
    status_code = 404


class ConflictError(StayBookError):
    """Overlapping booking or duplicate row; the caller may retry with other parameters."""
    status_code = 409


class StateError(StayBookError):
    """Illegal lifecycle transition or illegal review."""
    status_code = 409
