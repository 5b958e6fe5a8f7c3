"""Domain error taxonomy for the applicant portal.

All errors are local, recoverable conditions. Services raise them and the
HTTP layer maps each ``code`` to a structured response. Nothing here is
retried.
"""


class PortalError(Exception):
    """Base class for portal domain errors."""

    code = "portal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Missing or malformed required fields."""

    code = "validation_error"


class LimitExceededError(PortalError):
    """Upload cap reached."""

    code = "limit_exceeded"


class PreconditionError(PortalError):
    """Transition requested without its preconditions being satisfied."""

    code = "precondition_failed"


class InvalidRequestError(PortalError):
    """Request that does not apply to the record's current state."""

    code = "invalid_request"


class ConflictError(PortalError):
    """Duplicate request or nothing left to act on."""

    code = "conflict"


class NotFoundError(PortalError):
    """No record for the given key."""

    code = "not_found"


class InvalidTokenError(NotFoundError):
    """Download token unknown, already used, or expired."""

    code = "invalid_token"
