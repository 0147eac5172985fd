"""
Engine errors.

Parsing defects never surface here: bad numbers and dates are recovered by
fallbacks. These errors cover malformed collections, rejected transitions
and remote failures.
"""

from typing import Any, Optional


class EngineError(Exception):
    """Base engine error."""

    error_code: str = "ENGINE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a notice payload for the UI layer."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ReconciliationError(EngineError):
    """An input to the join step is not a sequence."""
    error_code = "RECONCILIATION_ERROR"


class ValidationError(EngineError):
    """Empty or whitespace-only response text."""
    error_code = "VALIDATION_ERROR"


class InvalidTransitionError(EngineError):
    """The query is not in a state that allows the requested action."""
    error_code = "INVALID_TRANSITION"


class QueryNotFoundError(EngineError):
    """No query with the given id in the current snapshot."""
    error_code = "QUERY_NOT_FOUND"


class AuthenticationMissing(EngineError):
    """No bearer credential in the session store."""
    error_code = "AUTHENTICATION_MISSING"


class TransportError(EngineError):
    """Transport or server failure."""
    error_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code


class RemoteConfirmationError(EngineError):
    """
    Remote confirmation of an optimistic change failed.

    The local change has already been rolled back when this is raised.
    """
    error_code = "REMOTE_CONFIRMATION_FAILED"

    def __init__(
        self,
        message: str,
        record_id: Any = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.record_id = record_id
