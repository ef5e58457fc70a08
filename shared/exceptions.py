"""
Base exception classes for the RechargeEarn client.

Each module should define its own exceptions that inherit from these bases.
Flow controllers catch RechargeError and turn it into an inline message,
so every failure the user can act on must derive from it.
"""

from typing import Optional, Any


class RechargeError(Exception):
    """
    Base exception for all RechargeEarn client errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for display or JSON output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RechargeError):
    """Client-side input validation failed. Field messages live in details["fields"]."""

    @property
    def fields(self) -> dict[str, str]:
        return self.details.get("fields", {})


class AuthenticationError(RechargeError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class SessionExpiredError(AuthenticationError):
    """Raised after the backend answered 401 and the local session was torn down."""

    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message, code="SESSION_EXPIRED")


class ApiError(RechargeError):
    """
    The backend answered with a non-2xx status.

    ``message`` is the backend-provided message when the body carried one,
    otherwise a generic fallback.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        super().__init__(
            message,
            code="API_ERROR",
            details={"status_code": status_code, "errors": errors or []},
        )
        self.status_code = status_code
        self.errors = errors or []


class ExternalServiceError(RechargeError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class InvalidTransitionError(RechargeError):
    """A flow was asked to move between two states that are not connected."""

    def __init__(self, flow: str, source: str, target: str):
        super().__init__(
            f"{flow}: cannot move from '{source}' to '{target}'",
            code="INVALID_TRANSITION",
            details={"flow": flow, "source": source, "target": target},
        )


def error_message(error: Exception, fallback: str) -> str:
    """
    Pick the message to show for a failed call.

    Backend message first, then the first field error, then ``fallback``.
    """
    if isinstance(error, ApiError):
        if error.message:
            return error.message
        if error.errors:
            return error.errors[0].get("msg") or fallback
        return fallback
    if isinstance(error, (AuthenticationError, ValidationError)) and error.message:
        return error.message
    return fallback
