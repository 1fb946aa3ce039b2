"""
Base exception classes for the HouseHelp backend.

Each module should define its own exceptions that inherit from these bases.
The API layer maps them to HTTP responses using ``status_code``.
"""

from typing import Optional, Any


class HouseHelpError(Exception):
    """
    Base exception for all HouseHelp errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

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
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(HouseHelpError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(HouseHelpError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(HouseHelpError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class NotFoundError(HouseHelpError):
    """Resource not found."""

    status_code = 404


class ConflictError(HouseHelpError):
    """Resource already exists."""

    status_code = 409


class RateLimitError(HouseHelpError):
    """Too many requests from the same caller."""

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "RATE_LIMITED", details)
        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after


class ExternalServiceError(HouseHelpError):
    """Error communicating with an external service."""

    status_code = 502

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


class ConfigurationError(HouseHelpError):
    """Required configuration is missing or invalid."""

    pass


def field_errors(errors: Any) -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into ``{"field", "message"}`` pairs.

    ``body`` / ``query`` location prefixes added by FastAPI are dropped.
    """
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        result.append({
            "field": ".".join(loc) or "__root__",
            "message": error.get("msg", "Invalid value"),
        })
    return result
