"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the API
error handlers. Messages are the canned, client-safe wording; anything
more specific goes to the server log only.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    RateLimitError,
    ValidationError,
)


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "No authentication token provided"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Raised when a token is invalid, malformed or expired."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised on a failed login, whatever the cause."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class AccountSuspendedError(AuthenticationError):
    """Raised when a suspended account tries to log in."""

    def __init__(self):
        super().__init__(
            "Your account has been suspended. Please contact support.",
            code="ACCOUNT_SUSPENDED",
        )


class AccessDeniedError(AuthorizationError):
    """Raised when a user tries to reach another user's resource."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="ACCESS_DENIED")


class InsufficientPermissionsError(AuthorizationError):
    """
    Raised when user lacks the required role.

    The roles are kept on the exception for server-side logging only and
    never reach the response body.
    """

    def __init__(self, required_role: str, user_role: Optional[str]):
        super().__init__("Access denied", code="INSUFFICIENT_PERMISSIONS")
        self.required_role = required_role
        self.user_role = user_role


class InvalidCodeError(ValidationError):
    """
    Raised when a code is unknown, already used, or wrong.

    The three cases share one message.
    """

    def __init__(self, message: str = "Invalid or expired code"):
        super().__init__(message, code="INVALID_CODE")


class ExpiredCodeError(ValidationError):
    """Raised when a matching, unused code is past its expiry."""

    def __init__(self, message: str = "Code has expired. Please request a new one."):
        super().__init__(message, code="CODE_EXPIRED")


class OTPLockedError(RateLimitError):
    """Raised when an identifier has too many failed verification attempts."""

    def __init__(self, retry_after: int):
        super().__init__(
            f"Too many failed attempts. Try again in {retry_after} seconds.",
            retry_after=retry_after,
            code="OTP_LOCKED",
            details={"locked": True},
        )


class InvalidPhoneError(ValidationError):
    def __init__(self):
        super().__init__(
            "Invalid Rwanda phone number format. Use: +250XXXXXXXXX or 07XXXXXXXX",
            code="INVALID_PHONE",
            details={"fields": {"phone": "Invalid phone number format"}},
        )


class WeakPasswordError(ValidationError):
    def __init__(self, errors: list[str]):
        super().__init__(
            "Password does not meet strength requirements",
            code="WEAK_PASSWORD",
            details={"fields": {"password": errors}},
        )


class EmailAlreadyRegisteredError(ConflictError):
    def __init__(self):
        super().__init__(
            "An account with this email already exists",
            code="EMAIL_EXISTS",
        )


class PhoneAlreadyRegisteredError(ConflictError):
    def __init__(self):
        super().__init__(
            "An account with this phone number already exists",
            code="PHONE_EXISTS",
        )
