"""
Authentication module.

Handles credential hashing, session tokens, one-time codes, request
authentication, ownership checks, rate limiting and the page route gate.

Public API:
- AuthService: Login, registration, OTP, reset and verification flows
- TokenCodec: Issue/verify bearer tokens
- Authenticator / authorize: Request authentication and ownership checks
- RateLimiter: Fixed-window counters
- RouteGate: Page-level redirect decisions
- Auth exceptions: InvalidTokenError, MissingTokenError, etc.
"""

from .authenticator import Authenticator
from .authorizer import authorize, require_access, require_user_type
from .exceptions import (
    AccessDeniedError,
    AccountSuspendedError,
    ExpiredCodeError,
    InsufficientPermissionsError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    OTPLockedError,
)
from .gate import GateDecision, RouteGate
from .models import AuthResult, CodePurpose, Identity, SessionClaims
from .rate_limit import RateLimiter, RateLimitResult
from .service import AuthService
from .tokens import TokenCodec, TokenDenylist

__all__ = [
    # Services
    "AuthService",
    "Authenticator",
    "TokenCodec",
    "TokenDenylist",
    "RateLimiter",
    "RateLimitResult",
    "RouteGate",
    "GateDecision",
    "authorize",
    "require_access",
    "require_user_type",
    # Models
    "AuthResult",
    "CodePurpose",
    "Identity",
    "SessionClaims",
    # Exceptions
    "AccessDeniedError",
    "AccountSuspendedError",
    "ExpiredCodeError",
    "InsufficientPermissionsError",
    "InvalidCodeError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "MissingTokenError",
    "OTPLockedError",
]
