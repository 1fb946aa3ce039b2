"""
Authentication dependencies for route handlers.

Wraps the Authenticator so handlers receive an AuthResult, or a 401 is
raised with one of the two canned messages.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request

from modules.auth.authenticator import NO_TOKEN, Authenticator
from modules.auth.authorizer import require_user_type
from modules.auth.csrf import CSRFProtector
from modules.auth.exceptions import InvalidTokenError, MissingTokenError
from modules.auth.models import AuthResult
from modules.auth.rate_limit import RateLimiter, client_ip
from shared.config import get_settings
from shared.exceptions import AuthorizationError, RateLimitError
from shared.models import UserType

from ..dependencies import (
    get_authenticator,
    get_container,
    get_csrf_protector,
    get_rate_limiter,
)

logger = logging.getLogger(__name__)


async def get_auth_result(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthResult:
    """Authenticate without requiring success."""
    return authenticator.authenticate_request(request)


async def get_current_user(auth: AuthResult = Depends(get_auth_result)) -> AuthResult:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(auth: AuthResult = Depends(get_current_user)):
            return {"user_id": auth.user_id}
    """
    if not auth.authenticated:
        if auth.error == NO_TOKEN:
            raise MissingTokenError()
        raise InvalidTokenError()
    return auth


async def get_sensitive_user(auth: AuthResult = Depends(get_current_user)) -> AuthResult:
    """Like get_current_user, but also rejects tokens revoked by logout."""
    if auth.claims is not None and get_container().denylist.is_revoked(auth.claims):
        raise InvalidTokenError()
    return auth


def require_role(*allowed: UserType) -> Callable:
    """Dependency factory restricting a route to the given user types."""

    async def dependency(auth: AuthResult = Depends(get_current_user)) -> AuthResult:
        require_user_type(auth, *allowed)
        return auth

    return dependency


def request_ip(request: Request) -> str:
    """Caller address from proxy headers, else the socket peer."""
    ip = client_ip(request.headers)
    if ip == "unknown" and request.client is not None:
        return request.client.host
    return ip


def session_key(auth: AuthResult) -> str:
    """Session identifier CSRF tokens are bound to."""
    if auth.claims is not None and auth.claims.token_id:
        return auth.claims.token_id
    return auth.user_id or ""


async def require_csrf(
    request: Request,
    auth: AuthResult = Depends(get_current_user),
    csrf: CSRFProtector = Depends(get_csrf_protector),
) -> AuthResult:
    """
    Dependency for state-changing routes: the request must echo the CSRF
    token issued for this session (x-csrf-token header or csrf-token cookie).
    """
    if not csrf.validate_request(request.method, session_key(auth), request.headers, request.cookies):
        raise AuthorizationError("Invalid CSRF token", code="CSRF_INVALID")
    return auth


def rate_limit(
    scope: str,
    max_requests: Optional[int] = None,
    window_seconds: Optional[int] = None,
) -> Callable:
    """
    Dependency factory throttling a route per client IP.

    Limits left unset fall back to RATE_LIMIT_REQUESTS / RATE_LIMIT_WINDOW.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("login", 10))])
    """

    async def dependency(
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        settings = get_settings()
        result = limiter.check(
            f"{scope}:{request_ip(request)}",
            max_requests if max_requests is not None else settings.rate_limit_requests,
            window_seconds if window_seconds is not None else settings.rate_limit_window,
        )
        if not result.allowed:
            logger.warning("Rate limit exceeded for %s", scope)
            raise RateLimitError(retry_after=result.retry_after(limiter.now()))

    return dependency
