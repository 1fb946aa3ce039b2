"""
Request authentication.

Resolves a bearer credential from the Authorization header, falling back
to the session cookie, and reports one of two failure reasons.
"""

from typing import Mapping, Optional

from starlette.requests import HTTPConnection

from .models import AuthResult
from .tokens import TokenCodec

NO_TOKEN = "No authentication token provided"
INVALID_TOKEN = "Invalid or expired token"


class Authenticator:
    def __init__(self, codec: TokenCodec, cookie_name: str = "hh-token"):
        self._codec = codec
        self._cookie_name = cookie_name

    def authenticate(
        self,
        authorization: Optional[str],
        cookies: Optional[Mapping[str, str]] = None,
    ) -> AuthResult:
        """
        Authenticate from raw header and cookie values.

        Only one source is used: a Bearer header wins over the cookie.
        """
        token = self._codec.extract_from_header(authorization)
        if token is None and cookies:
            token = cookies.get(self._cookie_name) or None

        if token is None:
            return AuthResult(authenticated=False, error=NO_TOKEN)

        claims = self._codec.verify(token)
        if claims is None:
            return AuthResult(authenticated=False, error=INVALID_TOKEN)

        return AuthResult(
            authenticated=True,
            user_id=claims.user_id,
            email=claims.email or None,
            user_type=claims.user_type,
            claims=claims,
            token=token,
        )

    def authenticate_request(self, request: HTTPConnection) -> AuthResult:
        return self.authenticate(request.headers.get("authorization"), request.cookies)
