"""
Bearer token codec.

Tokens are stateless HS256 JWTs carrying ``userId``, ``email`` and
``userType``. Validity is signature plus expiry; there is no server-side
session. Accounts are suspended at the data layer instead.
"""

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from shared.exceptions import ConfigurationError
from shared.models import UserType
from shared.store import KeyValueStore

from .models import AdminClaims, HouseholdClaims, Identity, SessionClaims, WorkerClaims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
REQUIRED_CLAIMS = ("userId", "email", "userType")

CLAIMS_BY_TYPE: dict[UserType, type] = {
    UserType.WORKER: WorkerClaims,
    UserType.HOUSEHOLD: HouseholdClaims,
    UserType.ADMIN: AdminClaims,
}


class TokenCodec:
    """Signs and verifies session tokens with a server-held secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
    ):
        if not secret:
            raise ConfigurationError(
                "JWT secret is not configured",
                details={"setting": "JWT_SECRET"},
            )
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return int(self._lifetime.total_seconds())

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """Create a signed token for an identity."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": identity.id,
            "email": identity.email or "",
            "userType": identity.user_type.value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        """
        Decode and validate a token.

        Returns None on any failure. Callers must not tell the client why.
        """
        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid token: %s", e)
            return None

        # Phone-only workers carry an empty email claim
        if any(payload.get(claim) is None for claim in REQUIRED_CLAIMS) or not payload["userId"]:
            logger.debug("Rejected token with missing claims")
            return None

        try:
            user_type = UserType(payload["userType"])
        except ValueError:
            logger.debug("Rejected token with unknown user type")
            return None

        claims_cls = CLAIMS_BY_TYPE[user_type]
        return claims_cls(
            user_id=str(payload["userId"]),
            email=str(payload["email"]),
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            token_id=payload.get("jti"),
        )

    @staticmethod
    def extract_from_header(header_value: Optional[str]) -> Optional[str]:
        """Return the token from an ``Authorization: Bearer <token>`` value."""
        if not header_value or not header_value.startswith(BEARER_PREFIX):
            return None
        token = header_value[len(BEARER_PREFIX):].strip()
        return token or None


class TokenDenylist:
    """
    Revoked token ids, kept until the token would have expired anyway.

    Only consulted for sensitive operations (session lookup, logout).
    """

    def __init__(self, store: KeyValueStore, clock=time.time):
        self._store = store
        self._clock = clock

    def revoke(self, claims: SessionClaims) -> None:
        if not claims.token_id:
            return
        expires_at = claims.expires_at.timestamp()
        ttl = expires_at - self._clock()
        if ttl <= 0:
            return
        self._store.set(f"jti:{claims.token_id}", expires_at, ttl=ttl)

    def is_revoked(self, claims: SessionClaims) -> bool:
        if not claims.token_id:
            return False
        key = f"jti:{claims.token_id}"
        expires_at = self._store.get(key)
        if expires_at is None:
            return False
        if expires_at <= self._clock():
            self._store.delete(key)
            return False
        return True
