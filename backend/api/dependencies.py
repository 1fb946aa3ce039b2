"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together the auth core,
its stores and the notifier. Each collaborator can be passed in
explicitly, which is how tests swap in in-memory implementations.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings
from shared.store import InMemoryStore, KeyValueStore

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.authenticator import Authenticator
    from modules.auth.csrf import CSRFProtector
    from modules.auth.gate import RouteGate
    from modules.auth.interfaces import IAuditLog, IIdentityRepository, IOneTimeCodeRepository
    from modules.auth.otp import AttemptTracker, OneTimeCodeIssuer
    from modules.auth.rate_limit import RateLimiter
    from modules.auth.service import AuthService
    from modules.auth.tokens import TokenCodec, TokenDenylist
    from modules.notifications import INotifier

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached for the life
    of the container. Use reset_container() to start over in tests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[KeyValueStore] = None,
        identities: "Optional[IIdentityRepository]" = None,
        otp_codes: "Optional[IOneTimeCodeRepository]" = None,
        link_tokens: "Optional[IOneTimeCodeRepository]" = None,
        audit: "Optional[IAuditLog]" = None,
        notifier: "Optional[INotifier]" = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store: KeyValueStore = (
            store if store is not None
            else InMemoryStore(max_entries=self.settings.rate_limit_max_entries)
        )
        self._identities = identities
        self._otp_codes = otp_codes
        self._link_tokens = link_tokens
        self._audit = audit
        self._notifier = notifier
        self._codec: "TokenCodec | None" = None
        self._authenticator: "Authenticator | None" = None
        self._rate_limiter: "RateLimiter | None" = None
        self._csrf: "CSRFProtector | None" = None
        self._gate: "RouteGate | None" = None
        self._auth_service: "AuthService | None" = None

    # -------------------------------------------------------------------------
    # Token handling
    # -------------------------------------------------------------------------

    @property
    def codec(self) -> "TokenCodec":
        if self._codec is None:
            from modules.auth.tokens import TokenCodec
            self._codec = TokenCodec(
                self.settings.require_jwt_secret(),
                algorithm=self.settings.jwt_algorithm,
                lifetime=timedelta(days=self.settings.jwt_expires_days),
            )
        return self._codec

    @property
    def authenticator(self) -> "Authenticator":
        if self._authenticator is None:
            from modules.auth.authenticator import Authenticator
            self._authenticator = Authenticator(self.codec, self.settings.session_cookie_name)
        return self._authenticator

    @property
    def denylist(self) -> "TokenDenylist":
        from modules.auth.tokens import TokenDenylist
        return TokenDenylist(self.store)

    @property
    def gate(self) -> "RouteGate":
        if self._gate is None:
            from modules.auth.gate import RouteGate
            self._gate = RouteGate(
                self.codec,
                session_cookie=self.settings.session_cookie_name,
                admin_session_cookie=self.settings.admin_session_cookie_name,
                admin_email=self.settings.admin_email,
                admin_email_domain=self.settings.admin_email_domain,
            )
        return self._gate

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    @property
    def rate_limiter(self) -> "RateLimiter":
        if self._rate_limiter is None:
            from modules.auth.rate_limit import RateLimiter
            self._rate_limiter = RateLimiter(
                self.store, max_entries=self.settings.rate_limit_max_entries
            )
        return self._rate_limiter

    @property
    def csrf(self) -> "CSRFProtector":
        if self._csrf is None:
            from modules.auth.csrf import CSRFProtector
            self._csrf = CSRFProtector(self.store, max_age_seconds=self.settings.csrf_token_max_age)
        return self._csrf

    @property
    def attempts(self) -> "AttemptTracker":
        from modules.auth.otp import AttemptTracker
        return AttemptTracker(
            self.store,
            max_attempts=self.settings.otp_max_failed_attempts,
            lockout_seconds=self.settings.otp_lockout_seconds,
        )

    # -------------------------------------------------------------------------
    # Data access
    # -------------------------------------------------------------------------

    @property
    def identities(self) -> "IIdentityRepository":
        if self._identities is None:
            if self._use_memory():
                from modules.auth.memory import InMemoryIdentityRepository
                self._identities = InMemoryIdentityRepository()
            else:
                from modules.auth.repository import IdentityRepository
                from shared.database import get_supabase_client
                self._identities = IdentityRepository(get_supabase_client())
        return self._identities

    @property
    def otp_codes(self) -> "IOneTimeCodeRepository":
        if self._otp_codes is None:
            self._otp_codes = self._code_repository("otp_codes", "code")
        return self._otp_codes

    @property
    def link_tokens(self) -> "IOneTimeCodeRepository":
        if self._link_tokens is None:
            self._link_tokens = self._code_repository("verification_tokens", "token")
        return self._link_tokens

    @property
    def audit(self) -> "IAuditLog":
        if self._audit is None:
            if self._use_memory():
                from modules.auth.memory import InMemoryAuditLog
                self._audit = InMemoryAuditLog()
            else:
                from modules.auth.repository import AuditLogRepository
                from shared.database import get_supabase_client
                self._audit = AuditLogRepository(get_supabase_client())
        return self._audit

    @property
    def notifier(self) -> "INotifier":
        if self._notifier is None:
            from modules.notifications import get_notifier
            self._notifier = get_notifier(self.settings)
        return self._notifier

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def issuer(self) -> "OneTimeCodeIssuer":
        from modules.auth.otp import OneTimeCodeIssuer
        return OneTimeCodeIssuer(self.otp_codes, self.link_tokens)

    @property
    def auth(self) -> "AuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                identities=self.identities,
                issuer=self.issuer,
                attempts=self.attempts,
                codec=self.codec,
                denylist=self.denylist,
                notifier=self.notifier,
                audit=self.audit,
                bcrypt_rounds=self.settings.bcrypt_rounds,
                app_url=self.settings.app_url,
            )
        return self._auth_service

    def _use_memory(self) -> bool:
        return self.settings.data_backend == "memory"

    def _code_repository(self, table: str, column: str) -> "IOneTimeCodeRepository":
        if self._use_memory():
            from modules.auth.memory import InMemoryOneTimeCodeRepository
            return InMemoryOneTimeCodeRepository()
        from modules.auth.repository import OneTimeCodeRepository
        from shared.database import get_supabase_client
        return OneTimeCodeRepository(get_supabase_client(), table=table, column=column)


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a preconfigured container (tests, scripts)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() builds a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "AuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_authenticator() -> "Authenticator":
    return get_container().authenticator


def get_identity_repository() -> "IIdentityRepository":
    return get_container().identities


def get_rate_limiter() -> "RateLimiter":
    return get_container().rate_limiter


def get_csrf_protector() -> "CSRFProtector":
    return get_container().csrf
