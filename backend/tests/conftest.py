"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
Every test gets a fresh ServiceContainer backed by in-memory repositories
and a LoggingNotifier, so nothing touches Supabase or Resend.
"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer, reset_container, set_container
from modules.auth.memory import (
    InMemoryAuditLog,
    InMemoryIdentityRepository,
    InMemoryOneTimeCodeRepository,
)
from modules.auth.models import Identity
from modules.auth.passwords import hash_password
from modules.auth.tokens import TokenCodec
from modules.notifications import LoggingNotifier
from shared.config import Settings, get_settings
from shared.models import AccountStatus, UserType, VerificationStatus
from shared.store import InMemoryStore


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_PASSWORD = "Str0ng!Pass"


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: memory backend, log notifier, known secret."""
    return Settings(
        jwt_secret=TEST_JWT_SECRET,
        data_backend="memory",
        email_provider="log",
        admin_email="boss@example.com",
        admin_email_domain="@househelp.rw",
        debug=True,
        _env_file=None,
    )


@pytest.fixture
def identities() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def otp_codes() -> InMemoryOneTimeCodeRepository:
    return InMemoryOneTimeCodeRepository()


@pytest.fixture
def link_tokens() -> InMemoryOneTimeCodeRepository:
    return InMemoryOneTimeCodeRepository()


@pytest.fixture
def audit() -> InMemoryAuditLog:
    return InMemoryAuditLog()


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(settings, store, identities, otp_codes, link_tokens, audit, notifier):
    """Install a fresh service container for the duration of a test."""
    container = ServiceContainer(
        settings=settings,
        store=store,
        identities=identities,
        otp_codes=otp_codes,
        link_tokens=link_tokens,
        audit=audit,
        notifier=notifier,
    )
    set_container(container)
    yield container
    reset_container()


@pytest.fixture
def client(container, settings, monkeypatch):
    """TestClient running against the test container."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    get_settings.cache_clear()
    with TestClient(create_app()) as test_client:
        yield test_client
    get_settings.cache_clear()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_JWT_SECRET)


@pytest.fixture
def make_identity(identities):
    """Factory that stores an identity with a known password."""

    def factory(
        user_type: UserType = UserType.HOUSEHOLD,
        email: str = "jane@example.com",
        phone: str = "+250788123456",
        name: str = "Jane Doe",
        password: str = TEST_PASSWORD,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> Identity:
        return identities.create(user_type, {
            user_type.name_field: name,
            "email": email,
            "phone": phone,
            "password_hash": hash_password(password),
            "status": status,
            "verification_status": VerificationStatus.VERIFIED,
        })

    return factory


@pytest.fixture
def auth_headers(codec):
    """Build an Authorization header for an identity."""

    def factory(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {codec.issue(identity)}"}

    return factory


def make_token_identity(
    user_id: str = "user-123",
    user_type: UserType = UserType.WORKER,
    email: str = "test@example.com",
) -> Identity:
    """Identity carrying just enough to sign a token."""
    return Identity(id=user_id, user_type=user_type, email=email)


@pytest.fixture
def expired_token(codec) -> str:
    identity = make_token_identity()
    return codec.issue(identity, now=datetime.now(timezone.utc) - timedelta(days=8))
