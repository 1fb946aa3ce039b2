import pytest
from datetime import datetime, timedelta, timezone

from modules.auth.authenticator import INVALID_TOKEN, NO_TOKEN, Authenticator
from modules.auth.models import Identity
from modules.auth.tokens import TokenCodec
from shared.models import UserType

SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def codec():
    return TokenCodec(SECRET)


@pytest.fixture
def authenticator(codec):
    return Authenticator(codec, cookie_name="hh-token")


@pytest.fixture
def token(codec):
    return codec.issue(Identity(id="h1", user_type=UserType.HOUSEHOLD, email="h@example.com"))


class TestAuthenticator:
    def test_bearer_header(self, authenticator, token):
        result = authenticator.authenticate(f"Bearer {token}")

        assert result.authenticated is True
        assert result.user_id == "h1"
        assert result.email == "h@example.com"
        assert result.user_type == UserType.HOUSEHOLD
        assert result.token == token
        assert result.claims.user_id == "h1"

    def test_cookie_fallback(self, authenticator, token):
        result = authenticator.authenticate(None, {"hh-token": token})
        assert result.authenticated is True
        assert result.user_id == "h1"

    def test_header_wins_over_cookie(self, authenticator, codec, token):
        """Only one source is used; the header is not merged with the cookie."""
        other = codec.issue(Identity(id="w9", user_type=UserType.WORKER, email="w@example.com"))
        result = authenticator.authenticate(f"Bearer {token}", {"hh-token": other})
        assert result.user_id == "h1"

    def test_invalid_header_does_not_fall_back(self, authenticator, token):
        result = authenticator.authenticate("Bearer garbage", {"hh-token": token})
        assert result.authenticated is False
        assert result.error == INVALID_TOKEN

    def test_no_token(self, authenticator):
        result = authenticator.authenticate(None, {})
        assert result.authenticated is False
        assert result.error == NO_TOKEN
        assert result.user_id is None

    def test_non_bearer_scheme(self, authenticator, token):
        result = authenticator.authenticate(f"Basic {token}")
        assert result.error == NO_TOKEN

    def test_expired(self, authenticator, codec):
        expired = codec.issue(
            Identity(id="h1", user_type=UserType.HOUSEHOLD, email="h@example.com"),
            now=datetime.now(timezone.utc) - timedelta(days=8),
        )
        result = authenticator.authenticate(f"Bearer {expired}")
        assert result.authenticated is False
        assert result.error == "Invalid or expired token"

    def test_other_cookie_ignored(self, authenticator, token):
        result = authenticator.authenticate(None, {"hh-admin-token": token})
        assert result.error == NO_TOKEN
