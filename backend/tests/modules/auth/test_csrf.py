import pytest

from modules.auth.csrf import CSRFProtector, extract_csrf_token
from shared.store import InMemoryStore


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def csrf(store, clock):
    return CSRFProtector(store, max_age_seconds=3600, clock=clock)


class TestCSRFProtector:
    def test_generate_and_validate(self, csrf):
        token = csrf.generate("session-1")
        assert len(token) == 64
        assert csrf.validate("session-1", token) is True

    def test_wrong_token(self, csrf):
        csrf.generate("session-1")
        assert csrf.validate("session-1", "0" * 64) is False

    def test_bound_to_session(self, csrf):
        token = csrf.generate("session-1")
        assert csrf.validate("session-2", token) is False

    def test_missing_token(self, csrf):
        csrf.generate("session-1")
        assert csrf.validate("session-1", None) is False
        assert csrf.validate("session-1", "") is False

    def test_regenerate_replaces(self, csrf):
        old = csrf.generate("session-1")
        new = csrf.generate("session-1")
        assert csrf.validate("session-1", new) is True
        if old != new:
            assert csrf.validate("session-1", old) is False

    def test_expired(self, csrf, clock, store):
        token = csrf.generate("session-1")
        clock.now += 3601
        assert csrf.validate("session-1", token) is False
        assert store.get("csrf:session-1") is None

    def test_purge_expired(self, csrf, clock, store):
        csrf.generate("old")
        clock.now += 3000
        csrf.generate("fresh")
        clock.now += 1000
        store.set("rl:login:1.2.3.4", {"count": 1, "reset_at": 0})

        assert csrf.purge_expired() == 1
        assert store.get("csrf:old") is None
        assert store.get("csrf:fresh") is not None
        assert store.get("rl:login:1.2.3.4") is not None


class TestValidateRequest:
    def test_safe_methods_pass(self, csrf):
        for method in ("GET", "HEAD", "OPTIONS", "get"):
            assert csrf.validate_request(method, None, {}, {}) is True

    def test_header_token(self, csrf):
        token = csrf.generate("s")
        assert csrf.validate_request("PATCH", "s", {"x-csrf-token": token}, {}) is True

    def test_cookie_fallback(self, csrf):
        token = csrf.generate("s")
        assert csrf.validate_request("POST", "s", {}, {"csrf-token": token}) is True

    def test_unsafe_without_session(self, csrf):
        assert csrf.validate_request("POST", None, {"x-csrf-token": "x"}, {}) is False


class TestExtractCsrfToken:
    def test_header_wins(self):
        assert extract_csrf_token({"x-csrf-token": "h"}, {"csrf-token": "c"}) == "h"

    def test_none(self):
        assert extract_csrf_token({}, {}) is None
