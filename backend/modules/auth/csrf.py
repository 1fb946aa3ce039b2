"""
CSRF token issuance and validation.

Tokens are bound to a session id and expire after ``max_age_seconds``.
"""

import hmac
import secrets
import time
from typing import Callable, Mapping, Optional

from shared.store import KeyValueStore

CSRF_HEADER = "x-csrf-token"
CSRF_COOKIE = "csrf-token"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class CSRFProtector:
    def __init__(
        self,
        store: KeyValueStore,
        max_age_seconds: int = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._max_age = max_age_seconds
        self._clock = clock

    def generate(self, session_id: str) -> str:
        token = secrets.token_hex(32)
        self._store.set(
            self._key(session_id),
            {"token": token, "created_at": self._clock()},
            ttl=self._max_age,
        )
        return token

    def validate(self, session_id: str, token: Optional[str]) -> bool:
        if not token:
            return False

        key = self._key(session_id)
        stored = self._store.get(key)
        if stored is None:
            return False

        if self._clock() - stored["created_at"] > self._max_age:
            self._store.delete(key)
            return False

        return hmac.compare_digest(stored["token"].encode(), token.encode())

    def validate_request(
        self,
        method: str,
        session_id: Optional[str],
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
    ) -> bool:
        if method.upper() in SAFE_METHODS:
            return True
        if not session_id:
            return False
        return self.validate(session_id, extract_csrf_token(headers, cookies))

    def purge_expired(self) -> int:
        now = self._clock()
        purged = 0
        for key in self._store.keys():
            if not key.startswith("csrf:"):
                continue
            stored = self._store.get(key)
            if stored is not None and now - stored["created_at"] > self._max_age:
                self._store.delete(key)
                purged += 1
        return purged

    @staticmethod
    def _key(session_id: str) -> str:
        return f"csrf:{session_id}"


def extract_csrf_token(headers: Mapping[str, str], cookies: Mapping[str, str]) -> Optional[str]:
    """Header first, cookie as fallback."""
    return headers.get(CSRF_HEADER) or cookies.get(CSRF_COOKIE) or None
