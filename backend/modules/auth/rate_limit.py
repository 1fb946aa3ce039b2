"""
Fixed-window rate limiting.

Counts live in a KeyValueStore. With the default InMemoryStore this is a
single-process approximation with no cross-instance guarantee.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from shared.store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "rl:"


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        return max(1, int(self.reset_at - now + 0.999))


class RateLimiter:
    """Counts requests per key in discrete, non-overlapping windows."""

    def __init__(
        self,
        store: KeyValueStore,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._max_entries = max_entries
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def check(self, key: str, max_requests: int = 100, window_seconds: float = 60) -> RateLimitResult:
        """
        Count one request against ``key``.

        A rejected request does not increment the counter.
        """
        now = self._clock()

        if len(self._store) > self._max_entries:
            purged = self._store.purge_expired()
            logger.debug("Purged %d expired entries", purged)

        window = self._store.get(self._key(key))
        if window is None or now >= window["reset_at"]:
            reset_at = now + window_seconds
            self._store.set(self._key(key), {"count": 1, "reset_at": reset_at}, ttl=window_seconds)
            return RateLimitResult(allowed=True, remaining=max_requests - 1, reset_at=reset_at)

        if window["count"] >= max_requests:
            return RateLimitResult(allowed=False, remaining=0, reset_at=window["reset_at"])

        count = window["count"] + 1
        self._store.set(
            self._key(key),
            {"count": count, "reset_at": window["reset_at"]},
            ttl=window["reset_at"] - now,
        )
        return RateLimitResult(
            allowed=True,
            remaining=max_requests - count,
            reset_at=window["reset_at"],
        )

    @staticmethod
    def _key(key: str) -> str:
        return f"{KEY_PREFIX}{key}"


def client_ip(headers: Mapping[str, str]) -> str:
    """Best-effort caller address from proxy headers."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return "unknown"
