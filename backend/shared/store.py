"""
Key/value store for short-lived in-process state.

Rate-limit windows, OTP attempt counters, CSRF tokens and the token
denylist all go through KeyValueStore so a shared cache can replace the
in-process dict in multi-instance deployments. Every writer passes a
``ttl`` so no entry outlives the state it describes.
"""

import time
from typing import Any, Callable, Iterator, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal mapping interface used by the auth core."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> Iterator[str]:
        ...

    def purge_expired(self) -> int:
        ...

    def __len__(self) -> int:
        ...


class InMemoryStore:
    """
    Dict-backed store with per-entry expiry.

    Expired entries are dropped when read, and swept in bulk once the
    store grows past ``max_entries``. Single-process only: entries are not
    shared across workers or instances and are lost on restart.
    """

    def __init__(
        self,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._data: dict[str, Any] = {}
        self._expires: dict[str, float] = {}
        self._max_entries = max_entries
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        if self._expired(key, self._clock()):
            self.delete(key)
            return None
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if len(self._data) >= self._max_entries and key not in self._data:
            self.purge_expired()

        self._data[key] = value
        if ttl is None:
            self._expires.pop(key, None)
        else:
            self._expires[key] = self._clock() + ttl

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._expires.pop(key, None)

    def keys(self) -> Iterator[str]:
        # Snapshot so callers may delete while iterating
        now = self._clock()
        return iter([key for key in self._data if not self._expired(key, now)])

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [key for key, at in self._expires.items() if at <= now]
        for key in expired:
            self.delete(key)
        return len(expired)

    def clear(self) -> None:
        self._data.clear()
        self._expires.clear()

    def __len__(self) -> int:
        return len(self._data)

    def _expired(self, key: str, now: float) -> bool:
        at = self._expires.get(key)
        return at is not None and at <= now
