"""Simple cache abstractions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_TTL_SECONDS = 30 * 60


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object) -> None:
        """Store a value stamped with the current time."""

    def clear(self) -> None:
        """Drop every entry."""

    def stats(self) -> dict[str, object]:
        """Return the entry count and keys."""


@dataclass
class _CacheEntry:
    value: object
    stored_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class TtlCache(Cache):
    """In-memory cache with a fixed TTL and lazy eviction.

    Expired entries are dropped only when read. Nothing bounds the size, so
    the map lives as long as the owning service.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._now = now
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is not None and self._now() - entry.stored_at < self.ttl:
            return entry.value
        self._entries.pop(key, None)
        return None

    def set(self, key: str, value: object) -> None:
        """Store a cached value."""
        self._entries[key] = _CacheEntry(value=value, stored_at=self._now())

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def stats(self) -> dict[str, object]:
        """Return the entry count and keys."""
        return {"size": len(self._entries), "entries": list(self._entries)}

    def __contains__(self, key: str) -> bool:
        return key in self._entries
