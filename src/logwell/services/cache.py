"""TTL cache used for external lookups."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

MISSING = object()


class Cache(Protocol):
    """Cache interface for lookup results."""

    def lookup(self, key: str) -> object:
        """Return the cached value, or ``MISSING`` when absent or expired."""

    def store(self, key: str, value: object, ttl_seconds: int) -> None:
        """Cache a value, including ``None``, for ttl_seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; ``None`` results are cached like any other."""

    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, repr=False)

    def lookup(self, key: str) -> object:
        """Return the cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return MISSING
        return entry.value

    def store(self, key: str, value: object, ttl_seconds: int) -> None:
        """Cache a value with a TTL."""
        expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def __len__(self) -> int:
        return len(self._entries)
