"""In-process cache tier."""

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached value with metadata."""

    value: Any
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        """Check if cache entry is still valid."""
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache counters."""

    size: int
    hits: int
    misses: int
    max_entries: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class MemoryCache:
    """Local cache tier: dict of TTL entries with a soft size cap.

    Values are deep-copied on the way in and out so callers can never mutate
    a cached entry in place.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize cache.

        Args:
            max_entries: Soft cap; oldest entries are evicted beyond it
            clock: Injectable time source (default: datetime.now)
        """
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock or datetime.now
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Any | None:
        """Get cached value if fresh, None otherwise."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if not entry.is_fresh(self._clock()):
            # Expired - remove
            del self._entries[key]
            self._misses += 1
            logger.debug(f"Memory cache expired for key: {key}")
            return None
        self._hits += 1
        return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store value in cache with TTL."""
        if ttl_seconds <= 0:
            return
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value), cached_at=self._clock(), ttl_seconds=ttl_seconds
        )
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    def clear(self) -> None:
        """Drop every entry (useful for testing)."""
        self._entries.clear()

    def stats(self) -> CacheStats:
        """Return hit/miss counters and current size."""
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            max_entries=self._max_entries,
        )
