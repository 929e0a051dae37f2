"""
CacheManager - In-memory TTL cache with a fresh tier and a fallback tier.

Features:
- Per-entry TTL against an injectable clock
- Fallback tier: every cacheable fetch also stores ``<key>_fallback`` with a
  longer TTL, served only when a live fetch fails
- Entries are deep-copied on the way in and out (no aliasing)
- Size-bounded with oldest-entry eviction
- Hit/miss counters

Reads and writes are synchronous; on a single event loop no locking is
needed.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from loguru import logger

from visconnect.services.clock import Clock, system_clock

T = TypeVar("T")

FALLBACK_SUFFIX = "_fallback"


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with metadata."""

    value: T
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Check if entry is past its TTL."""
        return now >= self.expires_at


class CacheManager:
    """
    Cache manager with TTL and a long-lived fallback tier.

    Usage:
        cache = CacheManager(default_ttl=timedelta(minutes=5))

        value = cache.get("tournaments_{}")
        if value is None:
            value = await fetch()
            cache.set_with_fallback("tournaments_{}", value,
                                    ttl=timedelta(minutes=5),
                                    fallback_ttl=timedelta(hours=1))
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: timedelta = timedelta(minutes=5),
        clock: Clock | None = None,
        use_clones: bool = True,
        debug: bool = False,
    ):
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock or system_clock
        self._use_clones = use_clones
        self._debug = debug
        self._stats = CacheStats()

    @staticmethod
    def fallback_key(key: str) -> str:
        return f"{key}{FALLBACK_SUFFIX}"

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._memory.get(key)

        if entry is None:
            self._stats.misses += 1
            self._log(f"MISS: {key[:50]}")
            return None

        if entry.is_expired(self._clock.now()):
            del self._memory[key]
            self._stats.misses += 1
            self._log(f"EXPIRED: {key[:50]}")
            return None

        self._stats.hits += 1
        self._log(f"HIT: {key[:50]}")
        return self._clone(entry.value)

    def get_fallback(self, key: str) -> Any | None:
        """Return the fallback-tier value for ``key``."""
        return self.get(self.fallback_key(key))

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Data to cache
            ttl: Time to live (uses default if not specified)
        """
        ttl = ttl if ttl is not None else self._default_ttl
        now = self._clock.now()

        # Evict if at capacity
        if len(self._memory) >= self._max_size and key not in self._memory:
            self._evict_oldest()

        self._memory[key] = CacheEntry(
            value=self._clone(value),
            created_at=now,
            expires_at=now + ttl,
        )
        self._log(f"SET: {key[:50]} (TTL: {ttl.total_seconds()}s)")

    def set_with_fallback(
        self,
        key: str,
        value: Any,
        ttl: timedelta,
        fallback_ttl: timedelta,
    ) -> None:
        """Write both tiers; the fallback copy outlives the fresh one."""
        self.set(key, value, ttl)
        self.set(self.fallback_key(key), value, max(fallback_ttl, ttl))

    def delete(self, key: str) -> bool:
        """Delete a specific key from cache."""
        if key in self._memory:
            del self._memory[key]
            self._log(f"DELETE: {key[:50]}")
            return True
        return False

    def clear(self, pattern: str | None = None) -> int:
        """
        Remove entries whose key contains ``pattern``, or everything.

        Returns:
            Number of entries removed
        """
        if pattern is None:
            count = len(self._memory)
            self._memory.clear()
            self._log(f"CLEAR: {count} entries removed")
            return count

        keys_to_delete = [k for k in self._memory if pattern in k]
        for key in keys_to_delete:
            del self._memory[key]

        if keys_to_delete:
            self._log(f"INVALIDATE: {len(keys_to_delete)} entries matching '{pattern}'")

        return len(keys_to_delete)

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        now = self._clock.now()
        expired_keys = [k for k, v in self._memory.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._memory[key]

        if expired_keys:
            self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")

        return len(expired_keys)

    def keys(self) -> list[str]:
        return list(self._memory.keys())

    def _evict_oldest(self) -> None:
        """Evict the oldest entry."""
        if not self._memory:
            return

        oldest_key = min(
            self._memory.keys(),
            key=lambda k: self._memory[k].created_at,
        )
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:50]}")

    def _clone(self, value: Any) -> Any:
        return copy.deepcopy(value) if self._use_clones else value

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.keys = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheManager] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    keys: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "keys": self.keys,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
