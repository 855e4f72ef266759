"""
Result Cache

In-memory key/value cache with per-entry TTL for search artifacts.
Uses cachetools.TLRUCache for LRU eviction and per-item expiration.

Key families (see ``CacheFamily``):
- search:   full aggregate results          (default 10 min)
- suggest:  typeahead suggestion lists      (default 60 s)
- remote:   per-remote-source sub-results   (default 5 min, 60 s when failed)
- sitemap:  network page trees              (default 6 h)

Features:
- Deterministic keys from normalized query text plus option flags
- Per-key async locks: at most one concurrent computation per key
- Prefix / predicate invalidation, and one-pass invalidate_all()
- Generation counter: a value computed across an invalidation is not stored
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheFamily(str, Enum):
    SEARCH = "search"
    SUGGEST = "suggest"
    REMOTE = "remote"
    SITEMAP = "sitemap"


def normalize_query(query: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return " ".join(query.lower().split())


def make_cache_key(family: CacheFamily | str, query: str = "", **options: Any) -> str:
    """
    Build a deterministic cache key.

    The same normalized query with the same option flags always maps to the
    same key; any option that changes the result must be passed in.

    Example:
        make_cache_key(CacheFamily.SEARCH, "Knee Pain", include_remote=True)
        # 'search:5f0c...'
    """
    family_value = family.value if isinstance(family, CacheFamily) else str(family)
    payload = json.dumps([normalize_query(query), options], sort_keys=True, default=str)
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    return f"{family_value}:{digest}"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A stored value; replaced wholesale on refresh, never mutated."""

    key: str
    value: Any
    expires_at: float


def _entry_ttu(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at


class ResultCache:
    """
    In-memory cache for search artifacts.

    Uses cachetools.TLRUCache so that every entry carries its own expiry.
    Async-safe for the get-or-compute path via per-key asyncio.Lock.

    Example:
        cache = ResultCache(max_size=2048)

        hits = await cache.get_or_compute(
            make_cache_key(CacheFamily.SEARCH, "knee pain"),
            ttl=600,
            factory=lambda: aggregator.compute("knee pain"),
        )

        cache.invalidate_all()
    """

    def __init__(
        self,
        max_size: int = 2048,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries (LRU eviction beyond this)
            timer: Clock used for expiry, injectable for tests
        """
        self._timer = timer
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(maxsize=max_size, ttu=_entry_ttu, timer=timer)
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._key_waiters: dict[str, int] = {}
        self._generation = 0
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    @property
    def generation(self) -> int:
        """Bumped by every invalidation; a value computed under an older generation is stale."""
        return self._generation

    def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found/expired
        """
        entry = self._cache.get(key)
        if entry is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return entry.value

    def get_entry(self, key: str) -> CacheEntry | None:
        """Get the raw entry (including its expiry) without touching stats."""
        return self._cache.get(key)

    def set(self, key: str, value: Any, ttl: float, *, generation: int | None = None) -> bool:
        """
        Store value under key for ``ttl`` seconds.

        A non-positive ttl removes any existing entry instead of storing.
        None is never stored; it is the miss marker. When ``generation`` is
        given and an invalidation has happened since, nothing is stored.

        Returns:
            True if the value was stored
        """
        if generation is not None and generation != self._generation:
            logger.debug(f"Dropping stale value for {key} (computed before invalidation)")
            return False
        if value is None or ttl <= 0:
            self._cache.pop(key, None)
            return False
        self._cache[key] = CacheEntry(key=key, value=value, expires_at=self._timer() + ttl)
        return True

    async def get_or_compute(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        ttl: float | Callable[[T], float],
    ) -> T:
        """
        Get from cache or compute, store and return.

        Concurrent callers for the same key wait on one computation rather
        than each calling the factory. ``ttl`` may be a callable of the
        computed value, which lets failures be cached for a shorter time.
        """
        value = self.get(key)
        if value is not None:
            logger.debug(f"Cache hit: {key}")
            return value

        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._key_waiters[key] = self._key_waiters.get(key, 0) + 1
        try:
            async with lock:
                # Double-check after acquiring lock
                entry = self._cache.get(key)
                if entry is not None:
                    return entry.value

                logger.debug(f"Cache miss: {key}")
                generation = self._generation
                value = await factory()
                effective_ttl = ttl(value) if callable(ttl) else ttl
                self.set(key, value, effective_ttl, generation=generation)
                return value
        finally:
            self._release_key(key)

    def _release_key(self, key: str) -> None:
        remaining = self._key_waiters.get(key, 1) - 1
        if remaining > 0:
            self._key_waiters[key] = remaining
        else:
            self._key_waiters.pop(key, None)
            self._key_locks.pop(key, None)

    def invalidate(self, prefix: str) -> int:
        """
        Invalidate every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        return self.invalidate_where(lambda key: key.startswith(prefix))

    def invalidate_where(self, predicate: Callable[[str], bool]) -> int:
        """Invalidate every entry whose key matches ``predicate``."""
        doomed = [key for key in list(self._cache.keys()) if predicate(key)]
        self._generation += 1
        for key in doomed:
            self._cache.pop(key, None)
        self._stats.invalidations += len(doomed)
        return len(doomed)

    def invalidate_all(self) -> int:
        """
        Clear every key family in one pass.

        Returns:
            Number of entries cleared
        """
        count = len(self._cache)
        self._generation += 1
        self._cache.clear()
        self._stats.invalidations += count
        logger.info(f"Cache invalidated: {count} entries cleared")
        return count

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        TLRUCache expires lazily on access; this forces a sweep.
        """
        expired = self._cache.expire()
        removed = len(expired)
        self._stats.expirations += removed
        return removed

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    invalidations: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "invalidations": self.invalidations,
            "expirations": self.expirations,
            "hit_rate": round(self.hit_rate, 3),
        }

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.invalidations = 0
        self.expirations = 0
