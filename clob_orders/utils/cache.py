"""
Thread-safe caching with TTL for market metadata.

Tick sizes, neg-risk flags and fee rates change rarely; caching them keeps
market order resolution off the network on the hot path.
"""

import time
import threading
from typing import Optional, Any
from dataclasses import dataclass
from collections import OrderedDict
import logging

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cache entry with TTL and LRU tracking."""
    value: Any
    expires_at: float
    accessed_at: float


class TTLCache:
    """
    Thread-safe cache with time-to-live and LRU eviction.

    Entries live at most ``default_ttl`` seconds. When ``max_size`` is
    reached the least recently used entry is evicted in O(1) via
    OrderedDict ordering (most recently used at the end).

    ``None`` is never cached; get() returns None for missing or expired keys.
    """

    def __init__(self, default_ttl: float = 300.0, max_size: int = 10000):
        """
        Initialize cache.

        Args:
            default_ttl: Default TTL in seconds (5 minutes)
            max_size: Maximum cache size before LRU eviction
        """
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if expired/missing
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            now = time.time()
            if now > entry.expires_at:
                del self._cache[key]
                logger.debug(f"Cache expired: {key}")
                return None

            self._cache.move_to_end(key)
            entry.accessed_at = now
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Set value in cache, evicting the least recently used entry when full.

        Args:
            key: Cache key
            value: Value to cache (None is ignored)
            ttl: TTL in seconds (uses default if None)
        """
        if value is None:
            return

        ttl = ttl if ttl is not None else self.default_ttl
        now = time.time()

        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self.max_size:
                lru_key, _ = self._cache.popitem(last=False)
                logger.debug(f"Cache LRU eviction: {lru_key} (size: {len(self._cache)})")

            self._cache[key] = CacheEntry(value=value, expires_at=now + ttl, accessed_at=now)
            logger.debug(f"Cache set: {key} (TTL: {ttl}s, size: {len(self._cache)})")

    def delete(self, key: str) -> None:
        """Delete key from cache."""
        with self._lock:
            if self._cache.pop(key, None) is not None:
                logger.debug(f"Cache deleted: {key}")

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            logger.info("Cache cleared")

    def cleanup_expired(self, max_items: int = 100) -> int:
        """
        Remove expired entries incrementally.

        Only inspects up to ``max_items`` entries per call to keep lock holds
        short; call repeatedly for a full sweep.

        Returns:
            Number of entries removed
        """
        now = time.time()
        expired_keys = []
        checked = 0

        with self._lock:
            for key, entry in self._cache.items():
                if checked >= max_items:
                    break
                checked += 1
                if now > entry.expires_at:
                    expired_keys.append(key)

            for key in expired_keys:
                del self._cache[key]

            if expired_keys:
                logger.debug(f"Cleaned up {len(expired_keys)}/{checked} expired entries")

            return len(expired_keys)

    def size(self) -> int:
        """Get number of cached entries."""
        with self._lock:
            return len(self._cache)
