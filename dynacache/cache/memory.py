"""In-memory TTL cache for dynacache.

Entries live for the lifetime of the process and expire lazily: expired
entries are evicted when they are read, or in a sweep piggybacked on the
next cache access once ``cleanup_interval`` has elapsed. There is no
background timer.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE_NAME = "default"
DEFAULT_CLEANUP_INTERVAL = 30 * 60 * 1000  # 30 minutes, in milliseconds


@dataclass
class CacheEntry:
    """A single cache entry with optional expiration.

    Attributes:
        key: The full (prefixed) key the entry is stored under
        value: The cached payload, never interpreted by the cache
        expires_at: Expiration as epoch seconds, None for no expiration
    """

    key: str
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired at ``now`` (epoch seconds)."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheOptions:
    """Construction options for a LocalCache instance.

    Attributes:
        cleanup_interval: Milliseconds between lazy cleanup sweeps
        enable_logging: Emit hit/query/cleanup diagnostics
        prefix: Namespace prepended to every stored key
    """

    cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL
    enable_logging: bool = False
    prefix: str = ""


class LocalCache:
    """Named in-memory key-value cache with per-entry TTL.

    The prefix configured in ``options`` is applied to every key on the
    way in and stripped on the way out, so callers never see it.

    Instances are normally obtained through
    :meth:`dynacache.cache.registry.CacheRegistry.get_instance`, which
    guarantees one instance per name.
    """

    def __init__(
        self,
        name: str = DEFAULT_INSTANCE_NAME,
        options: CacheOptions | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            name: Name of this instance
            options: Cleanup interval, logging toggle and key prefix
            clock: Callable returning the current time as epoch seconds
        """
        options = options or CacheOptions()
        self.name = name
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._clock = clock
        self._cleanup_interval = options.cleanup_interval
        self._enable_logging = options.enable_logging
        self._prefix = options.prefix
        self._last_cleanup = self._now_ms()

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def cleanup_interval(self) -> int:
        return self._cleanup_interval

    @property
    def enable_logging(self) -> bool:
        return self._enable_logging

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _build_key(self, key: str) -> str:
        return f"{self._prefix}{key}" if self._prefix else key

    def _strip_key(self, full_key: str) -> str:
        if self._prefix and full_key.startswith(self._prefix):
            return full_key[len(self._prefix):]
        return full_key

    def get(self, key: str) -> Any | None:
        """Get a value from the cache.

        Args:
            key: The cache key (without prefix)

        Returns:
            The cached value or None if not found/expired
        """
        with self._lock:
            self._cleanup()
            full_key = self._build_key(key)
            entry = self._cache.get(full_key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._cache[full_key]
                return None

            if self._enable_logging:
                logger.debug(f"CACHE HIT: {full_key}")
            return entry.value

    def set(self, key: str, value: Any = None, ttl: int | None = None) -> None:
        """Set a value in the cache.

        A falsy ``value`` (None, 0, "", False, empty containers) deletes the
        key instead of storing it, so falsy payloads cannot be cached.

        Args:
            key: The cache key (without prefix)
            value: The value to cache
            ttl: Time-to-live in seconds (None or 0 for no expiration)
        """
        with self._lock:
            self._cleanup()
            full_key = self._build_key(key)

            if not value:
                self._cache.pop(full_key, None)
                return

            expires_at = self._clock() + ttl if ttl else None
            self._cache[full_key] = CacheEntry(
                key=full_key, value=value, expires_at=expires_at
            )

    def set_many(self, items: Iterable[Mapping[str, Any]]) -> None:
        """Set multiple values, one ``set`` per item.

        Args:
            items: Mappings with ``key``, ``value`` and optional ``ttl``
        """
        with self._lock:
            for item in items:
                self.set(item["key"], item.get("value"), item.get("ttl"))

    def query(self, prefix: str) -> list[Any]:
        """Find all live values whose key starts with ``prefix``.

        Expired entries met during the scan are evicted.

        Args:
            prefix: Key prefix (without the instance prefix)

        Returns:
            Matching values, in storage iteration order
        """
        with self._lock:
            self._cleanup()
            now = self._clock()
            full_prefix = self._build_key(prefix)
            results = []
            expired = []

            for full_key, entry in self._cache.items():
                if not full_key.startswith(full_prefix):
                    continue
                if entry.is_expired(now):
                    expired.append(full_key)
                else:
                    results.append(entry.value)

            for full_key in expired:
                del self._cache[full_key]

            if self._enable_logging and results:
                logger.debug(f"CACHE QUERY HITS [{len(results)}]: {full_prefix}")

            return results

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Get multiple values from the cache.

        Args:
            keys: Cache keys (without prefix)

        Returns:
            Dictionary of key -> value for found keys
        """
        results = {}
        with self._lock:
            for key in keys:
                value = self.get(key)
                if value is not None:
                    results[key] = value
        return results

    def delete(self, key: str) -> bool:
        """Delete a value from the cache.

        Args:
            key: The cache key (without prefix)

        Returns:
            True if the key existed
        """
        with self._lock:
            return self._cache.pop(self._build_key(key), None) is not None

    def clear(self) -> None:
        """Clear all entries of this instance."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get the number of entries after a lazy cleanup."""
        with self._lock:
            self._cleanup()
            return len(self._cache)

    def has(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        return self.get(key) is not None

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries()]

    def values(self) -> list[Any]:
        return [value for _, value in self.entries()]

    def entries(self) -> list[tuple[str, Any]]:
        """Get all ``(key, value)`` pairs with the prefix stripped."""
        with self._lock:
            self._cleanup()
            return [
                (self._strip_key(full_key), entry.value)
                for full_key, entry in self._cache.items()
            ]

    def stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        with self._lock:
            return {
                "name": self.name,
                "size": len(self._cache),
                "prefix": self._prefix,
                "cleanup_interval": self._cleanup_interval,
            }

    def _cleanup(self) -> None:
        """Evict expired entries once per cleanup interval.

        Must be called with the lock held.
        """
        now_ms = self._now_ms()
        if now_ms - self._last_cleanup < self._cleanup_interval:
            return

        now = now_ms / 1000
        expired = [
            full_key for full_key, entry in self._cache.items()
            if entry.is_expired(now)
        ]
        for full_key in expired:
            del self._cache[full_key]

        if self._enable_logging and expired:
            logger.debug(f"CACHE CLEANUP: Removed {len(expired)} expired items")

        self._last_cleanup = now_ms
