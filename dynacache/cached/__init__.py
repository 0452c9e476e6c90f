"""Cache-aside tables.

This module combines a remote key-value store with a named LocalCache so
hot reads skip the store.
"""

from dynacache.cached.table import CacheConfig, CachedTable

__all__ = ["CacheConfig", "CachedTable"]
