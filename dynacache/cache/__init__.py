"""Caching module for dynacache.

This module provides the in-memory TTL cache, the registry of named
cache instances and the key helpers shared with the cache-aside table.
"""

from dynacache.cache.keys import extract_keys, generate_cache_key, item_cache_key
from dynacache.cache.memory import (
    DEFAULT_CLEANUP_INTERVAL,
    DEFAULT_INSTANCE_NAME,
    CacheEntry,
    CacheOptions,
    LocalCache,
)
from dynacache.cache.registry import (
    CacheRegistry,
    get_instance,
    get_registry,
    set_registry,
)

__all__ = [
    "CacheEntry",
    "CacheOptions",
    "LocalCache",
    "CacheRegistry",
    "DEFAULT_CLEANUP_INTERVAL",
    "DEFAULT_INSTANCE_NAME",
    "get_instance",
    "get_registry",
    "set_registry",
    "generate_cache_key",
    "extract_keys",
    "item_cache_key",
]
