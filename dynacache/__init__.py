"""dynacache: an in-memory TTL cache and a cache-aside layer for DynamoDB."""

__version__ = "0.1.0"

# Cache components
from dynacache.cache import (
    CacheEntry,
    CacheOptions,
    CacheRegistry,
    LocalCache,
    generate_cache_key,
    extract_keys,
    get_instance,
    get_registry,
    set_registry,
)

# Core components
from dynacache.core.client import DynamoClientManager
from dynacache.core.exceptions import (
    DynacacheError,
    DynamoConnectionError,
    DynamoOperationError,
    ConfigurationError,
)
from dynacache.core.secrets import SecretConfig
from dynacache.core.settings import DynacacheSettings
from dynacache.core.store import QueryOptions, RemoteStore, ScanOptions, UpdateOptions
from dynacache.core.table import DynamoTable

# Cache-aside components
from dynacache.cached import CacheConfig, CachedTable

__all__ = [
    # Version
    "__version__",
    # Cache
    "CacheEntry",
    "CacheOptions",
    "CacheRegistry",
    "LocalCache",
    "generate_cache_key",
    "extract_keys",
    "get_instance",
    "get_registry",
    "set_registry",
    # Core
    "DynamoClientManager",
    "DynacacheSettings",
    "SecretConfig",
    "DynacacheError",
    "DynamoConnectionError",
    "DynamoOperationError",
    "ConfigurationError",
    "RemoteStore",
    "QueryOptions",
    "ScanOptions",
    "UpdateOptions",
    "DynamoTable",
    # Cache-aside
    "CacheConfig",
    "CachedTable",
]
