"""Cache-aside table: a RemoteStore fronted by a LocalCache."""

import logging
from dataclasses import dataclass
from typing import Any

from dynacache.cache.keys import extract_keys, generate_cache_key, item_cache_key
from dynacache.cache.memory import CacheOptions, LocalCache
from dynacache.cache.registry import CacheRegistry, get_registry
from dynacache.core.client import DynamoClientManager
from dynacache.core.settings import DynacacheSettings
from dynacache.core.store import Item, Key, QueryOptions, RemoteStore, UpdateOptions
from dynacache.core.table import DynamoTable

logger = logging.getLogger(__name__)


@dataclass
class CacheConfig:
    """Cache settings for a CachedTable.

    Attributes:
        enabled: Master switch; when False every call goes to the store
        prefix: Key namespace inside the cache instance (default "<table>:")
        ttl: Seconds until cached items expire (None for no expiration)
        instance_name: Name of the LocalCache to bind to (default table name)
    """

    enabled: bool = True
    prefix: str | None = None
    ttl: int | None = None
    instance_name: str | None = None


class CachedTable:
    """Cache-aside wrapper around a remote key-value store.

    Point reads are served from the cache when possible and populate it on
    a miss. Successful puts refresh the cached item, successful updates
    evict it, and deletes evict it whatever the store reports. Absent
    items are never cached, so every miss reaches the store.

    The cache is advisory. Writes made to the store without going through
    this wrapper stay invisible until the cached item expires.

    Example:
        table = CachedTable(
            DynamoTable("users", partition_key="user_id"),
            cache=CacheConfig(ttl=300),
        )
        user = await table.get("u1")   # store read, then cached
        user = await table.get("u1")   # served from cache
    """

    def __init__(
        self,
        store: RemoteStore,
        cache: CacheConfig | None = None,
        registry: CacheRegistry | None = None,
        cache_options: CacheOptions | None = None,
    ):
        """Initialize the cached table.

        Args:
            store: The remote store holding the authoritative items
            cache: Cache-aside configuration
            registry: Registry to resolve the cache instance from
                (the process default registry if omitted)
            cache_options: Cleanup interval and logging for the instance;
                the prefix always comes from ``cache.prefix``
        """
        config = cache or CacheConfig()
        self.store = store
        self.table_name = store.table_name
        self.partition_key = store.partition_key
        self.sort_key = store.sort_key

        self.cache_config = CacheConfig(
            enabled=config.enabled,
            prefix=config.prefix if config.prefix is not None else f"{self.table_name}:",
            ttl=config.ttl,
            instance_name=config.instance_name or self.table_name,
        )

        base_options = cache_options or CacheOptions()
        options = CacheOptions(
            cleanup_interval=base_options.cleanup_interval,
            enable_logging=base_options.enable_logging,
            prefix=self.cache_config.prefix,
        )
        registry = registry or get_registry()
        self.cache: LocalCache = registry.get_instance(
            self.cache_config.instance_name, options
        )

    @classmethod
    def for_dynamo(
        cls,
        table_name: str,
        partition_key: str,
        sort_key: str | None = None,
        settings: DynacacheSettings | None = None,
        registry: CacheRegistry | None = None,
        **cache_overrides,
    ) -> "CachedTable":
        """Build a cached DynamoDB table from settings.

        Args:
            table_name: DynamoDB table name
            partition_key: Name of the partition key attribute
            sort_key: Name of the sort key attribute, if any
            settings: Settings for the client and cache (read from env if omitted)
            registry: Registry to resolve the cache instance from
            **cache_overrides: CacheConfig fields overriding the settings

        Returns:
            A CachedTable over a DynamoTable
        """
        settings = settings or DynacacheSettings()
        store = DynamoTable(
            table_name,
            partition_key,
            sort_key,
            client_manager=DynamoClientManager(settings),
        )
        return cls(
            store,
            cache=settings.cache_config(**cache_overrides),
            registry=registry,
            cache_options=settings.cache_options(),
        )

    @property
    def enabled(self) -> bool:
        return self.cache_config.enabled

    def _cache_key(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> str:
        return generate_cache_key(partition_value, sort_value)

    def _key_cache_key(self, key: Key) -> str:
        return generate_cache_key(*extract_keys(key, self.partition_key, self.sort_key))

    def _cache_item(self, item: Item) -> None:
        key = item_cache_key(item, self.partition_key, self.sort_key)
        self.cache.set(key, item, self.cache_config.ttl)

    async def get(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> Item | None:
        """Get an item, from the cache if present.

        Returns:
            The item, or None if the store does not have it
        """
        if not self.enabled:
            return await self.store.get(partition_value, sort_value)

        cache_key = self._cache_key(partition_value, sort_value)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        item = await self.store.get(partition_value, sort_value)
        if item:
            self.cache.set(cache_key, item, self.cache_config.ttl)
        return item

    async def put(self, item: Item) -> bool:
        """Write an item to the store, then refresh its cached copy."""
        success = await self.store.put(item)
        if success and self.enabled:
            self._cache_item(item)
        return success

    async def update(
        self,
        partition_value: str | int,
        sort_value: str | int | None,
        attributes: dict[str, Any],
        options: UpdateOptions | None = None,
    ) -> bool:
        """Update an item in the store, then evict its cached copy.

        The full updated item is not known without a re-read, so the next
        ``get`` reloads it from the store.
        """
        success = await self.store.update(partition_value, sort_value, attributes, options)
        if success and self.enabled:
            self.cache.delete(self._cache_key(partition_value, sort_value))
        return success

    async def delete(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> bool:
        """Delete an item from the store and the cache.

        The cached copy is evicted even if the store reports failure.
        """
        success = await self.store.delete(partition_value, sort_value)
        if self.enabled:
            self.cache.delete(self._cache_key(partition_value, sort_value))
        return success

    async def query(
        self,
        partition_value: str | int,
        options: QueryOptions | None = None,
    ) -> list[Item]:
        """Get the items of one partition.

        Only simple queries (no index, no filter) use the cache: any cached
        item whose key starts with the partition value is a hit and the
        store is skipped. Otherwise the store is queried, and for simple
        queries each returned item is cached.

        The cache lookup is a key prefix match, so partition values that
        are prefixes of other partition values share hits.
        """
        cacheable = self.enabled and (options is None or options.is_simple)

        if cacheable:
            cached = self.cache.query(f"{partition_value}")
            if cached:
                if options and options.limit:
                    return cached[:options.limit]
                return cached

        items = await self.store.query(partition_value, options)

        if cacheable:
            for item in items:
                self._cache_item(item)
        return items

    async def batch_get(self, keys: list[Key]) -> list[Item]:
        """Get several items, reading only cache misses from the store.

        Results are cached hits first, then the items fetched from the
        store, not the order of ``keys``.

        Args:
            keys: Primary key mappings

        Returns:
            The items found
        """
        if not self.enabled:
            return await self.store.batch_get(keys)

        results: list[Item] = []
        missing: list[Key] = []
        for key in keys:
            cached = self.cache.get(self._key_cache_key(key))
            if cached is not None:
                results.append(cached)
            else:
                missing.append(key)

        if missing:
            fetched = await self.store.batch_get(missing)
            for item in fetched:
                self._cache_item(item)
            results.extend(fetched)

        logger.debug(
            f"batch_get on {self.table_name}: "
            f"{len(keys) - len(missing)} cached, {len(missing)} fetched"
        )
        return results

    async def batch_put(self, items: list[Item]) -> bool:
        """Write several items, caching them all if the batch succeeds."""
        success = await self.store.batch_put(items)
        if success and self.enabled:
            for item in items:
                self._cache_item(item)
        return success

    async def batch_delete(self, keys: list[Key]) -> bool:
        """Delete several items; cached copies are evicted regardless."""
        success = await self.store.batch_delete(keys)
        if self.enabled:
            for key in keys:
                self.cache.delete(self._key_cache_key(key))
        return success

    def clear_cache(self) -> None:
        """Clear the bound cache instance (no-op while disabled)."""
        if self.enabled:
            self.cache.clear()

    def get_cache_size(self) -> int:
        """Number of entries in the bound cache instance, 0 while disabled."""
        return self.cache.size() if self.enabled else 0

    def set_cache_enabled(self, enabled: bool) -> None:
        self.cache_config.enabled = enabled

    def is_cache_enabled(self) -> bool:
        return self.cache_config.enabled
