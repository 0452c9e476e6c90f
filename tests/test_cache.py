"""Tests for cache module."""

import logging
import threading

import pytest

from dynacache.cache.keys import extract_keys, generate_cache_key, item_cache_key
from dynacache.cache.memory import (
    DEFAULT_CLEANUP_INTERVAL,
    CacheEntry,
    CacheOptions,
    LocalCache,
)
from dynacache.cache.registry import CacheRegistry, get_instance, get_registry
from dynacache.testing import FakeClock


@pytest.fixture
def clock():
    return FakeClock(start=1_000_000.0)


@pytest.fixture
def cache(clock):
    return LocalCache("test", clock=clock)


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_no_expiration(self):
        """Entries without expires_at never expire."""
        entry = CacheEntry(key="k", value=1)

        assert entry.is_expired(10**12) is False

    def test_expires_at_boundary(self):
        """An entry is expired from expires_at onwards."""
        entry = CacheEntry(key="k", value=1, expires_at=100.0)

        assert entry.is_expired(99.9) is False
        assert entry.is_expired(100.0) is True


class TestLocalCache:
    """Tests for LocalCache."""

    def test_set_and_get(self, cache):
        """Test basic set and get."""
        cache.set("key1", {"value": 123})

        assert cache.get("key1") == {"value": 123}

    def test_get_nonexistent(self, cache):
        """Test getting a nonexistent key."""
        assert cache.get("nonexistent") is None

    def test_set_replaces_whole_value(self, cache):
        """A second set overwrites instead of merging."""
        cache.set("user:1", {"name": "a", "age": 3})
        cache.set("user:1", {"name": "b"})

        assert cache.get("user:1") == {"name": "b"}

    def test_ttl_expiration_scenario(self, cache, clock):
        """Value is served before the TTL and absent after it."""
        cache.set("user:1", {"name": "a"}, 60)

        clock.advance(59)
        assert cache.get("user:1") == {"name": "a"}

        clock.advance(2)
        assert cache.get("user:1") is None

    def test_ttl_exact_boundary(self, cache, clock):
        """At exactly ttl seconds the entry is gone."""
        cache.set("k", "v", ttl=10)

        clock.advance(10)

        assert cache.get("k") is None

    def test_expired_entry_is_evicted_on_get(self, cache, clock):
        """Reading an expired entry removes it even before a cleanup sweep."""
        cache.set("k", "v", ttl=1)
        clock.advance(5)

        assert cache.get("k") is None
        assert cache.stats()["size"] == 0

    def test_no_ttl_never_expires(self, cache, clock):
        """Entries set without a TTL survive arbitrarily long."""
        cache.set("k", "v")
        clock.advance(10 * 365 * 24 * 3600)

        assert cache.get("k") == "v"

    def test_zero_ttl_means_no_expiration(self, cache, clock):
        """A ttl of 0 is treated like no ttl."""
        cache.set("k", "v", ttl=0)
        clock.advance(3600)

        assert cache.get("k") == "v"

    @pytest.mark.parametrize("falsy", [None, 0, "", False, {}, []])
    def test_falsy_value_deletes_key(self, cache, falsy):
        """Known sharp edge: setting a falsy value deletes instead of storing."""
        cache.set("k", "present")

        cache.set("k", falsy)

        assert cache.has("k") is False
        assert cache.get("k") is None

    def test_set_without_value_deletes_key(self, cache):
        """set() with no value at all removes an existing entry."""
        cache.set("k", "present")

        cache.set("k")

        assert cache.has("k") is False

    def test_set_many(self, cache, clock):
        """set_many applies set per item, with per-item ttl."""
        cache.set_many([
            {"key": "a", "value": 1},
            {"key": "b", "value": 2, "ttl": 5},
        ])

        assert cache.get("a") == 1
        assert cache.get("b") == 2

        clock.advance(6)
        assert cache.get("a") == 1
        assert cache.get("b") is None

    def test_get_many_omits_misses(self, cache):
        """get_many returns only the keys that were found."""
        cache.set("a", 1)
        cache.set("b", 2)

        result = cache.get_many(["a", "b", "c"])

        assert result == {"a": 1, "b": 2}

    def test_delete(self, cache):
        """delete reports whether the key existed."""
        cache.set("key1", "value1")

        assert cache.delete("key1") is True
        assert cache.delete("key1") is False
        assert cache.get("key1") is None

    def test_clear(self, cache):
        """Test clearing all keys."""
        cache.set("key1", "value1")
        cache.set("key2", "value2")

        cache.clear()

        assert cache.get("key1") is None
        assert cache.size() == 0

    def test_has(self, cache):
        """has mirrors get."""
        cache.set("key1", "value1")

        assert cache.has("key1") is True
        assert cache.has("nonexistent") is False

    def test_query_by_prefix(self, cache):
        """query returns values whose key starts with the prefix."""
        cache.set("user-1:a", 1)
        cache.set("user-1:b", 2)
        cache.set("user-2:a", 3)

        assert sorted(cache.query("user-1")) == [1, 2]
        assert cache.query("nobody") == []

    def test_query_evicts_expired_matches(self, cache, clock):
        """Expired entries met during a query are dropped."""
        cache.set("p:live", "live")
        cache.set("p:dead", "dead", ttl=1)
        clock.advance(2)

        assert cache.query("p:") == ["live"]
        assert cache.stats()["size"] == 1


class TestLocalCachePrefix:
    """Tests for the key prefix of a LocalCache."""

    def test_prefix_is_invisible(self, clock):
        """keys() returns exactly what was set, without the prefix."""
        cache = LocalCache("users", CacheOptions(prefix="users:"), clock=clock)

        cache.set("k", "v")

        assert cache.keys() == ["k"]
        assert cache.values() == ["v"]
        assert cache.entries() == [("k", "v")]

    def test_prefix_applied_to_storage(self, clock):
        """Stored keys carry the prefix internally."""
        cache = LocalCache("users", CacheOptions(prefix="users:"), clock=clock)

        cache.set("k", "v")

        assert list(cache._cache) == ["users:k"]

    def test_query_uses_full_prefix(self, clock):
        """query matches against prefix + argument."""
        cache = LocalCache("t", CacheOptions(prefix="t:"), clock=clock)
        cache.set("u1:a", 1)
        cache.set("u2:a", 2)

        assert cache.query("u1") == [1]

    def test_entries_are_consistently_paired(self, clock):
        """keys(), values() and entries() line up."""
        cache = LocalCache("t", CacheOptions(prefix="p/"), clock=clock)
        for i in range(5):
            cache.set(f"k{i}", f"v{i}")

        assert list(zip(cache.keys(), cache.values())) == cache.entries()


class TestLazyCleanup:
    """Tests for interval-based lazy cleanup."""

    def test_default_interval(self, cache):
        """The default cleanup interval is 30 minutes."""
        assert cache.cleanup_interval == DEFAULT_CLEANUP_INTERVAL == 30 * 60 * 1000

    def test_expired_entries_stay_until_interval(self, clock):
        """Before the interval elapses, size() still counts expired entries."""
        cache = LocalCache("t", CacheOptions(cleanup_interval=60_000), clock=clock)
        cache.set("k", "v", ttl=1)
        clock.advance(30)

        assert cache.size() == 1

    def test_cleanup_runs_after_interval(self, clock):
        """Once the interval has elapsed, any access sweeps expired entries."""
        cache = LocalCache("t", CacheOptions(cleanup_interval=60_000), clock=clock)
        cache.set("dead", "v", ttl=1)
        cache.set("live", "v")
        clock.advance(61)

        assert cache.size() == 1
        assert cache.keys() == ["live"]

    def test_cleanup_logs_removed_count(self, clock, caplog):
        """With logging enabled the sweep reports how many entries it removed."""
        cache = LocalCache(
            "t", CacheOptions(cleanup_interval=1000, enable_logging=True), clock=clock
        )
        cache.set("a", 1, ttl=1)
        cache.set("b", 2, ttl=1)
        clock.advance(2)

        with caplog.at_level(logging.DEBUG, logger="dynacache.cache.memory"):
            cache.size()

        assert "CACHE CLEANUP: Removed 2 expired items" in caplog.text

    def test_hit_logging(self, clock, caplog):
        """Hits are logged only when logging is enabled."""
        quiet = LocalCache("quiet", clock=clock)
        loud = LocalCache("loud", CacheOptions(enable_logging=True, prefix="x:"), clock=clock)
        quiet.set("k", 1)
        loud.set("k", 1)

        with caplog.at_level(logging.DEBUG, logger="dynacache.cache.memory"):
            quiet.get("k")
            loud.get("k")
            loud.query("k")

        assert caplog.text.count("CACHE HIT") == 1
        assert "CACHE HIT: x:k" in caplog.text
        assert "CACHE QUERY HITS [1]: x:k" in caplog.text


class TestLocalCacheThreads:
    """Concurrent use from several threads."""

    def test_concurrent_sets(self, cache):
        """Parallel writers do not lose entries."""
        def writer(start):
            for i in range(start, start + 200):
                cache.set(f"k{i}", f"v{i}")

        threads = [threading.Thread(target=writer, args=(n * 200,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size() == 800


class TestCacheRegistry:
    """Tests for CacheRegistry."""

    def test_singleton_per_name(self):
        """The same name always yields the same instance."""
        registry = CacheRegistry()

        first = registry.get_instance("x")
        second = registry.get_instance("x")
        first.set("k", "v")

        assert first is second
        assert second.get("k") == "v"

    def test_default_name(self):
        """Omitting the name uses the 'default' instance."""
        registry = CacheRegistry()

        assert registry.get_instance() is registry.get_instance("default")
        assert registry.get_instance().name == "default"

    def test_later_options_are_ignored(self):
        """Options only apply when the instance is first created."""
        registry = CacheRegistry()

        first = registry.get_instance("x", CacheOptions(prefix="a:", cleanup_interval=5))
        again = registry.get_instance("x", CacheOptions(prefix="b:", cleanup_interval=9))

        assert again is first
        assert again.prefix == "a:"
        assert again.cleanup_interval == 5

    def test_instances_are_isolated(self):
        """Different names never see each other's keys, even with equal prefixes."""
        registry = CacheRegistry()
        one = registry.get_instance("one", CacheOptions(prefix="p:"))
        two = registry.get_instance("two", CacheOptions(prefix="p:"))

        one.set("k", "from-one")

        assert two.get("k") is None
        assert two.keys() == []

    def test_clear_only_affects_one_instance(self):
        """clear() empties its own instance only."""
        registry = CacheRegistry()
        one = registry.get_instance("one")
        two = registry.get_instance("two")
        one.set("k", 1)
        two.set("k", 2)

        one.clear()

        assert one.get("k") is None
        assert two.get("k") == 2

    def test_registry_clock_is_shared(self, clock):
        """Instances created by a registry use its clock."""
        registry = CacheRegistry(clock=clock)
        cache = registry.get_instance("t")
        cache.set("k", "v", ttl=10)

        clock.advance(11)

        assert cache.get("k") is None

    def test_names_and_reset(self):
        """reset() forgets every instance."""
        registry = CacheRegistry()
        registry.get_instance("a")
        registry.get_instance("b")

        assert sorted(registry.names()) == ["a", "b"]
        assert "a" in registry

        registry.reset()

        assert registry.names() == []

    def test_module_level_get_instance(self, cache_registry):
        """get_instance() resolves through the default registry."""
        assert get_registry() is cache_registry
        assert get_instance("shared") is cache_registry.get_instance("shared")


class TestCacheKeys:
    """Tests for cache key helpers."""

    def test_partition_only(self):
        assert generate_cache_key("user-1") == "user-1"

    def test_partition_and_sort(self):
        assert generate_cache_key("user-1", "order-9") == "user-1:order-9"

    def test_numeric_values(self):
        assert generate_cache_key(7, 3) == "7:3"

    def test_falsy_sort_value_is_kept(self):
        """A sort value of 0 still forms part of the key."""
        assert generate_cache_key("p", 0) == "p:0"

    def test_extract_keys(self):
        item = {"pk": "u1", "sk": "a", "name": "x"}

        assert extract_keys(item, "pk", "sk") == ("u1", "a")
        assert extract_keys(item, "pk") == ("u1", None)

    def test_item_cache_key_matches_manual_key(self):
        """Keys derived from an item agree with keys built by hand."""
        item = {"pk": "u1", "sk": "a"}

        assert item_cache_key(item, "pk", "sk") == generate_cache_key("u1", "a")
