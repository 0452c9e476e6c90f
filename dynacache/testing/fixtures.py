"""Pytest fixtures for dynacache testing.

To use these fixtures, add to your conftest.py:

    pytest_plugins = ["dynacache.testing.fixtures"]
"""

import pytest

from dynacache.cache.registry import CacheRegistry, get_registry, set_registry
from dynacache.core.settings import DynacacheSettings
from dynacache.testing.mocks import InMemoryDynamoDB, InMemoryStore
from dynacache.testing.utils import FakeClock, create_test_settings


@pytest.fixture
def dynacache_settings() -> DynacacheSettings:
    """Provide test settings for dynacache."""
    return create_test_settings()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock starting at t=1,000,000."""
    return FakeClock(start=1_000_000.0)


@pytest.fixture
def cache_registry(fake_clock: FakeClock) -> CacheRegistry:
    """Provide a fresh registry driven by ``fake_clock``.

    The registry is also installed as the process default for the
    duration of the test.
    """
    previous = get_registry()
    registry = CacheRegistry(clock=fake_clock)
    set_registry(registry)
    yield registry
    registry.reset()
    set_registry(previous)


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Provide an in-memory store with a ``pk``/``sk`` key schema."""
    store = InMemoryStore("test-table", partition_key="pk", sort_key="sk")
    yield store
    store.clear()


@pytest.fixture
def mock_dynamodb() -> InMemoryDynamoDB:
    """Provide an in-memory DynamoDB client with a ``test-table`` table."""
    client = InMemoryDynamoDB()
    client.create_table("test-table", "pk", "sk")
    yield client
    client.clear()
