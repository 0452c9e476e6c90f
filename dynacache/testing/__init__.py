"""Testing utilities for dynacache applications.

This module provides test doubles for the remote store and the DynamoDB
client, a controllable clock for TTL tests and pytest fixtures.

Usage in conftest.py:
    from dynacache.testing import InMemoryStore, FakeClock

    @pytest.fixture
    def store():
        return InMemoryStore("users", "user_id")

Or use provided fixtures directly:
    pytest_plugins = ["dynacache.testing.fixtures"]
"""

from dynacache.testing.mocks import InMemoryDynamoDB, InMemoryStore, mock_dynamodb_client
from dynacache.testing.utils import FakeClock, create_test_settings

__all__ = [
    "InMemoryStore",
    "InMemoryDynamoDB",
    "mock_dynamodb_client",
    "FakeClock",
    "create_test_settings",
]
