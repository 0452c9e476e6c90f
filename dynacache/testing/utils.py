"""Testing utilities for dynacache applications."""

import time

from dynacache.core.settings import DynacacheSettings


class FakeClock:
    """Manually advanced clock for deterministic TTL tests.

    Pass an instance wherever a ``clock`` callable is accepted.

    Example:
        >>> clock = FakeClock()
        >>> cache = LocalCache("users", clock=clock)
        >>> cache.set("u1", {"name": "Ada"}, ttl=60)
        >>> clock.advance(61)
        >>> cache.get("u1") is None
        True
    """

    def __init__(self, start: float | None = None):
        """Initialize the clock.

        Args:
            start: Initial epoch seconds (defaults to the real current time)
        """
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self.now += seconds


def create_test_settings(**overrides) -> DynacacheSettings:
    """Create dynacache settings for testing.

    Args:
        **overrides: Settings to override

    Returns:
        DynacacheSettings instance configured for testing
    """
    values = {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "aws_default_region": "us-east-1",
        "aws_url": "http://localhost:4566",
        "aws_secret_id": "test-secret",
    }
    values.update(overrides)
    return DynacacheSettings(**values)
