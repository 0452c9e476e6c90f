"""Registry of named LocalCache instances."""

import threading
import time
from typing import Callable

from dynacache.cache.memory import DEFAULT_INSTANCE_NAME, CacheOptions, LocalCache


class CacheRegistry:
    """Maps instance names to LocalCache instances, one per name.

    Options passed to :meth:`get_instance` are only used the first time a
    name is requested. Later calls with different options get the
    already-registered instance unchanged.

    Example:
        registry = CacheRegistry()
        users = registry.get_instance("users", CacheOptions(prefix="users:"))
        assert registry.get_instance("users") is users
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize an empty registry.

        Args:
            clock: Clock handed to every instance this registry creates
        """
        self._instances: dict[str, LocalCache] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get_instance(
        self,
        name: str = DEFAULT_INSTANCE_NAME,
        options: CacheOptions | None = None,
    ) -> LocalCache:
        """Get or create the cache instance registered under ``name``.

        Args:
            name: Instance name
            options: Options used only if the instance does not exist yet

        Returns:
            The LocalCache for ``name``
        """
        with self._lock:
            instance = self._instances.get(name)
            if instance is None:
                instance = LocalCache(name, options, clock=self._clock)
                self._instances[name] = instance
            return instance

    def __contains__(self, name: str) -> bool:
        return name in self._instances

    def names(self) -> list[str]:
        with self._lock:
            return list(self._instances)

    def reset(self) -> None:
        """Forget every registered instance (useful for testing)."""
        with self._lock:
            self._instances.clear()


# Process-wide default registry, used when none is injected
_registry: CacheRegistry | None = None


def get_registry() -> CacheRegistry:
    """Get or create the default cache registry.

    Returns:
        The CacheRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = CacheRegistry()
    return _registry


def set_registry(registry: CacheRegistry) -> None:
    """Set the default cache registry (useful for testing).

    Args:
        registry: The CacheRegistry instance to use
    """
    global _registry
    _registry = registry


def get_instance(
    name: str = DEFAULT_INSTANCE_NAME,
    options: CacheOptions | None = None,
) -> LocalCache:
    """Shortcut for ``get_registry().get_instance(name, options)``."""
    return get_registry().get_instance(name, options)
