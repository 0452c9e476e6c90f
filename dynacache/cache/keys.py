"""Cache key derivation for table items.

The table prefix is not part of these keys: LocalCache applies its own
prefix, so keys built here can be passed straight to a table's cache.
"""

from typing import Any, Mapping

KeyValue = str | int


def generate_cache_key(
    partition_value: KeyValue,
    sort_value: KeyValue | None = None,
) -> str:
    """Build the cache key for an item.

    Args:
        partition_value: The item's partition key value
        sort_value: The item's sort key value, if the table has one

    Returns:
        ``"<partition>"`` or ``"<partition>:<sort>"``
    """
    key = f"{partition_value}"
    return f"{key}:{sort_value}" if sort_value is not None else key


def extract_keys(
    item: Mapping[str, Any],
    partition_key: str,
    sort_key: str | None = None,
) -> tuple[Any, Any]:
    """Pull the partition and sort values out of an item or key mapping.

    Args:
        item: The item (or key) mapping
        partition_key: Name of the partition key attribute
        sort_key: Name of the sort key attribute, if any

    Returns:
        ``(partition_value, sort_value)``; sort_value is None without a sort key
    """
    partition_value = item.get(partition_key)
    sort_value = item.get(sort_key) if sort_key else None
    return partition_value, sort_value


def item_cache_key(
    item: Mapping[str, Any],
    partition_key: str,
    sort_key: str | None = None,
) -> str:
    """Build the cache key for an item from its own key attributes."""
    return generate_cache_key(*extract_keys(item, partition_key, sort_key))
