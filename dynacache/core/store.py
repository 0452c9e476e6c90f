"""Remote key-value store contract and operation options."""

from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

Item = dict[str, Any]
Key = dict[str, str | int]

ReturnValues = Literal["NONE", "ALL_OLD", "UPDATED_OLD", "ALL_NEW", "UPDATED_NEW"]


@dataclass
class QueryOptions:
    """Options for a partition query.

    Attributes:
        index_name: Secondary index to query instead of the table
        key_condition_expression: Extra key condition ANDed with the partition match
        filter_expression: Post-read filter expression
        expression_values: Values referenced by the expressions
        expression_names: Attribute name placeholders referenced by the expressions
        limit: Maximum number of items to evaluate/return
        scan_index_forward: Sort key order (False for descending)
    """

    index_name: str | None = None
    key_condition_expression: str | None = None
    filter_expression: str | None = None
    expression_values: dict[str, Any] | None = None
    expression_names: dict[str, str] | None = None
    limit: int | None = None
    scan_index_forward: bool | None = None

    @property
    def is_simple(self) -> bool:
        """True when the query reads the base table without a filter."""
        return not self.index_name and not self.filter_expression


@dataclass
class ScanOptions:
    """Options for a full table scan."""

    filter_expression: str | None = None
    expression_values: dict[str, Any] | None = None
    expression_names: dict[str, str] | None = None
    limit: int | None = None


@dataclass
class UpdateOptions:
    """Options for an attribute update.

    Attributes:
        condition_expression: Condition that must hold for the update to apply
        return_values: What the store should return about the updated item
    """

    condition_expression: str | None = None
    return_values: ReturnValues = "NONE"


@runtime_checkable
class RemoteStore(Protocol):
    """Protocol for the key-value store behind a cache-aside table.

    ``DynamoTable`` is the production implementation; tests use
    ``dynacache.testing.InMemoryStore``.
    """

    table_name: str
    partition_key: str
    sort_key: str | None

    async def get(
        self, partition_value: str | int, sort_value: str | int | None = None
    ) -> Item | None:
        """Get one item, None if absent."""
        ...

    async def put(self, item: Item) -> bool:
        """Write one item."""
        ...

    async def update(
        self,
        partition_value: str | int,
        sort_value: str | int | None,
        attributes: dict[str, Any],
        options: UpdateOptions | None = None,
    ) -> bool:
        """Set attributes on one item."""
        ...

    async def delete(
        self, partition_value: str | int, sort_value: str | int | None = None
    ) -> bool:
        """Delete one item."""
        ...

    async def query(
        self, partition_value: str | int, options: QueryOptions | None = None
    ) -> list[Item]:
        """Get the items of one partition."""
        ...

    async def batch_get(self, keys: list[Key]) -> list[Item]:
        """Get several items by key."""
        ...

    async def batch_put(self, items: list[Item]) -> bool:
        """Write several items."""
        ...

    async def batch_delete(self, keys: list[Key]) -> bool:
        """Delete several items by key."""
        ...
