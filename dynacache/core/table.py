"""DynamoDB table wrapper implementing the RemoteStore contract."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from aiobotocore.client import AioBaseClient
from botocore.exceptions import ClientError

from dynacache.core.client import DynamoClientManager, get_client_manager
from dynacache.core.exceptions import DynamoOperationError
from dynacache.core.helpers import (
    build_update_expression,
    chunked,
    marshal_item,
    marshal_values,
    unmarshal_item,
    was_successful,
)
from dynacache.core.store import Item, Key, QueryOptions, ScanOptions, UpdateOptions

logger = logging.getLogger(__name__)

BATCH_GET_LIMIT = 100
BATCH_WRITE_LIMIT = 25
CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoTable:
    """Async wrapper around one DynamoDB table.

    Items are plain dicts. Numbers come back as ``Decimal``, as boto3's
    TypeDeserializer returns them.

    Example:
        table = DynamoTable("users", partition_key="user_id")
        await table.put({"user_id": "u1", "name": "Ada"})
        item = await table.get("u1")

    Write operations return True when DynamoDB reports success and False
    when a condition expression rejected the write. Any other AWS error
    raises DynamoOperationError.
    """

    def __init__(
        self,
        table_name: str,
        partition_key: str,
        sort_key: str | None = None,
        client_manager: DynamoClientManager | None = None,
        client: AioBaseClient | None = None,
    ):
        """Initialize the table wrapper.

        Args:
            table_name: DynamoDB table name
            partition_key: Name of the partition key attribute
            sort_key: Name of the sort key attribute, if the table has one
            client_manager: Manager used to open clients (default manager if omitted)
            client: An already-open async client to use instead of the manager
        """
        self.table_name = table_name
        self.partition_key = partition_key
        self.sort_key = sort_key
        self._client_manager = client_manager
        self._client = client

    def create_key(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> Key:
        """Build the primary key mapping for an item."""
        key: Key = {self.partition_key: partition_value}
        if self.sort_key and sort_value is not None:
            key[self.sort_key] = sort_value
        return key

    @asynccontextmanager
    async def _open_client(self) -> AsyncGenerator[AioBaseClient, None]:
        if self._client is not None:
            yield self._client
            return
        manager = self._client_manager or get_client_manager()
        async with manager.get_async_client("dynamodb") as client:
            yield client

    async def _call(self, operation: str, **kwargs) -> dict[str, Any] | None:
        """Run one client operation, translating AWS errors.

        Returns:
            The response, or None if a condition expression failed

        Raises:
            DynamoOperationError: For any other ClientError
        """
        async with self._open_client() as client:
            try:
                return await getattr(client, operation)(**kwargs)
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code")
                if code == CONDITIONAL_CHECK_FAILED:
                    logger.warning(
                        f"Condition check failed for {operation} on {self.table_name}"
                    )
                    return None
                logger.error(f"DynamoDB {operation} on {self.table_name} failed: {e}")
                raise DynamoOperationError(
                    f"DynamoDB {operation} failed: {e}",
                    operation=operation,
                    table=self.table_name,
                    original_error=e,
                )

    async def get(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> Item | None:
        """Get an item by key.

        Returns:
            The item, or None if it does not exist
        """
        response = await self._call(
            "get_item",
            TableName=self.table_name,
            Key=marshal_item(self.create_key(partition_value, sort_value)),
        )
        item = (response or {}).get("Item")
        return unmarshal_item(item) if item else None

    async def put(self, item: Item) -> bool:
        """Write an item, replacing any existing item with the same key."""
        response = await self._call(
            "put_item",
            TableName=self.table_name,
            Item=marshal_item(item),
        )
        return was_successful(response)

    async def update(
        self,
        partition_value: str | int,
        sort_value: str | int | None,
        attributes: dict[str, Any],
        options: UpdateOptions | None = None,
    ) -> bool:
        """Set attributes on an item.

        Args:
            partition_value: Partition key value
            sort_value: Sort key value (None if the table has no sort key)
            attributes: Attribute name -> new value
            options: Condition expression and return values

        Returns:
            True if the update was applied
        """
        options = options or UpdateOptions()
        expression = build_update_expression(attributes)

        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "Key": marshal_item(self.create_key(partition_value, sort_value)),
            "UpdateExpression": expression["UpdateExpression"],
            "ExpressionAttributeNames": expression["ExpressionAttributeNames"],
            "ExpressionAttributeValues": marshal_values(
                expression["ExpressionAttributeValues"]
            ),
            "ReturnValues": options.return_values,
        }
        if options.condition_expression:
            kwargs["ConditionExpression"] = options.condition_expression

        response = await self._call("update_item", **kwargs)
        return was_successful(response)

    async def delete(
        self,
        partition_value: str | int,
        sort_value: str | int | None = None,
    ) -> bool:
        """Delete an item by key. Deleting a missing item succeeds."""
        response = await self._call(
            "delete_item",
            TableName=self.table_name,
            Key=marshal_item(self.create_key(partition_value, sort_value)),
        )
        return was_successful(response)

    async def query(
        self,
        partition_value: str | int,
        options: QueryOptions | None = None,
    ) -> list[Item]:
        """Get the items of one partition.

        Without a limit, pages are followed until the partition is
        exhausted. With a limit, a single page is read.

        Args:
            partition_value: Partition key value
            options: Index, extra key condition, filter and paging options

        Returns:
            The matching items
        """
        options = options or QueryOptions()

        key_condition = "#pk = :pk"
        if options.key_condition_expression:
            key_condition += f" AND {options.key_condition_expression}"

        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "KeyConditionExpression": key_condition,
            "ExpressionAttributeNames": {
                "#pk": self.partition_key,
                **(options.expression_names or {}),
            },
            "ExpressionAttributeValues": marshal_values({
                ":pk": partition_value,
                **(options.expression_values or {}),
            }),
        }
        if options.index_name:
            kwargs["IndexName"] = options.index_name
        if options.filter_expression:
            kwargs["FilterExpression"] = options.filter_expression
        if options.limit is not None:
            kwargs["Limit"] = options.limit
        if options.scan_index_forward is not None:
            kwargs["ScanIndexForward"] = options.scan_index_forward

        return await self._paginate("query", kwargs, single_page=options.limit is not None)

    async def scan(self, options: ScanOptions | None = None) -> list[Item]:
        """Scan the whole table.

        Args:
            options: Filter expression and limit

        Returns:
            The matching items
        """
        options = options or ScanOptions()

        kwargs: dict[str, Any] = {"TableName": self.table_name}
        if options.filter_expression:
            kwargs["FilterExpression"] = options.filter_expression
        if options.expression_names:
            kwargs["ExpressionAttributeNames"] = options.expression_names
        if options.expression_values:
            kwargs["ExpressionAttributeValues"] = marshal_values(options.expression_values)
        if options.limit is not None:
            kwargs["Limit"] = options.limit

        return await self._paginate("scan", kwargs, single_page=options.limit is not None)

    async def _paginate(
        self, operation: str, kwargs: dict[str, Any], single_page: bool
    ) -> list[Item]:
        items: list[Item] = []
        while True:
            response = await self._call(operation, **kwargs) or {}
            items.extend(unmarshal_item(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if single_page or not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def batch_get(self, keys: list[Key]) -> list[Item]:
        """Get several items by key.

        Keys are sent in chunks of 100. Unprocessed keys are retried once;
        keys still unprocessed after that are logged and skipped.

        Args:
            keys: Primary key mappings

        Returns:
            The items found, in the order DynamoDB returned them
        """
        items: list[Item] = []
        for chunk in chunked(keys, BATCH_GET_LIMIT):
            request = {self.table_name: {"Keys": [marshal_item(k) for k in chunk]}}

            for _ in range(2):
                response = await self._call("batch_get_item", RequestItems=request) or {}
                found = response.get("Responses", {}).get(self.table_name, [])
                items.extend(unmarshal_item(item) for item in found)

                request = response.get("UnprocessedKeys") or {}
                if not request:
                    break

            if request:
                pending = len(request.get(self.table_name, {}).get("Keys", []))
                logger.warning(
                    f"batch_get_item on {self.table_name} left {pending} keys unprocessed"
                )
        return items

    async def batch_put(self, items: list[Item]) -> bool:
        """Write several items in chunks of 25.

        Returns:
            True if every item was written
        """
        requests = [{"PutRequest": {"Item": marshal_item(item)}} for item in items]
        return await self._batch_write(requests)

    async def batch_delete(self, keys: list[Key]) -> bool:
        """Delete several items by key in chunks of 25.

        Returns:
            True if every delete was applied
        """
        requests = [{"DeleteRequest": {"Key": marshal_item(key)}} for key in keys]
        return await self._batch_write(requests)

    async def _batch_write(self, requests: list[dict]) -> bool:
        success = True
        for chunk in chunked(requests, BATCH_WRITE_LIMIT):
            request = {self.table_name: chunk}

            for _ in range(2):
                response = await self._call("batch_write_item", RequestItems=request)
                if not was_successful(response):
                    success = False
                    request = {}
                    break
                request = response.get("UnprocessedItems") or {}
                if not request:
                    break

            if request:
                pending = len(request.get(self.table_name, []))
                logger.warning(
                    f"batch_write_item on {self.table_name} left {pending} requests unprocessed"
                )
                success = False
        return success
