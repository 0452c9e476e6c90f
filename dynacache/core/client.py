"""AWS client manager for DynamoDB and Secrets Manager connections."""

from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

from aiobotocore.client import AioBaseClient
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from dynacache.core.exceptions import DynamoConnectionError
from dynacache.core.settings import DynacacheSettings


class DynamoClientManager:
    """Creates async AWS clients configured from DynacacheSettings.

    Clients come from a shared aiobotocore session and are scoped to an
    ``async with`` block.
    """

    def __init__(self, settings: DynacacheSettings | None = None):
        """Initialize the client manager.

        Args:
            settings: Settings to build clients from (read from env if omitted)
        """
        self.settings = settings or DynacacheSettings()
        self._async_session = None
        self._client_config = Config(
            region_name=self.settings.aws_default_region,
            retries={
                "max_attempts": self.settings.aws_retry_attempts,
                "mode": "standard",
            },
            connect_timeout=self.settings.aws_connect_timeout,
            read_timeout=self.settings.aws_read_timeout,
        )

    @property
    def endpoint_url(self) -> str | None:
        return self.settings.aws_url or None

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "region_name": self.settings.aws_default_region,
            "endpoint_url": self.endpoint_url,
            "config": self._client_config,
        }
        if self.settings.has_static_credentials:
            kwargs["aws_access_key_id"] = self.settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.settings.aws_secret_access_key
        return kwargs

    @asynccontextmanager
    async def get_async_client(
        self, service: str = "dynamodb"
    ) -> AsyncGenerator[AioBaseClient, None]:
        """Get an async client within a context manager.

        Errors raised inside the block, ClientError included, propagate
        untouched so callers can inspect the error code.

        Args:
            service: AWS service name

        Yields:
            An aiobotocore client

        Raises:
            DynamoConnectionError: If client creation fails
        """
        if self._async_session is None:
            self._async_session = get_session()

        async with AsyncExitStack() as stack:
            try:
                client = await stack.enter_async_context(
                    self._async_session.create_client(service, **self._client_kwargs())
                )
            except (BotoCoreError, ValueError) as e:
                raise DynamoConnectionError(
                    original_error=e,
                    endpoint=self.endpoint_url,
                )
            yield client


# Default client manager (created on first use)
_client_manager: DynamoClientManager | None = None


def get_client_manager() -> DynamoClientManager:
    """Get or create the default client manager.

    Returns:
        The DynamoClientManager instance
    """
    global _client_manager
    if _client_manager is None:
        _client_manager = DynamoClientManager()
    return _client_manager


def set_client_manager(manager: DynamoClientManager | None) -> None:
    """Set the default client manager (useful for testing).

    Args:
        manager: The DynamoClientManager instance to use, or None to reset
    """
    global _client_manager
    _client_manager = manager
