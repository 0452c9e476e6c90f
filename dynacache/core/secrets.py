"""Configuration values from the environment or AWS Secrets Manager."""

import asyncio
import json
import logging
import os
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from dynacache.core.client import DynamoClientManager, get_client_manager
from dynacache.core.exceptions import ConfigurationError, DynamoConnectionError
from dynacache.core.settings import DynacacheSettings

logger = logging.getLogger(__name__)


class SecretConfig:
    """Looks up configuration values, environment first.

    A value is resolved from, in order:
    1. the environment variable of the same name
    2. the JSON object stored in the Secrets Manager secret ``secret_id``
    3. the caller's default

    A successfully fetched secret is memoized. Secrets Manager failures are
    logged, fall through to the default and are retried on the next lookup.
    """

    def __init__(
        self,
        secret_id: str | None = None,
        settings: DynacacheSettings | None = None,
        client_manager: DynamoClientManager | None = None,
    ):
        """Initialize the config.

        Args:
            secret_id: Secret name or ARN (defaults to settings.aws_secret_id)
            settings: Settings to read AWS_SECRET_ID from
            client_manager: Manager used to open the Secrets Manager client
        """
        settings = settings or (client_manager.settings if client_manager else None)
        self.secret_id = secret_id or (settings.aws_secret_id if settings else None)
        self._client_manager = client_manager
        self._secrets: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    async def get(self, key: str, default: str | None = None) -> str | None:
        """Get a configuration value.

        Args:
            key: Variable / secret field name
            default: Value returned when neither source has the key

        Returns:
            The resolved value or ``default``

        Raises:
            ConfigurationError: If the secret is needed but no secret id is set
        """
        env_value = os.environ.get(key)
        if env_value:
            return env_value

        secrets = await self._load_secrets()
        value = secrets.get(key)
        if value:
            return str(value)
        return default

    async def _load_secrets(self) -> dict[str, Any]:
        if self._secrets is not None:
            return self._secrets

        if not self.secret_id:
            raise ConfigurationError(missing_fields=["AWS_SECRET_ID"])

        async with self._lock:
            if self._secrets is None:
                # None on failure, so the next lookup fetches again
                self._secrets = await self._fetch_secret()
        return self._secrets or {}

    async def _fetch_secret(self) -> dict[str, Any] | None:
        manager = self._client_manager or get_client_manager()
        try:
            async with manager.get_async_client("secretsmanager") as client:
                response = await client.get_secret_value(SecretId=self.secret_id)
        except (ClientError, BotoCoreError, DynamoConnectionError) as e:
            logger.error(f"Error retrieving secret {self.secret_id}: {e}")
            return None

        secret_string = response.get("SecretString")
        if not secret_string:
            return {}
        try:
            secrets = json.loads(secret_string)
        except json.JSONDecodeError as e:
            logger.error(f"Secret {self.secret_id} is not valid JSON: {e}")
            return None
        return secrets if isinstance(secrets, dict) else {}

    def clear_cache(self) -> None:
        """Forget the memoized secret (useful for testing or rotation)."""
        self._secrets = None
