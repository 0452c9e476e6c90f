"""Core components: settings, AWS clients, errors and the DynamoDB store."""

from dynacache.core.client import DynamoClientManager, get_client_manager, set_client_manager
from dynacache.core.exceptions import (
    ConfigurationError,
    DynacacheError,
    DynamoConnectionError,
    DynamoOperationError,
)
from dynacache.core.secrets import SecretConfig
from dynacache.core.settings import DynacacheSettings
from dynacache.core.store import QueryOptions, RemoteStore, ScanOptions, UpdateOptions
from dynacache.core.table import DynamoTable

__all__ = [
    "DynamoClientManager",
    "get_client_manager",
    "set_client_manager",
    "DynacacheError",
    "DynamoConnectionError",
    "DynamoOperationError",
    "ConfigurationError",
    "SecretConfig",
    "DynacacheSettings",
    "RemoteStore",
    "QueryOptions",
    "ScanOptions",
    "UpdateOptions",
    "DynamoTable",
]
