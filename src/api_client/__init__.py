"""TripManager backend client.

Async REST client for the notification, push-token and trip-ticket
endpoints, with a typed error hierarchy.

Example:
    from src.api_client import ApiConfig, TripManagerClient
    from src.storage import JsonFileStore

    client = TripManagerClient(JsonFileStore("~/.tripmanager.json"), ApiConfig.from_env())
    notifications = await client.get_notifications()
"""

from src.api_client.config import ApiConfig, ErrorCode, DEFAULT_API_CONFIG
from src.api_client.errors import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    BackendUnavailableError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from src.api_client.client import TripManagerClient, unwrap

__all__ = [
    "ApiConfig",
    "ErrorCode",
    "DEFAULT_API_CONFIG",
    "AuthenticationError",
    "AuthorizationError",
    "BackendError",
    "BackendUnavailableError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "ValidationError",
    "TripManagerClient",
    "unwrap",
]
