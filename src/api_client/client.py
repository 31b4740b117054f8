"""TripManager REST API Client.

Async httpx client for the notification and push-token endpoints of
the TripManager backend, plus the driver trip-ticket listing used by the
trip-ready scan.

Every request carries the bearer token currently held in storage. A 401
response clears the stored auth data before the error is raised.
"""

import logging
from typing import Any, Optional

import httpx

from src.api_client.config import ApiConfig, DEFAULT_API_CONFIG
from src.api_client.errors import (
    BackendError,
    BackendUnavailableError,
    error_for_status,
)
from src.logging_config.performance import PerformanceTimer
from src.storage import keys
from src.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def unwrap(body: Any) -> Any:
    """Return ``body["data"]`` when the backend wraps its payload, else ``body``."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


class TripManagerClient:
    """TripManager backend client.

    Example:
        async with TripManagerClient(store, ApiConfig.from_env()) as client:
            notifications = await client.get_notifications()
            await client.mark_as_read(notifications[0]["id"])
    """

    def __init__(
        self,
        storage: KeyValueStore,
        config: Optional[ApiConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config or DEFAULT_API_CONFIG
        self._storage = storage
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=self._config.default_headers,
            timeout=self._config.timeout_seconds,
            transport=transport,
            event_hooks={
                "request": [self._attach_auth],
                "response": [self._handle_unauthorized],
            },
        )

    @property
    def config(self) -> ApiConfig:
        return self._config

    async def __aenter__(self) -> "TripManagerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Hooks ────────────────────────────────────────────────────────

    async def _attach_auth(self, request: httpx.Request) -> None:
        token = await self._storage.get_item(keys.AUTH_TOKEN)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        elif self._config.log_api_calls:
            logger.debug("No auth token found for %s %s", request.method, request.url.path)

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            logger.warning("Auth token expired or invalid, clearing stored credentials")
            await self._storage.clear_auth_data()

    # ── Transport ────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        operation = f"{method} {path}"
        try:
            with PerformanceTimer(operation, method=method, path=path):
                response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(f"{operation} timed out") from e
        except httpx.RequestError as e:
            raise BackendUnavailableError(f"{operation} failed: {e}") from e

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None

        if response.is_error:
            raise error_for_status(response.status_code, body)

        if self._config.log_api_calls:
            logger.debug("%s -> %s", operation, response.status_code, extra={"status_code": response.status_code})

        return unwrap(body)

    # ── Session ──────────────────────────────────────────────────────

    async def is_authenticated(self) -> bool:
        return await self._storage.has_auth_token()

    # ── Notifications ────────────────────────────────────────────────

    async def get_notifications(self) -> Any:
        """Fetch the user's notifications (newest first, server ordered)."""
        return await self._request("GET", "/notifications")

    async def get_unread_count(self) -> int:
        body = await self._request("GET", "/notifications/unread-count")
        if isinstance(body, dict):
            return int(body.get("count") or 0)
        raise BackendError("Unexpected unread-count response", details={"body": body})

    async def mark_as_read(self, notification_id: int) -> Any:
        return await self._request("POST", f"/notifications/{notification_id}/read")

    async def mark_all_as_read(self) -> Any:
        return await self._request("POST", "/notifications/mark-all-read")

    async def delete_notification(self, notification_id: int) -> Any:
        return await self._request("DELETE", f"/notifications/{notification_id}")

    # ── Push Tokens ──────────────────────────────────────────────────

    async def register_push_token(self, token: str, platform: str) -> Any:
        return await self._request(
            "POST",
            "/push-tokens",
            json={"token": token, "platform": platform, "device_type": platform},
        )

    async def unregister_push_token(self, token: str) -> Any:
        return await self._request("DELETE", f"/push-tokens/{token}")

    # ── Trip Tickets ─────────────────────────────────────────────────

    async def get_trip_tickets(self, status: Optional[str] = None, with_relations: bool = False) -> Any:
        params: dict[str, str] = {}
        if status:
            params["status"] = status
        if with_relations:
            params["with_relations"] = "true"
        return await self._request("GET", "/driver/trip-tickets", params=params)
