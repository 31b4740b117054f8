"""Push registration and device notification scheduling.

One coordinator per app session owns the device's push token: it asks
for permission, fetches and persists the token, tells the backend about
it, configures Android channels, and schedules local notifications.

Registration lifecycle:

    UNREGISTERED -> TOKEN_ACQUIRED -> REGISTERED -> (logout) -> UNREGISTERED

Simulators and denied permissions end in UNAVAILABLE. That is a
result, not an error: ``register_for_push`` returns None and may be
called again later, e.g. after the user changes OS settings.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.api_client.client import TripManagerClient
from src.api_client.errors import BackendError
from src.device.config import DevicePlatform, PermissionStatus
from src.device.interface import NotificationPlatform, ReceivedListener, TapListener
from src.device.models import (
    DailyTrigger,
    IntervalTrigger,
    NotificationContent,
    Subscription,
)
from src.notifications.config import (
    DEFAULT_NOTIFICATION_CONFIG,
    NotificationConfig,
    PushState,
)
from src.notifications.models import PushRegistration
from src.notifications.payloads import DAILY_TRIP_CHECK
from src.storage import keys
from src.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PushChannelCoordinator:
    """Owns push registration, channels, scheduling and the badge."""

    def __init__(
        self,
        platform: NotificationPlatform,
        api: TripManagerClient,
        storage: KeyValueStore,
        config: Optional[NotificationConfig] = None,
        clock: Callable[[], datetime] = _now,
    ):
        self._platform = platform
        self._api = api
        self._storage = storage
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self._clock = clock
        self._token: Optional[str] = None
        self._registration: Optional[PushRegistration] = None
        self._state = PushState.UNREGISTERED
        self._received_subscription: Optional[Subscription] = None
        self._tap_subscription: Optional[Subscription] = None

    @property
    def state(self) -> PushState:
        return self._state

    @property
    def registration(self) -> Optional[PushRegistration]:
        return self._registration

    def get_push_token(self) -> Optional[str]:
        """In-memory token; None until registration has acquired one."""
        return self._token

    # --- Registration ---

    async def register_for_push(self) -> Optional[str]:
        """Acquire, persist and register a push token.

        Returns the token, or None when push is unavailable on this
        device (simulator, permission denied, token fetch failed).
        A backend that fails to acknowledge the token does not fail
        registration: the token still serves local notifications.
        """
        if not self._platform.is_physical_device:
            logger.info("Push notifications require a physical device")
            self._state = PushState.UNAVAILABLE
            return None

        try:
            status = await self._platform.get_permission_status()
            if status != PermissionStatus.GRANTED:
                status = await self._platform.request_permission()
        except Exception as e:
            logger.error("Failed to query notification permission: %s", e)
            self._state = PushState.UNAVAILABLE
            return None

        if status != PermissionStatus.GRANTED:
            logger.info("Push notification permission not granted (%s)", status.value)
            self._state = PushState.UNAVAILABLE
            return None

        try:
            token = await self._platform.get_push_token(self.config.project_id)
        except Exception as e:
            logger.error("Failed to get push token: %s", e)
            self._state = PushState.UNAVAILABLE
            return None
        if not token:
            logger.error("Platform returned an empty push token")
            self._state = PushState.UNAVAILABLE
            return None

        previous = await self._load_registration()
        registration = PushRegistration(
            token=token,
            platform=self._platform.os.value,
            registered_at=self._clock(),
        )
        self._token = token
        self._registration = registration
        self._state = PushState.TOKEN_ACQUIRED
        await self._storage.set_object(keys.PUSH_TOKEN, registration.to_dict())
        logger.info("Push token acquired for %s", registration.platform)

        if previous is not None and previous.token != token:
            await self._retire_token(previous.token)

        await self._send_token_to_backend(registration)

        if self._platform.os == DevicePlatform.ANDROID:
            await self._setup_channels()

        return token

    async def _load_registration(self) -> Optional[PushRegistration]:
        stored = await self._storage.get_object(keys.PUSH_TOKEN)
        if not isinstance(stored, dict) or "token" not in stored:
            return None
        return PushRegistration.from_dict(stored)

    async def _retire_token(self, token: str) -> None:
        try:
            await self._api.unregister_push_token(token)
            logger.info("Superseded push token unregistered from backend")
        except BackendError as e:
            logger.warning("Failed to unregister superseded push token: %s", e)

    async def _send_token_to_backend(self, registration: PushRegistration) -> None:
        try:
            await self._api.register_push_token(registration.token, registration.platform)
        except BackendError as e:
            logger.warning("Failed to register push token with backend: %s", e)
            return
        registration.backend_acknowledged = True
        self._state = PushState.REGISTERED
        await self._storage.set_object(keys.PUSH_TOKEN, registration.to_dict())
        logger.info("Push token registered with backend")

    async def _setup_channels(self) -> None:
        for channel in self.config.channels:
            try:
                await self._platform.set_notification_channel(channel)
            except Exception as e:
                logger.error("Failed to configure channel %s: %s", channel.channel_id, e)
        logger.info("Configured %d Android notification channel(s)", len(self.config.channels))

    async def unregister_push(self) -> None:
        """Invalidate the token on the backend and forget it locally.

        Local state is cleared even if the backend call fails, so a
        logout always leaves the device unregistered.
        """
        token = self._token
        if token is None:
            stored = await self._load_registration()
            token = stored.token if stored else None

        if token is not None:
            try:
                await self._api.unregister_push_token(token)
                logger.info("Push token unregistered from backend")
            except BackendError as e:
                logger.warning("Failed to unregister push token from backend: %s", e)

        await self._storage.remove_item(keys.PUSH_TOKEN)
        self._token = None
        self._registration = None
        self._state = PushState.UNREGISTERED

    # --- Scheduling ---

    async def schedule_daily_notification(
        self,
        hour: int,
        minute: int,
        title: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Optional[str]:
        """Schedule a notification that fires every day at hour:minute.

        Any scheduled notification carrying the same payload ``type``
        is cancelled first, so re-scheduling never stacks duplicates.
        Payloads without a type are tagged as the daily trip check.
        Returns the schedule identifier, or None on failure.
        """
        data = dict(payload or {})
        recurring_type = data.setdefault("type", DAILY_TRIP_CHECK)

        try:
            trigger = DailyTrigger(hour=hour, minute=minute)
            for scheduled in await self._platform.get_scheduled_notifications():
                if scheduled.content.data.get("type") == recurring_type:
                    await self._platform.cancel_scheduled_notification(scheduled.identifier)
            identifier = await self._platform.schedule_notification(
                NotificationContent(title=title, body=body, data=data),
                trigger,
            )
        except Exception as e:
            logger.error("Error scheduling daily notification: %s", e)
            return None

        logger.info("Daily notification '%s' scheduled for %02d:%02d", recurring_type, hour, minute)
        return identifier

    async def schedule_local_notification(
        self,
        title: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
        delay_seconds: int = 0,
        channel_id: Optional[str] = None,
    ) -> Optional[str]:
        """Fire a one-shot notification now (delay 0) or after a delay.

        Failures are logged; returns the identifier or None.
        """
        try:
            if delay_seconds < 0:
                raise ValueError(f"delay_seconds must not be negative, got {delay_seconds}")
            trigger = IntervalTrigger(seconds=delay_seconds) if delay_seconds > 0 else None
            return await self._platform.schedule_notification(
                NotificationContent(title=title, body=body, data=dict(payload or {}), channel_id=channel_id),
                trigger,
            )
        except Exception as e:
            logger.error("Error scheduling local notification: %s", e)
            return None

    async def cancel_all_notifications(self) -> None:
        await self._platform.cancel_all_scheduled_notifications()

    # --- Badge ---

    async def get_badge_count(self) -> int:
        return await self._platform.get_badge_count()

    async def set_badge_count(self, count: int) -> None:
        await self._platform.set_badge_count(max(0, count))

    async def clear_badge_count(self) -> None:
        await self.set_badge_count(0)

    # --- Listeners ---

    def setup_notification_listeners(
        self,
        on_received: Optional[ReceivedListener] = None,
        on_tap: Optional[TapListener] = None,
    ) -> None:
        """Attach delivery and tap listeners, replacing any attached earlier."""
        self.remove_notification_listeners()
        if on_received is not None:
            self._received_subscription = self._platform.add_received_listener(on_received)
        if on_tap is not None:
            self._tap_subscription = self._platform.add_tap_listener(on_tap)

    def remove_notification_listeners(self) -> None:
        for subscription in (self._received_subscription, self._tap_subscription):
            if subscription is not None:
                subscription.remove()
        self._received_subscription = None
        self._tap_subscription = None
