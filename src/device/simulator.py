"""In-process notification platform.

Stands in for the OS notification API on development machines, in the
CLI, and in tests. Scheduled notifications are held in memory and only
delivered when ``deliver`` or ``tap`` is called.
"""

import logging
import uuid
from typing import Optional

from src.device.config import ChannelConfig, DevicePlatform, PermissionStatus
from src.device.interface import ReceivedListener, TapListener
from src.device.models import (
    NotificationContent,
    NotificationTap,
    ReceivedNotification,
    ScheduledNotification,
    Subscription,
    Trigger,
)

logger = logging.getLogger(__name__)


class SimulatedPlatform:
    """Deterministic in-memory implementation of NotificationPlatform.

    Example:
        platform = SimulatedPlatform(permission=PermissionStatus.GRANTED)
        token = await platform.get_push_token("project-id")
        identifier = await platform.schedule_notification(content, None)
        await platform.deliver(identifier)
    """

    def __init__(
        self,
        os: DevicePlatform = DevicePlatform.ANDROID,
        physical_device: bool = True,
        permission: PermissionStatus = PermissionStatus.UNDETERMINED,
        grant_on_request: bool = True,
        token: Optional[str] = None,
    ):
        self._os = os
        self._physical_device = physical_device
        self.permission = permission
        self.grant_on_request = grant_on_request
        self._token = token
        self.permission_requests = 0
        self.token_error: Optional[Exception] = None
        self.channels: dict[str, ChannelConfig] = {}
        self.badge_count = 0
        self._scheduled: dict[str, ScheduledNotification] = {}
        self.presented: list[ReceivedNotification] = []
        self._received_listeners: list[ReceivedListener] = []
        self._tap_listeners: list[TapListener] = []

    @property
    def os(self) -> DevicePlatform:
        return self._os

    @property
    def is_physical_device(self) -> bool:
        return self._physical_device

    # --- Permissions ---

    async def get_permission_status(self) -> PermissionStatus:
        return self.permission

    async def request_permission(self) -> PermissionStatus:
        self.permission_requests += 1
        if self.permission == PermissionStatus.UNDETERMINED:
            self.permission = (
                PermissionStatus.GRANTED if self.grant_on_request else PermissionStatus.DENIED
            )
        return self.permission

    # --- Push token ---

    async def get_push_token(self, project_id: str) -> str:
        if self.token_error is not None:
            raise self.token_error
        if self._token is None:
            self._token = f"ExponentPushToken[{uuid.uuid4().hex[:22]}]"
        return self._token

    # --- Channels ---

    async def set_notification_channel(self, channel: ChannelConfig) -> None:
        self.channels[channel.channel_id] = channel

    # --- Scheduler ---

    async def schedule_notification(self, content: NotificationContent, trigger: Trigger) -> str:
        scheduled = ScheduledNotification(content=content, trigger=trigger)
        if trigger is None:
            self.presented.append(
                ReceivedNotification(identifier=scheduled.identifier, content=content)
            )
        else:
            self._scheduled[scheduled.identifier] = scheduled
        return scheduled.identifier

    async def get_scheduled_notifications(self) -> list[ScheduledNotification]:
        return list(self._scheduled.values())

    async def cancel_scheduled_notification(self, identifier: str) -> None:
        self._scheduled.pop(identifier, None)

    async def cancel_all_scheduled_notifications(self) -> None:
        self._scheduled.clear()

    # --- Badge ---

    async def get_badge_count(self) -> int:
        return self.badge_count

    async def set_badge_count(self, count: int) -> None:
        self.badge_count = max(0, count)

    # --- Listeners ---

    def add_received_listener(self, listener: ReceivedListener) -> Subscription:
        self._received_listeners.append(listener)
        return Subscription(lambda: self._discard(self._received_listeners, listener))

    def add_tap_listener(self, listener: TapListener) -> Subscription:
        self._tap_listeners.append(listener)
        return Subscription(lambda: self._discard(self._tap_listeners, listener))

    @staticmethod
    def _discard(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._received_listeners) + len(self._tap_listeners)

    # --- Delivery simulation ---

    def _build_received(
        self,
        identifier: Optional[str],
        content: Optional[NotificationContent],
    ) -> ReceivedNotification:
        if content is None:
            if identifier is None:
                raise ValueError("Either identifier or content is required")
            scheduled = self._scheduled.get(identifier)
            if scheduled is not None:
                content = scheduled.content
                if not scheduled.is_recurring:
                    del self._scheduled[identifier]
            else:
                shown = [p for p in self.presented if p.identifier == identifier]
                if not shown:
                    raise KeyError(f"Unknown notification {identifier}")
                content = shown[-1].content
        return ReceivedNotification(identifier=identifier or uuid.uuid4().hex, content=content)

    async def deliver(
        self,
        identifier: Optional[str] = None,
        content: Optional[NotificationContent] = None,
    ) -> ReceivedNotification:
        """Deliver a scheduled notification (or an ad hoc remote push) to the app."""
        received = self._build_received(identifier, content)
        self.presented.append(received)
        logger.debug("Delivering %s to %d listener(s)", received.identifier, len(self._received_listeners))
        for listener in list(self._received_listeners):
            await listener(received)
        return received

    async def tap(
        self,
        identifier: Optional[str] = None,
        content: Optional[NotificationContent] = None,
    ) -> NotificationTap:
        """Simulate the user tapping a notification."""
        tap = NotificationTap(notification=self._build_received(identifier, content))
        for listener in list(self._tap_listeners):
            await listener(tap)
        return tap
