"""Notification Platform Protocol.

The operating-system notification API the client runs against:
permissions, push tokens, Android channels, the local scheduler, the
app badge, and delivery/tap listeners.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from src.device.config import ChannelConfig, DevicePlatform, PermissionStatus
from src.device.models import (
    NotificationContent,
    NotificationTap,
    ReceivedNotification,
    ScheduledNotification,
    Subscription,
    Trigger,
)

ReceivedListener = Callable[[ReceivedNotification], Awaitable[None]]
TapListener = Callable[[NotificationTap], Awaitable[None]]


@runtime_checkable
class NotificationPlatform(Protocol):
    """Protocol every device notification backend implements."""

    @property
    def os(self) -> DevicePlatform:
        """Operating system of the device."""
        ...

    @property
    def is_physical_device(self) -> bool:
        """False on emulators and simulators, where push is unavailable."""
        ...

    # Permissions
    async def get_permission_status(self) -> PermissionStatus:
        ...

    async def request_permission(self) -> PermissionStatus:
        ...

    # Push token
    async def get_push_token(self, project_id: str) -> str:
        """Fetch the push delivery token scoped to ``project_id``."""
        ...

    # Channels
    async def set_notification_channel(self, channel: ChannelConfig) -> None:
        ...

    # Scheduler
    async def schedule_notification(self, content: NotificationContent, trigger: Trigger) -> str:
        """Schedule a notification and return its identifier."""
        ...

    async def get_scheduled_notifications(self) -> list[ScheduledNotification]:
        ...

    async def cancel_scheduled_notification(self, identifier: str) -> None:
        ...

    async def cancel_all_scheduled_notifications(self) -> None:
        ...

    # Badge
    async def get_badge_count(self) -> int:
        ...

    async def set_badge_count(self, count: int) -> None:
        ...

    # Listeners
    def add_received_listener(self, listener: ReceivedListener) -> Subscription:
        """Called for notifications delivered while the app is foregrounded."""
        ...

    def add_tap_listener(self, listener: TapListener) -> Subscription:
        """Called when the user taps a notification."""
        ...
