"""Device notification platform.

The boundary to the operating system's notification API, and an
in-memory simulator used by the CLI and the test-suite.
"""

from src.device.config import (
    ChannelConfig,
    ChannelImportance,
    DevicePlatform,
    PermissionStatus,
)
from src.device.models import (
    DailyTrigger,
    IntervalTrigger,
    NotificationContent,
    NotificationTap,
    ReceivedNotification,
    ScheduledNotification,
    Subscription,
)
from src.device.interface import NotificationPlatform
from src.device.simulator import SimulatedPlatform

__all__ = [
    "ChannelConfig",
    "ChannelImportance",
    "DevicePlatform",
    "PermissionStatus",
    "DailyTrigger",
    "IntervalTrigger",
    "NotificationContent",
    "NotificationTap",
    "ReceivedNotification",
    "ScheduledNotification",
    "Subscription",
    "NotificationPlatform",
    "SimulatedPlatform",
]
