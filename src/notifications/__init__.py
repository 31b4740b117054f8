"""TripManager client notifications.

Client-side notification subsystem:
- NotificationCache: in-memory mirror of the backend notification list
- PushChannelCoordinator: push token registration, channels, scheduling, badge
- NotificationListenerPipeline: foreground delivery and tap handling
- TripReadyScanner: local "trip starts today" notifications
- NotificationSession: start/end lifecycle for a logged-in user
"""

from src.notifications.config import (
    NotificationType,
    LocalNotificationKind,
    PushState,
    NotificationConfig,
    DEFAULT_NOTIFICATION_CONFIG,
    CHANNEL_CONFIGS,
    TYPE_DISPLAY_CONFIGS,
)
from src.notifications.payloads import (
    DailyTripCheckEvent,
    GeneralEvent,
    NotificationEvent,
    TravelRequestEvent,
    TripReadyTodayEvent,
    TripTicketEvent,
    UnknownEvent,
    parse_event,
)
from src.notifications.models import NotificationRecord, PushRegistration
from src.notifications.local import TripReadyToday
from src.notifications.push import PushChannelCoordinator
from src.notifications.cache import NotificationCache
from src.notifications.routing import RecordingRouter, Router, resolve_route
from src.notifications.scanner import TripReadyScanner
from src.notifications.listeners import NotificationListenerPipeline
from src.notifications.session import NotificationSession

__all__ = [
    # Config
    "NotificationType",
    "LocalNotificationKind",
    "PushState",
    "NotificationConfig",
    "DEFAULT_NOTIFICATION_CONFIG",
    "CHANNEL_CONFIGS",
    "TYPE_DISPLAY_CONFIGS",
    # Payloads
    "DailyTripCheckEvent",
    "GeneralEvent",
    "NotificationEvent",
    "TravelRequestEvent",
    "TripReadyTodayEvent",
    "TripTicketEvent",
    "UnknownEvent",
    "parse_event",
    # Models
    "NotificationRecord",
    "PushRegistration",
    "TripReadyToday",
    # Services
    "PushChannelCoordinator",
    "NotificationCache",
    "Router",
    "RecordingRouter",
    "resolve_route",
    "TripReadyScanner",
    "NotificationListenerPipeline",
    "NotificationSession",
]
