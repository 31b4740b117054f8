"""Configuration for TripManager notifications."""

from dataclasses import dataclass, field
from enum import Enum

from src.device.config import ChannelConfig, ChannelImportance


class NotificationType(Enum):
    """Notification kinds sent by the backend."""
    TRAVEL_REQUEST_CREATED = "travel_request_created"
    TRAVEL_REQUEST_APPROVED = "travel_request_approved"
    TRAVEL_REQUEST_REJECTED = "travel_request_rejected"
    TRIP_TICKET_ASSIGNED = "trip_ticket_assigned"
    DRIVER_ASSIGNED = "driver_assigned"
    TRIP_COMPLETED = "trip_completed"
    TRIP_TICKET_APPROVED = "trip_ticket_approved"
    TRIP_TICKET_REJECTED = "trip_ticket_rejected"
    TRIP_TICKET_CREATED = "trip_ticket_created"
    GENERAL = "general"
    UNKNOWN = "unknown"  # anything a newer backend sends that we don't know yet

    @classmethod
    def parse(cls, value) -> "NotificationType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class LocalNotificationKind(Enum):
    """Notifications synthesized on the device, never pushed by the backend."""
    TRIP_READY_TODAY = "trip_ready_today"


class PushState(Enum):
    """Push registration lifecycle for one app session."""
    UNREGISTERED = "unregistered"
    TOKEN_ACQUIRED = "token_acquired"
    REGISTERED = "registered"
    UNAVAILABLE = "unavailable"


# Android channels, both heads-up
CHANNEL_CONFIGS: list[ChannelConfig] = [
    ChannelConfig(
        channel_id="default",
        name="Default Notifications",
        importance=ChannelImportance.MAX,
        light_color="#3E0703",
    ),
    ChannelConfig(
        channel_id="trip-updates",
        name="Trip Updates",
        importance=ChannelImportance.MAX,
        light_color="#3E0703",
        description="Notifications for trip ticket updates and assignments",
    ),
]


@dataclass
class NotificationConfig:
    """Notification subsystem configuration."""

    # Push token scope
    project_id: str = "e1b00319-5b81-40c9-8d01-065a0313572d"
    channels: list[ChannelConfig] = field(default_factory=lambda: list(CHANNEL_CONFIGS))
    trip_channel_id: str = "trip-updates"

    # Daily morning check for trips starting today
    daily_check_enabled: bool = True
    daily_check_hour: int = 6
    daily_check_minute: int = 0
    daily_check_title: str = "Good Morning - Trip Check"
    daily_check_body: str = "Checking if you have any trips scheduled for today..."

    # Trip-ready scan
    ready_ticket_status: str = "ready_for_trip"
    trip_ready_title: str = "Trip Ready to Start!"


DEFAULT_NOTIFICATION_CONFIG = NotificationConfig()


# Presentation hints per notification type
TYPE_DISPLAY_CONFIGS: dict[NotificationType, dict] = {
    NotificationType.TRAVEL_REQUEST_APPROVED: {"icon": "checkmark-circle", "color": "#10b981"},
    NotificationType.TRIP_TICKET_APPROVED: {"icon": "checkmark-circle", "color": "#10b981"},
    NotificationType.TRAVEL_REQUEST_REJECTED: {"icon": "close-circle", "color": "#dc2626"},
    NotificationType.TRIP_TICKET_REJECTED: {"icon": "close-circle", "color": "#dc2626"},
    NotificationType.TRIP_TICKET_ASSIGNED: {"icon": "car", "color": "#3E0703"},
    NotificationType.DRIVER_ASSIGNED: {"icon": "car", "color": "#3E0703"},
    NotificationType.TRIP_COMPLETED: {"icon": "flag", "color": "#3E0703"},
    NotificationType.TRAVEL_REQUEST_CREATED: {"icon": "document-text", "color": "#C28F22"},
    NotificationType.TRIP_TICKET_CREATED: {"icon": "document-text", "color": "#C28F22"},
    NotificationType.GENERAL: {"icon": "megaphone", "color": "#6b7280"},
}

DEFAULT_DISPLAY = {"icon": "notifications", "color": "#6b7280"}
