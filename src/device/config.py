"""Configuration for the device notification platform."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class DevicePlatform(Enum):
    """Operating systems the client runs on."""
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class PermissionStatus(Enum):
    """Notification permission state reported by the OS."""
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class ChannelImportance(Enum):
    """Android notification channel importance."""
    MIN = 1
    LOW = 2
    DEFAULT = 3
    HIGH = 4
    MAX = 5  # heads-up


@dataclass
class ChannelConfig:
    """Android notification channel definition."""

    channel_id: str
    name: str
    importance: ChannelImportance = ChannelImportance.DEFAULT
    description: Optional[str] = None
    sound: Optional[str] = "default"
    vibration_pattern: list[int] = field(default_factory=lambda: [0, 250, 250, 250])
    light_color: Optional[str] = None
    enable_lights: bool = True
    enable_vibrate: bool = True
    show_badge: bool = True
    bypass_dnd: bool = False
