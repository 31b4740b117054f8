"""Data models exchanged with the device notification platform."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union
import uuid


def _new_identifier() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NotificationContent:
    """What a notification shows and carries."""

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    sound: bool = True
    channel_id: Optional[str] = None


@dataclass(frozen=True)
class DailyTrigger:
    """Fires every day at a wall-clock time."""

    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be in 0..23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be in 0..59, got {self.minute}")


@dataclass(frozen=True)
class IntervalTrigger:
    """Fires once after a delay."""

    seconds: int
    repeats: bool = False

    def __post_init__(self):
        if self.seconds <= 0:
            raise ValueError(f"seconds must be positive, got {self.seconds}")


# None means "deliver immediately"
Trigger = Optional[Union[DailyTrigger, IntervalTrigger]]


@dataclass
class ScheduledNotification:
    """A notification request held by the platform scheduler."""

    content: NotificationContent
    trigger: Trigger = None
    identifier: str = field(default_factory=_new_identifier)
    scheduled_at: datetime = field(default_factory=_now)

    @property
    def is_recurring(self) -> bool:
        return isinstance(self.trigger, DailyTrigger) or (
            isinstance(self.trigger, IntervalTrigger) and self.trigger.repeats
        )


@dataclass
class ReceivedNotification:
    """A notification delivered to the app (foreground) or tapped."""

    identifier: str
    content: NotificationContent
    delivered_at: datetime = field(default_factory=_now)

    @property
    def data(self) -> dict[str, Any]:
        return self.content.data


@dataclass
class NotificationTap:
    """The user interacted with a delivered notification."""

    notification: ReceivedNotification
    action_identifier: str = "default"

    @property
    def data(self) -> dict[str, Any]:
        return self.notification.data


class Subscription:
    """Handle for a registered platform listener."""

    def __init__(self, remove_fn: Callable[[], None]):
        self._remove_fn: Optional[Callable[[], None]] = remove_fn

    @property
    def active(self) -> bool:
        return self._remove_fn is not None

    def remove(self) -> None:
        if self._remove_fn is not None:
            remove_fn, self._remove_fn = self._remove_fn, None
            remove_fn()
