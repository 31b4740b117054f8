"""Data models for TripManager notifications."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from dateutil.parser import isoparse

from src.notifications.config import NotificationType
from src.notifications.payloads import NotificationEvent, parse_event


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a backend timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = isoparse(value)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class NotificationRecord:
    """A notification as shown in the user's notification list.

    Records are treated as values: the cache never edits one in place,
    it swaps in a replaced copy.
    """

    id: int
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    read_at: Optional[datetime] = None
    user_id: int = 0
    updated_at: Optional[datetime] = None
    type_raw: str = ""
    local: bool = False

    @property
    def read(self) -> bool:
        return self.read_at is not None

    @property
    def event(self) -> NotificationEvent:
        """Typed view of the data payload."""
        return parse_event(self.data)

    @classmethod
    def from_api(cls, data: dict) -> "NotificationRecord":
        if "id" not in data:
            raise ValueError(f"Notification without id: {data!r}")
        raw_type = str(data.get("type") or NotificationType.GENERAL.value)
        payload = data.get("data")
        return cls(
            id=int(data["id"]),
            type=NotificationType.parse(raw_type),
            type_raw=raw_type,
            title=data.get("title") or "",
            message=data.get("message") or "",
            data=dict(payload) if isinstance(payload, dict) else {},
            created_at=parse_timestamp(data.get("created_at")) or _now(),
            read_at=parse_timestamp(data.get("read_at")),
            user_id=int(data.get("user_id") or 0),
            updated_at=parse_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type_raw or self.type.value,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "read": self.read,
            "read_at": _iso(self.read_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class PushRegistration:
    """The push token currently registered for this device."""

    token: str
    platform: str
    registered_at: datetime = field(default_factory=_now)
    backend_acknowledged: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "PushRegistration":
        return cls(
            token=data["token"],
            platform=data.get("platform", ""),
            registered_at=parse_timestamp(data.get("registered_at")) or _now(),
            backend_acknowledged=bool(data.get("backend_acknowledged", False)),
        )

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "platform": self.platform,
            "registered_at": self.registered_at.isoformat(),
            "backend_acknowledged": self.backend_acknowledged,
        }
