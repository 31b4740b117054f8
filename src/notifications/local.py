"""Notifications synthesized on the device.

The backend does not push about every event the driver cares about.
These builders turn a client-side detection (a ticket that starts
today) into both an in-app NotificationRecord and a device notification.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, ClassVar, Optional

from src.notifications.config import LocalNotificationKind, NotificationType
from src.notifications.models import NotificationRecord
from src.notifications.payloads import TRIP_READY_TODAY
from src.storage import keys


@dataclass(frozen=True)
class TripReadyToday:
    """A ready-for-trip ticket whose travel date is today."""

    kind: ClassVar[LocalNotificationKind] = LocalNotificationKind.TRIP_READY_TODAY

    ticket_id: int
    ticket_number: Optional[str] = None
    destination: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TripReadyToday":
        ticket_id = payload.get("ticket_id", payload.get("trip_ticket_id"))
        if ticket_id is None:
            raise ValueError("trip ready notification requires a ticket_id")
        return cls(
            ticket_id=int(ticket_id),
            ticket_number=payload.get("ticket_number"),
            destination=payload.get("destination") or payload.get("destinations"),
        )

    @property
    def label(self) -> str:
        return self.ticket_number or f"#{self.ticket_id}"

    def marker_key(self, day: date) -> str:
        return keys.trip_ready_marker(self.ticket_id, day)

    def message(self) -> str:
        where = f" to {self.destination}" if self.destination else ""
        return (
            f"Your trip{where} ({self.label}) is scheduled for today. "
            "Tap to view details and start your trip."
        )

    def push_data(self) -> dict[str, Any]:
        return {
            "type": TRIP_READY_TODAY,
            "trip_ticket_id": self.ticket_id,
            "ticket_number": self.ticket_number,
        }

    def to_record(self, record_id: int, now: datetime, title: str) -> NotificationRecord:
        return NotificationRecord(
            id=record_id,
            type=NotificationType.TRIP_TICKET_ASSIGNED,
            type_raw=NotificationType.TRIP_TICKET_ASSIGNED.value,
            title=title,
            message=self.message(),
            data={
                "trip_ticket_id": self.ticket_id,
                "ticket_number": self.ticket_number,
                "destinations": self.destination,
                "start_date": now.isoformat(),
            },
            created_at=now,
            updated_at=now,
            local=True,
        )


LOCAL_NOTIFICATION_BUILDERS = {
    LocalNotificationKind.TRIP_READY_TODAY: TripReadyToday,
}
