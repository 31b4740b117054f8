"""Typed notification payloads.

Notification ``data`` arrives as an untyped mapping, both from the
backend list and from delivered pushes. ``parse_event`` turns it into
one of a closed set of event variants that carry only the fields their
routing needs; anything unrecognized becomes ``UnknownEvent`` so newer
backends keep working.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

DAILY_TRIP_CHECK = "daily_trip_check"
TRIP_READY_TODAY = "trip_ready_today"

# Keys that carry no routing information on their own
_PASSIVE_KEYS = {"notification_id", "type"}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


@dataclass(frozen=True)
class TripTicketEvent:
    """Something happened to a trip ticket."""

    ticket_id: int
    ticket_number: Optional[str] = None
    notification_id: Optional[int] = None


@dataclass(frozen=True)
class TripReadyTodayEvent:
    """A ready-for-trip ticket starts today."""

    ticket_id: int
    ticket_number: Optional[str] = None
    notification_id: Optional[int] = None


@dataclass(frozen=True)
class TravelRequestEvent:
    travel_request_id: int
    notification_id: Optional[int] = None


@dataclass(frozen=True)
class DailyTripCheckEvent:
    """The recurring morning reminder to check today's trips."""

    notification_id: Optional[int] = None


@dataclass(frozen=True)
class GeneralEvent:
    notification_id: Optional[int] = None


@dataclass(frozen=True)
class UnknownEvent:
    raw: dict[str, Any] = field(default_factory=dict)
    notification_id: Optional[int] = None


NotificationEvent = Union[
    TripTicketEvent,
    TripReadyTodayEvent,
    TravelRequestEvent,
    DailyTripCheckEvent,
    GeneralEvent,
    UnknownEvent,
]


def parse_event(data: Optional[dict[str, Any]]) -> NotificationEvent:
    """Classify a notification data payload."""
    data = data or {}
    notification_id = _as_int(data.get("notification_id"))
    kind = data.get("type")

    if kind == DAILY_TRIP_CHECK:
        return DailyTripCheckEvent(notification_id=notification_id)

    ticket_id = _as_int(data.get("trip_ticket_id"))
    if ticket_id is None:
        ticket_id = _as_int(data.get("ticket_id"))
    ticket_number = data.get("ticket_number")
    if ticket_number is not None:
        ticket_number = str(ticket_number)

    if ticket_id is not None:
        event_class = TripReadyTodayEvent if kind == TRIP_READY_TODAY else TripTicketEvent
        return event_class(
            ticket_id=ticket_id,
            ticket_number=ticket_number,
            notification_id=notification_id,
        )

    travel_request_id = _as_int(data.get("travel_request_id"))
    if travel_request_id is not None:
        return TravelRequestEvent(travel_request_id=travel_request_id, notification_id=notification_id)

    if set(data) <= _PASSIVE_KEYS and kind in (None, "general"):
        return GeneralEvent(notification_id=notification_id)

    return UnknownEvent(raw=dict(data), notification_id=notification_id)
