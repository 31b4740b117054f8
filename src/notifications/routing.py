"""Deep-link destinations for notifications."""

from typing import Protocol, runtime_checkable

from src.notifications.payloads import (
    DailyTripCheckEvent,
    NotificationEvent,
    TripReadyTodayEvent,
    TripTicketEvent,
)

TICKETS_TAB = "/(tabs)/tickets"
NOTIFICATIONS_TAB = "/(tabs)/notifications"
TRIP_TICKET_DETAILS = "/trip-ticket-details?id={ticket_id}"


@runtime_checkable
class Router(Protocol):
    """Navigation collaborator that performs the deep link."""

    def push(self, path: str) -> None:
        ...


def resolve_route(event: NotificationEvent) -> str:
    """Destination screen for a tapped notification."""
    if isinstance(event, DailyTripCheckEvent):
        return TICKETS_TAB
    if isinstance(event, (TripReadyTodayEvent, TripTicketEvent)):
        return TRIP_TICKET_DETAILS.format(ticket_id=event.ticket_id)
    return NOTIFICATIONS_TAB


class RecordingRouter:
    """Router that only remembers where it was sent."""

    def __init__(self):
        self.history: list[str] = []

    def push(self, path: str) -> None:
        self.history.append(path)

    @property
    def current(self):
        return self.history[-1] if self.history else None
