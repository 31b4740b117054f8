"""Client-side detection of trips that start today.

The backend does not push a reminder on the travel date itself, so the
app scans the driver's ready-for-trip tickets and synthesizes one local
notification per ticket per day.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from dateutil.parser import isoparse

from src.api_client.client import TripManagerClient
from src.api_client.errors import BackendError
from src.logging_config.performance import log_performance
from src.notifications.cache import NotificationCache
from src.notifications.config import DEFAULT_NOTIFICATION_CONFIG, NotificationConfig

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _extract_tickets(body: Any) -> list[dict]:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        tickets = body.get("trip_tickets")
        if isinstance(tickets, dict) and isinstance(tickets.get("data"), list):
            return tickets["data"]
        if isinstance(tickets, list):
            return tickets
    logger.warning("Unexpected trip tickets response format: %r", body)
    return []


def _travel_request(ticket: dict) -> Optional[dict]:
    travel_request = ticket.get("travel_request") or ticket.get("travelRequest")
    if travel_request is None:
        return None
    if not isinstance(travel_request, dict):
        logger.warning("Ticket %s has malformed travel request %r", ticket.get("id"), travel_request)
        return None
    return travel_request


def _ticket_id(ticket: dict) -> Optional[int]:
    ticket_id = ticket.get("id")
    if isinstance(ticket_id, bool) or not isinstance(ticket_id, int):
        logger.warning("Skipping ticket with malformed id %r", ticket_id)
        return None
    return ticket_id


def _travel_day(travel_request: dict, ticket_id: int) -> Optional[date]:
    start = travel_request.get("start_date")
    if not start:
        return None
    if isinstance(start, str):
        try:
            parsed = isoparse(start)
        except (ValueError, OverflowError):
            logger.warning("Ticket %s has unparseable start_date %r", ticket_id, start)
            return None
    elif isinstance(start, datetime):
        parsed = start
    else:
        logger.warning("Ticket %s has unparseable start_date %r", ticket_id, start)
        return None
    # Naive values are already local wall-clock times
    if parsed.tzinfo is None:
        return parsed.date()
    return parsed.astimezone().date()


def _destination(travel_request: dict) -> Optional[str]:
    destinations = travel_request.get("destinations")
    if isinstance(destinations, list):
        return ", ".join(str(d) for d in destinations) or None
    return destinations or None


class TripReadyScanner:
    """Creates trip-ready notifications for tickets travelling today."""

    def __init__(
        self,
        api: TripManagerClient,
        cache: NotificationCache,
        config: Optional[NotificationConfig] = None,
        clock: Callable[[], datetime] = _now,
    ):
        self._api = api
        self._cache = cache
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self._clock = clock

    @log_performance()
    async def scan(self) -> int:
        """Returns how many new notifications were created."""
        try:
            body = await self._api.get_trip_tickets(
                status=self.config.ready_ticket_status,
                with_relations=True,
            )
        except BackendError as e:
            logger.error("Failed to check for trips scheduled today: %s", e)
            return 0

        today = self._clock().astimezone().date()
        created = 0
        for ticket in _extract_tickets(body):
            if not isinstance(ticket, dict):
                logger.warning("Skipping malformed ticket %r", ticket)
                continue
            ticket_id = _ticket_id(ticket)
            travel_request = _travel_request(ticket) if ticket_id is not None else None
            if travel_request is None or _travel_day(travel_request, ticket_id) != today:
                continue
            record = await self._cache.create_trip_ready_notification(
                ticket_id=ticket_id,
                ticket_number=ticket.get("ticket_number"),
                destination=_destination(travel_request),
            )
            if record is not None:
                created += 1

        if created:
            logger.info("Sent %d notification(s) for today's trips", created)
        else:
            logger.info("No new trips scheduled for today")
        return created
