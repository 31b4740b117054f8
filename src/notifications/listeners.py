"""Handlers for delivered and tapped notifications.

Foreground delivery refreshes the cache and the badge. A tap marks the
notification read, refreshes, and deep-links to its destination. Taps
are handled once per notification identifier: the OS can report the
same tap both to the live listener and as the app's launch response.
"""

import logging
from collections import deque
from typing import Optional

from src.api_client.errors import BackendError
from src.device.models import NotificationTap, ReceivedNotification
from src.notifications.cache import NotificationCache
from src.notifications.payloads import DailyTripCheckEvent, parse_event
from src.notifications.push import PushChannelCoordinator
from src.notifications.routing import Router, resolve_route, TICKETS_TAB
from src.notifications.scanner import TripReadyScanner

logger = logging.getLogger(__name__)


class NotificationListenerPipeline:
    """Wires platform notification events to the cache, badge and router."""

    def __init__(
        self,
        cache: NotificationCache,
        push: PushChannelCoordinator,
        router: Router,
        scanner: Optional[TripReadyScanner] = None,
        max_remembered_taps: int = 200,
    ):
        self._cache = cache
        self._push = push
        self._router = router
        self._scanner = scanner
        self._handled_taps: deque[str] = deque(maxlen=max_remembered_taps)

    def attach(self) -> None:
        self._push.setup_notification_listeners(self.on_received, self.on_tap)

    def detach(self) -> None:
        self._push.remove_notification_listeners()

    async def on_received(self, notification: ReceivedNotification) -> None:
        logger.info("Notification received in foreground: %s", notification.identifier)
        await self._cache.load()
        await self._push.set_badge_count(self._cache.get_unread_count())

    async def on_tap(self, tap: NotificationTap) -> None:
        identifier = tap.notification.identifier
        if identifier in self._handled_taps:
            logger.debug("Ignoring repeated tap for %s", identifier)
            return
        self._handled_taps.append(identifier)

        event = parse_event(tap.data)
        logger.info("Notification tapped: %s", type(event).__name__)

        if event.notification_id is not None:
            try:
                await self._cache.mark_as_read(event.notification_id)
            except BackendError as e:
                logger.error("Failed to mark notification %s as read: %s", event.notification_id, e)

        await self._cache.load()

        if isinstance(event, DailyTripCheckEvent):
            if self._scanner is not None:
                await self._scanner.scan()
            self._router.push(TICKETS_TAB)
            return

        self._router.push(resolve_route(event))
