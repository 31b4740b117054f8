"""Notification session lifecycle.

Holds the cache, push coordinator, trip scanner and listener pipeline
for one logged-in user. ``start`` runs once the user is authenticated;
``end`` is the logout teardown.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from src.api_client.client import TripManagerClient
from src.device.interface import NotificationPlatform
from src.logging_config.context import SessionContext, generate_session_id
from src.notifications.cache import NotificationCache
from src.notifications.config import DEFAULT_NOTIFICATION_CONFIG, NotificationConfig
from src.notifications.listeners import NotificationListenerPipeline
from src.notifications.payloads import DAILY_TRIP_CHECK
from src.notifications.push import PushChannelCoordinator
from src.notifications.routing import Router
from src.notifications.scanner import TripReadyScanner
from src.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationSession:
    """Explicitly constructed application context for notifications.

    Example:
        session = NotificationSession(client, store, platform, router)
        await session.start(user_id="17")
        ...
        await session.end()
    """

    def __init__(
        self,
        api: TripManagerClient,
        storage: KeyValueStore,
        platform: NotificationPlatform,
        router: Router,
        config: Optional[NotificationConfig] = None,
        clock: Callable[[], datetime] = _now,
    ):
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self.storage = storage
        self.push = PushChannelCoordinator(platform, api, storage, self.config, clock)
        self.cache = NotificationCache(api, storage, self.push, self.config, clock)
        self.scanner = TripReadyScanner(api, self.cache, self.config, clock)
        self.pipeline = NotificationListenerPipeline(self.cache, self.push, router, self.scanner)
        self.session_id = generate_session_id()
        self.user_id = ""
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def start(self, user_id: str = "") -> Optional[str]:
        """Bring notifications up for a freshly authenticated user.

        Returns the push token, or None when push is unavailable (local
        notifications keep working either way).
        """
        self.user_id = user_id
        with SessionContext(session_id=self.session_id, user_id=user_id):
            token = await self.push.register_for_push()
            if token is None:
                logger.info("Push notifications not available, local notifications still work")

            await self.cache.load()
            await self.scanner.scan()

            if self.config.daily_check_enabled:
                await self.push.schedule_daily_notification(
                    self.config.daily_check_hour,
                    self.config.daily_check_minute,
                    self.config.daily_check_title,
                    self.config.daily_check_body,
                    {"type": DAILY_TRIP_CHECK},
                )

            self.pipeline.attach()
            self._active = True
            logger.info("Notification session started")
        return token

    async def on_notifications_viewed(self) -> None:
        """The user opened the notification list; the badge only counts while away."""
        await self.push.clear_badge_count()

    async def end(self) -> None:
        """Logout teardown: forget the token, the cached list and the credentials."""
        with SessionContext(session_id=self.session_id, user_id=self.user_id):
            self.pipeline.detach()
            await self.push.unregister_push()
            self.cache.clear_local_cache()
            await self.push.clear_badge_count()
            await self.storage.clear_auth_data()
            self._active = False
            logger.info("Notification session ended")
