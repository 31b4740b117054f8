"""In-memory notification cache.

Mirrors the backend's notification list for the logged-in user and
publishes every state change to subscribers.

Reads are forgiving: a failed ``load`` keeps serving the last good list.
Writes are strict: ``mark_as_read``, ``mark_all_as_read`` and
``delete_notification`` await the backend first and only touch local
state once it has acknowledged, so a failure leaves the cache exactly
as it was and the error reaches the caller.

Every mutation is a single assignment of a new list after the awaited
call, so cooperative tasks never observe a half-applied change.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from src.api_client.client import TripManagerClient
from src.api_client.errors import BackendError
from src.logging_config.performance import log_performance
from src.notifications.config import (
    DEFAULT_DISPLAY,
    DEFAULT_NOTIFICATION_CONFIG,
    TYPE_DISPLAY_CONFIGS,
    LocalNotificationKind,
    NotificationConfig,
    NotificationType,
)
from src.notifications.local import LOCAL_NOTIFICATION_BUILDERS, TripReadyToday
from src.notifications.models import NotificationRecord
from src.notifications.push import PushChannelCoordinator
from src.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


Listener = Callable[[list[NotificationRecord]], None]


class NotificationCache:
    """Process-wide notification list for the current user.

    Example:
        cache = NotificationCache(client, store, push=coordinator)
        unsubscribe = cache.subscribe(lambda records: render(records))
        await cache.load()
        await cache.mark_as_read(records[0].id)
        unsubscribe()
    """

    def __init__(
        self,
        api: TripManagerClient,
        storage: KeyValueStore,
        push: Optional[PushChannelCoordinator] = None,
        config: Optional[NotificationConfig] = None,
        clock: Callable[[], datetime] = _now,
    ):
        self._api = api
        self._storage = storage
        self._push = push
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self._clock = clock
        self._records: list[NotificationRecord] = []
        self._listeners: list[tuple[object, Listener]] = []
        # Dedup markers claimed by this process, checked before storage
        self._claimed_markers: set[str] = set()

    # --- Subscribers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an idempotent unsubscribe callable."""
        handle = object()
        self._listeners.append((handle, listener))

        def unsubscribe() -> None:
            self._listeners = [(h, fn) for h, fn in self._listeners if h is not handle]

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for _, listener in list(self._listeners):
            try:
                listener(list(self._records))
            except Exception:
                logger.exception("Notification listener %r failed", listener)

    # --- Reads ---

    def get_all(self) -> list[NotificationRecord]:
        """Snapshot of the cached list, newest first. No I/O."""
        return list(self._records)

    def get(self, notification_id: int) -> Optional[NotificationRecord]:
        for record in self._records:
            if record.id == notification_id:
                return record
        return None

    def get_unread_count(self) -> int:
        return sum(1 for record in self._records if not record.read)

    async def get_unread_count_from_api(self) -> int:
        """Unread count according to the backend, falling back to the local count."""
        try:
            return await self._api.get_unread_count()
        except BackendError as e:
            logger.error("Failed to get unread count from API: %s", e)
            return self.get_unread_count()

    @log_performance()
    async def load(self) -> list[NotificationRecord]:
        """Replace the cache with the backend's list.

        Skips the network entirely when no one is logged in. On any
        backend or parse failure the cache is left untouched and the
        previous list is returned.
        """
        if not await self._storage.has_auth_token():
            logger.info("User not authenticated, skipping notification load")
            return self.get_all()

        try:
            body = await self._api.get_notifications()
            records = self._parse_records(self._extract_items(body))
        except (BackendError, ValueError, TypeError, KeyError, OverflowError) as e:
            logger.error("Failed to load notifications, serving cached list: %s", e)
            return self.get_all()

        self._records = records
        logger.info("Loaded %d notifications (%d unread)", len(records), self.get_unread_count())
        self._notify()
        return self.get_all()

    @staticmethod
    def _extract_items(body: Any) -> list:
        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            for key in ("notifications", "data"):
                items = body.get(key)
                if isinstance(items, list):
                    return items
        logger.warning("Unexpected notifications response format: %r", body)
        return []

    @staticmethod
    def _parse_records(items: list) -> list[NotificationRecord]:
        records: list[NotificationRecord] = []
        seen: set[int] = set()
        for item in items:
            record = NotificationRecord.from_api(item)
            if record.id in seen:
                logger.warning("Dropping duplicate notification id %s", record.id)
                continue
            seen.add(record.id)
            records.append(record)
        return records

    # --- Writes ---

    async def mark_as_read(self, notification_id: int) -> None:
        """Mark one notification read on the backend, then locally.

        Locally synthesized records are unknown to the backend and are
        marked read without a round-trip.

        Raises:
            BackendError: the backend call failed; nothing changed locally.
        """
        existing = self.get(notification_id)
        if existing is None or not existing.local:
            try:
                await self._api.mark_as_read(notification_id)
            except BackendError as e:
                logger.error("Failed to mark notification %s as read: %s", notification_id, e)
                raise

        now = self._clock()
        self._records = [
            replace(record, read_at=now) if record.id == notification_id else record
            for record in self._records
        ]
        self._notify()

    async def mark_all_as_read(self) -> None:
        """Mark every notification read; all records change or none do.

        Raises:
            BackendError: the backend call failed; nothing changed locally.
        """
        try:
            await self._api.mark_all_as_read()
        except BackendError as e:
            logger.error("Failed to mark all notifications as read: %s", e)
            raise

        now = self._clock()
        self._records = [replace(record, read_at=now) for record in self._records]
        self._notify()

    async def delete_notification(self, notification_id: int) -> None:
        """Delete on the backend, then drop the local record.

        Raises:
            BackendError: the backend call failed; the record stays.
        """
        existing = self.get(notification_id)
        if existing is None or not existing.local:
            try:
                await self._api.delete_notification(notification_id)
            except BackendError as e:
                logger.error("Failed to delete notification %s: %s", notification_id, e)
                raise

        self._records = [record for record in self._records if record.id != notification_id]
        self._notify()

    def clear_local_cache(self) -> None:
        """Empty the cache on logout. Never touches the backend."""
        self._records = []
        self._notify()

    # --- Local notifications ---

    async def create_local_notification(
        self,
        kind: LocalNotificationKind,
        payload: Union[dict[str, Any], TripReadyToday],
    ) -> Optional[NotificationRecord]:
        """Synthesize a notification on the device.

        At most one record per (ticket, calendar day): a repeat call the
        same day is a no-op that returns None. Otherwise the record is
        prepended, subscribers are notified, a device notification is
        fired immediately, and the dedup marker is persisted.
        """
        builder = LOCAL_NOTIFICATION_BUILDERS.get(kind)
        if builder is None:
            raise ValueError(f"Unsupported local notification kind: {kind!r}")
        event = payload if isinstance(payload, builder) else builder.from_payload(payload)

        now = self._clock()
        marker = event.marker_key(now.astimezone().date())
        if marker in self._claimed_markers:
            logger.info("Already notified for ticket %s today, skipping", event.label)
            return None
        already_notified = await self._storage.get_item(marker)
        if already_notified or marker in self._claimed_markers:
            self._claimed_markers.add(marker)
            logger.info("Already notified for ticket %s today, skipping", event.label)
            return None
        self._claimed_markers.add(marker)

        title = self.config.trip_ready_title
        record = event.to_record(self._next_local_id(now), now, title)
        self._records = [record, *self._records]
        logger.info(
            "Created local notification for ticket %s", event.label,
            extra={"notification_id": record.id, "ticket_id": event.ticket_id},
        )
        self._notify()

        if self._push is not None:
            await self._push.schedule_local_notification(
                title,
                event.message(),
                event.push_data(),
                delay_seconds=0,
                channel_id=self.config.trip_channel_id,
            )
        await self._storage.set_item(marker, "true")
        return record

    async def create_trip_ready_notification(
        self,
        ticket_id: int,
        ticket_number: Optional[str] = None,
        destination: Optional[str] = None,
    ) -> Optional[NotificationRecord]:
        return await self.create_local_notification(
            LocalNotificationKind.TRIP_READY_TODAY,
            TripReadyToday(ticket_id=ticket_id, ticket_number=ticket_number, destination=destination),
        )

    def _next_local_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        taken = {record.id for record in self._records}
        while candidate in taken:
            candidate += 1
        return candidate

    # --- Presentation ---

    @staticmethod
    def get_notification_icon(notification_type: NotificationType) -> str:
        return TYPE_DISPLAY_CONFIGS.get(notification_type, DEFAULT_DISPLAY)["icon"]

    @staticmethod
    def get_notification_color(notification_type: NotificationType) -> str:
        return TYPE_DISPLAY_CONFIGS.get(notification_type, DEFAULT_DISPLAY)["color"]
