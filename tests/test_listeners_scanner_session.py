"""Tests for the trip-ready scanner, listener pipeline and session lifecycle."""

import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.device import (
    NotificationContent,
    NotificationTap,
    ReceivedNotification,
    SimulatedPlatform,
)
from src.notifications import (
    NotificationConfig,
    NotificationListenerPipeline,
    NotificationSession,
    PushState,
    RecordingRouter,
    TripReadyScanner,
)
from src.storage import keys


@pytest.fixture
def scanner(client, cache, clock):
    return TripReadyScanner(client, cache, clock=clock)


@pytest.fixture
def router():
    return RecordingRouter()


@pytest.fixture
def pipeline(cache, push, router, scanner):
    return NotificationListenerPipeline(cache, push, router, scanner)


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process timezone for one test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset unavailable on this platform")

    def switch(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield switch
    monkeypatch.undo()
    time.tzset()


# ═══════════════════════════════════════════════════════════════════════
# Test: Trip-Ready Scanner
# ═══════════════════════════════════════════════════════════════════════


class TestTripReadyScanner:
    """Tests for detecting trips that start today."""

    @pytest.mark.asyncio
    async def test_creates_for_today_only(self, scanner, cache, backend):
        backend.add_ticket(12, "2026-03-10", ticket_number="TT-0012", destinations=["Iloilo", "Capiz"])
        backend.add_ticket(13, "2026-03-11")
        backend.add_ticket(14, "2026-03-09")

        assert await scanner.scan() == 1

        records = cache.get_all()
        assert len(records) == 1
        assert records[0].data["trip_ticket_id"] == 12
        assert "Iloilo, Capiz" in records[0].message

    @pytest.mark.asyncio
    async def test_requests_driver_ticket_endpoint(self, scanner, backend):
        await scanner.scan()
        method, path = backend.requests[-1]
        assert (method, path) == ("GET", "/driver/trip-tickets")

    @pytest.mark.asyncio
    async def test_second_scan_same_day_creates_nothing(self, scanner, cache, backend):
        backend.add_ticket(12, "2026-03-10")
        assert await scanner.scan() == 1
        assert await scanner.scan() == 0
        assert len(cache.get_all()) == 1

    @pytest.mark.asyncio
    async def test_backend_failure(self, scanner, cache, backend):
        backend.add_ticket(12, "2026-03-10")
        backend.fail("GET /driver/trip-tickets")
        assert await scanner.scan() == 0
        assert cache.get_all() == []

    @pytest.mark.asyncio
    async def test_ticket_without_travel_request(self, scanner, backend):
        backend.tickets.append({"id": 20, "ticket_number": "TT-0020"})
        assert await scanner.scan() == 0

    @pytest.mark.asyncio
    async def test_camel_case_relation(self, scanner, backend):
        backend.tickets.append({"id": 21, "travelRequest": {"start_date": "2026-03-10"}})
        assert await scanner.scan() == 1

    @pytest.mark.asyncio
    async def test_naive_start_date_is_local_day(self, scanner, backend, clock, local_tz):
        local_tz("America/New_York")
        clock.now = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)
        backend.add_ticket(30, "2026-03-10 00:00:00")
        assert await scanner.scan() == 1

    @pytest.mark.asyncio
    async def test_aware_start_date_converted_to_local_day(self, scanner, cache, backend, clock, local_tz):
        local_tz("America/New_York")
        clock.now = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)
        backend.add_ticket(31, "2026-03-11T02:00:00Z")
        backend.add_ticket(32, "2026-03-10T03:00:00Z")
        assert await scanner.scan() == 1
        assert [r.data["trip_ticket_id"] for r in cache.get_all()] == [31]

    @pytest.mark.asyncio
    async def test_malformed_tickets_are_skipped(self, scanner, cache, backend):
        backend.tickets.append({"id": 5, "travel_request": "pending"})
        backend.tickets.append({"id": "TT-7", "travel_request": {"start_date": "2026-03-10"}})
        backend.tickets.append({"id": 8, "travel_request": {"start_date": 20260310}})
        backend.tickets.append("not-a-ticket")
        backend.add_ticket(12, "2026-03-10")

        assert await scanner.scan() == 1
        assert [r.data["trip_ticket_id"] for r in cache.get_all()] == [12]


# ═══════════════════════════════════════════════════════════════════════
# Test: Listener Pipeline
# ═══════════════════════════════════════════════════════════════════════


class TestListenerPipeline:
    """Tests for foreground delivery and taps."""

    @pytest.mark.asyncio
    async def test_received_refreshes_cache_and_badge(self, pipeline, platform, cache, backend):
        backend.add(1)
        backend.add(2)
        backend.add(3, read=True)
        pipeline.attach()

        await platform.deliver(content=NotificationContent(title="New", body="Hi", data={"notification_id": 3}))

        assert len(cache.get_all()) == 3
        assert platform.badge_count == 2

    @pytest.mark.asyncio
    async def test_tap_marks_read_and_routes(self, pipeline, platform, cache, backend, router):
        backend.add(5, data={"trip_ticket_id": 12})
        pipeline.attach()

        await platform.tap(content=NotificationContent(
            title="Assigned", body="", data={"notification_id": 5, "trip_ticket_id": 12},
        ))

        assert backend.calls("POST /notifications/5/read") == 1
        assert cache.get(5).read is True
        assert router.history == ["/trip-ticket-details?id=12"]

    @pytest.mark.asyncio
    async def test_repeated_tap_handled_once(self, pipeline, platform, router):
        pipeline.attach()
        content = NotificationContent(title="T", body="", data={"travel_request_id": 3})

        await platform.tap(identifier="push-1", content=content)
        await platform.tap(identifier="push-1", content=content)

        assert router.history == ["/(tabs)/notifications"]

    @pytest.mark.asyncio
    async def test_tap_navigates_even_if_mark_fails(self, pipeline, platform, backend, router):
        backend.add(5)
        backend.fail("POST /notifications/5/read")
        pipeline.attach()

        await platform.tap(content=NotificationContent(title="T", body="", data={"notification_id": 5}))

        assert router.history == ["/(tabs)/notifications"]

    @pytest.mark.asyncio
    async def test_daily_check_tap_scans(self, pipeline, platform, cache, backend, router):
        backend.add_ticket(12, "2026-03-10")
        pipeline.attach()

        await platform.tap(content=NotificationContent(title="Morning", body="", data={"type": "daily_trip_check"}))

        assert router.current == "/(tabs)/tickets"
        assert any(r.local for r in cache.get_all())

    @pytest.mark.asyncio
    async def test_tap_on_trip_ready_local_notification(self, pipeline, platform, cache, router):
        pipeline.attach()
        await cache.create_trip_ready_notification(ticket_id=12)
        identifier = platform.presented[-1].identifier

        await platform.tap(identifier=identifier)

        assert router.current == "/trip-ticket-details?id=12"

    def test_detach(self, pipeline, platform):
        pipeline.attach()
        assert platform.listener_count == 2
        pipeline.detach()
        assert platform.listener_count == 0


# ═══════════════════════════════════════════════════════════════════════
# Test: Session
# ═══════════════════════════════════════════════════════════════════════


class TestNotificationSession:
    """Tests for session start and logout teardown."""

    @pytest.mark.asyncio
    async def test_start(self, client, store, platform, router, backend, clock):
        backend.add(1)
        backend.add_ticket(12, "2026-03-10")
        session = NotificationSession(client, store, platform, router, clock=clock)

        token = await session.start(user_id="7")

        assert token == "ExponentPushToken[test-device]"
        assert session.active is True
        assert session.push.state == PushState.REGISTERED
        assert platform.listener_count == 2

        scheduled = await platform.get_scheduled_notifications()
        assert len(scheduled) == 1
        assert scheduled[0].content.data["type"] == "daily_trip_check"
        assert scheduled[0].trigger.hour == 6

        records = session.cache.get_all()
        assert len(records) == 2
        assert records[0].local is True

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_daily_check(self, client, store, platform, router, clock):
        session = NotificationSession(client, store, platform, router, clock=clock)
        await session.start()
        await session.start()
        assert len(await platform.get_scheduled_notifications()) == 1
        assert platform.listener_count == 2

    @pytest.mark.asyncio
    async def test_start_without_push(self, client, store, router, clock):
        emulator = SimulatedPlatform(physical_device=False)
        session = NotificationSession(client, store, emulator, router, clock=clock)

        assert await session.start() is None
        assert len(await emulator.get_scheduled_notifications()) == 1

    @pytest.mark.asyncio
    async def test_daily_check_disabled(self, client, store, platform, router, clock):
        config = NotificationConfig(daily_check_enabled=False)
        session = NotificationSession(client, store, platform, router, config, clock)
        await session.start()
        assert await platform.get_scheduled_notifications() == []

    @pytest.mark.asyncio
    async def test_notifications_viewed_clears_badge(self, client, store, platform, router, clock):
        session = NotificationSession(client, store, platform, router, clock=clock)
        platform.badge_count = 3
        await session.on_notifications_viewed()
        assert platform.badge_count == 0

    @pytest.mark.asyncio
    async def test_end(self, client, store, platform, router, backend, clock):
        backend.add(1)
        session = NotificationSession(client, store, platform, router, clock=clock)
        await session.start(user_id="7")
        platform.badge_count = 4

        await session.end()

        assert session.active is False
        assert session.cache.get_all() == []
        assert session.push.get_push_token() is None
        assert platform.badge_count == 0
        assert platform.listener_count == 0
        assert await store.get_item(keys.PUSH_TOKEN) is None
        assert await store.has_auth_token() is False
        assert backend.calls("DELETE /push-tokens/") == 1


class TestPipelineCollaborators:
    """Tests for the pipeline against mocked collaborators."""

    @pytest.mark.asyncio
    async def test_daily_check_delegates_to_scanner(self, cache, push):
        scanner = AsyncMock(spec=TripReadyScanner)
        router = MagicMock()
        pipeline = NotificationListenerPipeline(cache, push, router, scanner)

        tap = NotificationTap(notification=ReceivedNotification(
            identifier="daily-1",
            content=NotificationContent(title="Morning", body="", data={"type": "daily_trip_check"}),
        ))
        await pipeline.on_tap(tap)

        scanner.scan.assert_awaited_once()
        router.push.assert_called_once_with("/(tabs)/tickets")

    @pytest.mark.asyncio
    async def test_without_scanner(self, cache, push):
        router = MagicMock()
        pipeline = NotificationListenerPipeline(cache, push, router)

        tap = NotificationTap(notification=ReceivedNotification(
            identifier="daily-2",
            content=NotificationContent(title="Morning", body="", data={"type": "daily_trip_check"}),
        ))
        await pipeline.on_tap(tap)

        router.push.assert_called_once_with("/(tabs)/tickets")
