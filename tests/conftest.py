"""Pytest configuration and shared fixtures."""

import json
import re
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.api_client import ApiConfig, TripManagerClient  # noqa: E402
from src.device import PermissionStatus, SimulatedPlatform  # noqa: E402
from src.notifications import NotificationCache, PushChannelCoordinator  # noqa: E402
from src.storage import MemoryStore, keys  # noqa: E402

BASE_URL = "https://tripmanager.test/api"
PUSH_TOKEN = "ExponentPushToken[test-device]"


class FakeBackend:
    """In-memory TripManager backend served through httpx.MockTransport."""

    def __init__(self):
        self.notifications: list[dict] = []
        self.tickets: list[dict] = []
        self.push_tokens: list[str] = []
        self.requests: list[tuple[str, str]] = []
        self.unread_count_override = None
        self._failures: dict[str, int] = {}
        self._unreachable: set[str] = set()
        self._raw_bodies: dict[str, bytes] = {}

    # --- Test controls ---

    def add(self, notification_id, title="Notice", read=False, type="general", data=None,
            created_at="2026-03-10T08:00:00Z"):
        self.notifications.append({
            "id": notification_id,
            "user_id": 7,
            "type": type,
            "title": title,
            "message": f"{title} message",
            "data": data or {},
            "read_at": "2026-03-10T09:00:00Z" if read else None,
            "created_at": created_at,
            "updated_at": created_at,
        })

    def add_ticket(self, ticket_id, start_date, ticket_number=None, destinations=None):
        self.tickets.append({
            "id": ticket_id,
            "ticket_number": ticket_number or f"TT-{ticket_id:04d}",
            "status": "ready_for_trip",
            "travel_request": {
                "start_date": start_date,
                "destinations": destinations or ["Iloilo City"],
            },
        })

    def fail(self, route: str, status: int = 500) -> None:
        """Answer requests whose 'METHOD /path' starts with ``route`` with an error."""
        self._failures[route] = status

    def go_offline(self, route: str = "") -> None:
        self._unreachable.add(route)

    def respond_raw(self, route: str, body: bytes) -> None:
        """Answer ``route`` with a verbatim JSON body."""
        self._raw_bodies[route] = body

    def recover(self) -> None:
        self._failures.clear()
        self._unreachable.clear()
        self._raw_bodies.clear()

    def calls(self, route: str) -> int:
        return sum(1 for method, path in self.requests if f"{method} {path}".startswith(route))

    # --- Transport ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        route = f"{request.method} {path}"
        self.requests.append((request.method, path))

        for prefix in self._unreachable:
            if route.startswith(prefix):
                raise httpx.ConnectError("connection refused", request=request)
        for prefix, status in self._failures.items():
            if route.startswith(prefix):
                return httpx.Response(status, json={"message": f"{route} failed"})
        if route in self._raw_bodies:
            return httpx.Response(
                200, content=self._raw_bodies[route], headers={"Content-Type": "application/json"},
            )

        if request.headers.get("Authorization") != "Bearer test-token":
            return httpx.Response(401, json={"message": "Unauthenticated."})

        if route == "GET /notifications":
            return httpx.Response(200, json={"success": True, "data": self.notifications})
        if route == "GET /notifications/unread-count":
            count = self.unread_count_override
            if count is None:
                count = sum(1 for n in self.notifications if n["read_at"] is None)
            return httpx.Response(200, json={"data": {"count": count}})
        if route == "POST /notifications/mark-all-read":
            for n in self.notifications:
                n["read_at"] = n["read_at"] or "2026-03-10T10:00:00Z"
            return httpx.Response(200, json={"success": True})

        match = re.fullmatch(r"POST /notifications/(\d+)/read", route)
        if match:
            for n in self.notifications:
                if n["id"] == int(match.group(1)):
                    n["read_at"] = "2026-03-10T10:00:00Z"
                    return httpx.Response(200, json={"success": True})
            return httpx.Response(404, json={"message": "Notification not found"})

        match = re.fullmatch(r"DELETE /notifications/(\d+)", route)
        if match:
            self.notifications = [n for n in self.notifications if n["id"] != int(match.group(1))]
            return httpx.Response(200, json={"success": True})

        if route == "POST /push-tokens":
            self.push_tokens.append(json.loads(request.content)["token"])
            return httpx.Response(201, json={"success": True})
        if route.startswith("DELETE /push-tokens/"):
            return httpx.Response(200, json={"success": True})

        if route == "GET /driver/trip-tickets":
            return httpx.Response(200, json={"trip_tickets": {"data": self.tickets}})

        return httpx.Response(404, json={"message": "Not found"})


class FakeClock:
    """Settable clock passed to components instead of datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def store():
    return MemoryStore({keys.AUTH_TOKEN: "test-token"})


@pytest.fixture
def client(backend, store):
    return TripManagerClient(
        store,
        ApiConfig(base_url=BASE_URL),
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def platform():
    return SimulatedPlatform(permission=PermissionStatus.GRANTED, token=PUSH_TOKEN)


@pytest.fixture
def push(platform, client, store, clock):
    return PushChannelCoordinator(platform, client, store, clock=clock)


@pytest.fixture
def cache(client, store, push, clock):
    return NotificationCache(client, store, push, clock=clock)
