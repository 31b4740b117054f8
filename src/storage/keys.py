"""Storage key naming conventions."""

from datetime import date

# Session
AUTH_TOKEN = "auth_token"
USER_DATA = "user_data"

# Push registration (JSON: token, platform, registered_at)
PUSH_TOKEN = "push_token"

# Local notification dedup marker, one per ticket per calendar day
TRIP_READY_NOTIFIED = "trip_ready_notified_{ticket_id}_{day}"

AUTH_KEYS = (AUTH_TOKEN, USER_DATA)


def trip_ready_marker(ticket_id: int, day: date) -> str:
    return TRIP_READY_NOTIFIED.format(ticket_id=ticket_id, day=day.isoformat())
