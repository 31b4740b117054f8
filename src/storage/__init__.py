"""Durable key-value storage for the notification client.

Holds the auth token, cached user profile, the last registered push
token, and per-ticket per-day deduplication markers.
"""

from src.storage.base import KeyValueStore
from src.storage.memory import MemoryStore
from src.storage.json_file import JsonFileStore
from src.storage import keys

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "keys",
]
