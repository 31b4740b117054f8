"""Tests for the key-value stores."""

import json
from datetime import date

import pytest

from src.storage import JsonFileStore, KeyValueStore, MemoryStore, keys


class _BrokenStore(KeyValueStore):
    async def _read(self, key):
        raise OSError("disk gone")

    async def _write(self, key, value):
        raise OSError("disk gone")

    async def _delete(self, key):
        raise OSError("disk gone")

    async def _keys(self):
        raise OSError("disk gone")

    async def _clear(self):
        raise OSError("disk gone")


class TestKeys:
    """Tests for storage key naming."""

    def test_trip_ready_marker(self):
        assert keys.trip_ready_marker(12, date(2026, 3, 10)) == "trip_ready_notified_12_2026-03-10"

    def test_auth_keys(self):
        assert keys.AUTH_TOKEN in keys.AUTH_KEYS
        assert keys.PUSH_TOKEN not in keys.AUTH_KEYS


class TestMemoryStore:
    """Tests for the in-memory store."""

    @pytest.mark.asyncio
    async def test_string_round_trip(self):
        store = MemoryStore()
        assert await store.set_item("a", "1") is True
        assert await store.get_item("a") == "1"
        assert "a" in store
        assert await store.remove_item("a") is True
        assert await store.get_item("a") is None

    @pytest.mark.asyncio
    async def test_object_values(self):
        store = MemoryStore()
        await store.set_object("user", {"id": 7, "name": "Driver"})
        assert await store.get_object("user") == {"id": 7, "name": "Driver"}

    @pytest.mark.asyncio
    async def test_invalid_json_reads_as_missing(self):
        store = MemoryStore({"user": "{not json"})
        assert await store.get_object("user") is None

    @pytest.mark.asyncio
    async def test_remove_missing_key(self):
        assert await MemoryStore().remove_item("nope") is True

    @pytest.mark.asyncio
    async def test_clear_auth_data_keeps_markers(self):
        marker = keys.trip_ready_marker(12, date(2026, 3, 10))
        store = MemoryStore({keys.AUTH_TOKEN: "t", keys.USER_DATA: "{}", marker: "true"})

        assert await store.has_auth_token() is True
        assert await store.clear_auth_data() is True

        assert await store.has_auth_token() is False
        assert await store.get_all_keys() == [marker]

    @pytest.mark.asyncio
    async def test_clear_all(self):
        store = MemoryStore({"a": "1", "b": "2"})
        assert await store.clear_all() is True
        assert len(store) == 0


class TestJsonFileStore:
    """Tests for the file-backed store."""

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        await JsonFileStore(path).set_item(keys.AUTH_TOKEN, "abc")

        reopened = JsonFileStore(path)
        assert await reopened.get_item(keys.AUTH_TOKEN) == "abc"
        assert json.loads(path.read_text()) == {keys.AUTH_TOKEN: "abc"}

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        await JsonFileStore(path).set_item("a", "1")
        assert path.exists()
        assert not path.with_suffix(".json.tmp").exists()

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "absent.json")
        assert await store.get_item("a") is None
        assert await store.get_all_keys() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_fails_soft(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]")
        store = JsonFileStore(path)
        assert await store.get_item("a") is None
        assert await store.set_item("a", "1") is False

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        await store.set_item("a", "1")
        await store.set_item("b", "2")
        await store.remove_item("a")
        assert await store.get_all_keys() == ["b"]
        await store.clear_all()
        assert await store.get_all_keys() == []


class TestFailingStore:
    """Storage errors are reported, never raised."""

    @pytest.mark.asyncio
    async def test_failures_are_soft(self):
        store = _BrokenStore()
        assert await store.get_item("a") is None
        assert await store.set_item("a", "1") is False
        assert await store.remove_item("a") is False
        assert await store.get_all_keys() == []
        assert await store.clear_all() is False
        assert await store.has_auth_token() is False

    @pytest.mark.asyncio
    async def test_unserializable_object(self):
        circular = {}
        circular["self"] = circular
        store = MemoryStore()
        assert await store.set_object("bad", circular) is False
        assert await store.get_item("bad") is None
