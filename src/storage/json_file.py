"""File-backed key-value store.

The whole store is one JSON object on disk. Every write replaces the
file through a temporary sibling so a crash never leaves a truncated
store behind.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from src.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Durable store persisted to a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is None:
            if self.path.exists():
                with self.path.open("r", encoding="utf-8") as fh:
                    loaded = json.load(fh)
                if not isinstance(loaded, dict):
                    raise ValueError(f"{self.path} does not contain a JSON object")
                self._data = {str(k): str(v) for k, v in loaded.items()}
            else:
                self._data = {}
        return self._data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(self._data or {}, fh, indent=2, sort_keys=True)
        os.replace(tmp, self.path)

    async def _read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def _write(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    async def _delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    async def _keys(self) -> list[str]:
        return list(self._load())

    async def _clear(self) -> None:
        self._data = {}
        self._flush()
        logger.info("Cleared storage file %s", self.path)
