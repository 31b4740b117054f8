"""Key-value storage base class.

Subclasses implement the raw primitives; the public methods wrap them
so that a storage failure is logged and reported as ``None``/``False``
instead of propagating into notification code.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from src.storage import keys

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async string key-value store."""

    # --- Primitives ---

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _write(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def _delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def _keys(self) -> list[str]:
        ...

    @abstractmethod
    async def _clear(self) -> None:
        ...

    # --- String Operations ---

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return await self._read(key)
        except Exception as e:
            logger.error("Storage get failed for %s: %s", key, e)
            return None

    async def set_item(self, key: str, value: str) -> bool:
        try:
            await self._write(key, value)
            return True
        except Exception as e:
            logger.error("Storage set failed for %s: %s", key, e)
            return False

    async def remove_item(self, key: str) -> bool:
        try:
            await self._delete(key)
            return True
        except Exception as e:
            logger.error("Storage remove failed for %s: %s", key, e)
            return False

    # --- JSON Operations ---

    async def get_object(self, key: str) -> Optional[Any]:
        """Get and decode a JSON value; undecodable values read as missing."""
        value = await self.get_item(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except ValueError as e:
            logger.error("Storage value for %s is not valid JSON: %s", key, e)
            return None

    async def set_object(self, key: str, data: Any) -> bool:
        try:
            value = json.dumps(data, default=str)
        except (TypeError, ValueError) as e:
            logger.error("Storage value for %s is not serializable: %s", key, e)
            return False
        return await self.set_item(key, value)

    # --- Bulk Operations ---

    async def get_all_keys(self) -> list[str]:
        try:
            return await self._keys()
        except Exception as e:
            logger.error("Storage key listing failed: %s", e)
            return []

    async def clear_all(self) -> bool:
        try:
            await self._clear()
            return True
        except Exception as e:
            logger.error("Storage clear failed: %s", e)
            return False

    async def clear_auth_data(self) -> bool:
        """Remove the auth token and cached user profile."""
        results = [await self.remove_item(key) for key in keys.AUTH_KEYS]
        return all(results)

    async def has_auth_token(self) -> bool:
        return bool(await self.get_item(keys.AUTH_TOKEN))
