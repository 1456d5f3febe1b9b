# 📄 File: plantscan/shared/infrastructure/storage/base.py
#
# 🧭 Purpose (Layman Explanation):
# Defines the single "save / read / delete" contract that every place we can keep
# data on the device (memory, files, Redis) must follow, so the rest of the app
# never cares where the data actually lives.
#
# 🧪 Purpose (Technical Summary):
# Abstract key-value persistence adapter. Values are JSON-serialized on write and
# parsed on read; missing, unreadable or corrupt entries read as None. Backends
# only implement raw string primitives.
#
# 🔗 Dependencies:
# - json for value encoding
# - abc for the backend contract
# - plantscan.shared.core.exceptions
#
# 🔄 Connected Modules / Calls From:
# - CacheManager (timestamped cache store)
# - DailyRateLimiter
# - Favorites, scan history and user data repositories

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from plantscan.shared.core.exceptions import SerializationError, StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Uniform get/set/remove/clear interface over durable per-device storage.

    Implementation Notes:
    - Writes to different keys are independent; no multi-key transactions
    - Concurrent writes to the same key are last-write-wins
    - Read failures are soft (None); write failures raise StorageError
    """

    backend_name: str = "abstract"

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        """Return the raw stored text for key, or None."""
        pass

    @abstractmethod
    async def _write(self, key: str, raw: str) -> None:
        """Store raw text under key, replacing any previous value."""
        pass

    @abstractmethod
    async def _delete(self, keys: List[str]) -> None:
        """Delete the given keys; missing keys are ignored."""
        pass

    @abstractmethod
    async def _list_keys(self) -> List[str]:
        """List keys owned by this store."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def set(self, key: str, value: Any) -> None:
        """
        JSON-serialize value and write it under key.

        Raises:
            SerializationError: If value cannot be encoded as JSON
            StorageError: If the backend write fails
        """
        raw = self.serialize(key, value)
        try:
            await self._write(key, raw)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Storage set failed for {key}: {e}")
            raise StorageError(
                message=f"Failed to write {key}: {e}",
                operation="set",
                key=key,
                backend=self.backend_name
            ) from e

    async def get(self, key: str) -> Optional[Any]:
        """Read and parse the value under key; None when missing or corrupt."""
        raw = await self.get_raw(key)
        if raw is None:
            return None
        return self.deserialize(key, raw)

    async def get_raw(self, key: str) -> Optional[str]:
        """Read the stored JSON text under key; None when missing or unreadable."""
        try:
            return await self._read(key)
        except Exception as e:
            logger.error(f"Storage get failed for {key}: {e}")
            return None

    async def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is a no-op."""
        await self.multi_remove([key])

    async def multi_remove(self, keys: Iterable[str]) -> None:
        """Delete several keys."""
        key_list = list(keys)
        if not key_list:
            return
        try:
            await self._delete(key_list)
        except Exception as e:
            logger.error(f"Storage remove failed for {key_list}: {e}")
            raise StorageError(
                message=f"Failed to remove keys: {e}",
                operation="remove",
                key=",".join(key_list),
                backend=self.backend_name
            ) from e

    async def keys(self) -> List[str]:
        """List every key currently held by this store."""
        try:
            return await self._list_keys()
        except Exception as e:
            logger.error(f"Storage key listing failed: {e}")
            raise StorageError(
                message=f"Failed to list keys: {e}",
                operation="keys",
                backend=self.backend_name
            ) from e

    async def clear(self) -> None:
        """Remove every key owned by this store."""
        await self.multi_remove(await self.keys())

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @staticmethod
    def serialize(key: str, value: Any) -> str:
        """Encode value as JSON text."""
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(key, str(e)) from e

    @staticmethod
    def deserialize(key: str, raw: str) -> Optional[Any]:
        """Decode JSON text; corrupt text is treated as absent."""
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Ignoring corrupt value stored under {key}: {e}")
            return None
