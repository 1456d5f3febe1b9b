# 📄 File: plantscan/shared/infrastructure/storage/redis_store.py
#
# 🧭 Purpose (Layman Explanation):
# Lets the app keep its local data in a Redis server instead of files, using a
# name prefix so our keys never mix with anyone else's.
#
# 🧪 Purpose (Technical Summary):
# redis.asyncio backed KeyValueStore. Every key is namespaced; key listing and
# clear() use SCAN over the namespace only, never FLUSHDB.
#
# 🔗 Dependencies:
# - redis Python package (asyncio client)
#
# 🔄 Connected Modules / Calls From:
# - plantscan.shared.config.storage (STORAGE_BACKEND=redis)

import logging
from typing import List, Optional, Union

from redis.asyncio import Redis

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """Key-value store over a Redis client, scoped by a namespace prefix."""

    backend_name = "redis"

    def __init__(self, client: Redis, namespace: str = "plantscan"):
        self.redis = client
        self.namespace = namespace

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @staticmethod
    def _decode(value: Union[str, bytes, None]) -> Optional[str]:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def _read(self, key: str) -> Optional[str]:
        return self._decode(await self.redis.get(self._full_key(key)))

    async def _write(self, key: str, raw: str) -> None:
        await self.redis.set(self._full_key(key), raw)

    async def _delete(self, keys: List[str]) -> None:
        await self.redis.delete(*[self._full_key(key) for key in keys])

    async def _list_keys(self) -> List[str]:
        prefix = f"{self.namespace}:"
        keys = []
        async for full_key in self.redis.scan_iter(match=f"{prefix}*"):
            keys.append(self._decode(full_key)[len(prefix):])
        return keys

    async def close(self) -> None:
        await self.redis.aclose()
