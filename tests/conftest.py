"""
Shared fixtures: injectable clocks, stores for each backend, a store
that fails on demand and one that yields to the event loop on every access.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import fakeredis
import fakeredis.aioredis
import pytest

from plantscan.shared.config.settings import Settings
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.infrastructure.cache import CacheManager
from plantscan.shared.infrastructure.storage import (
    FileKeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
)

T0 = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def timestamp(self) -> float:
        return self.current.timestamp()

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class FailingStore(MemoryKeyValueStore):
    """Memory store whose backend primitives raise while failing is set."""

    def __init__(self):
        super().__init__()
        self.failing = False

    def _check(self):
        if self.failing:
            raise OSError("disk unavailable")

    async def _read(self, key):
        self._check()
        return await super()._read(key)

    async def _write(self, key, raw):
        self._check()
        await super()._write(key, raw)

    async def _delete(self, keys):
        self._check()
        await super()._delete(keys)

    async def _list_keys(self):
        self._check()
        return await super()._list_keys()


class YieldingStore(MemoryKeyValueStore):
    """Memory store that hands control back to the event loop on every primitive."""

    async def _read(self, key):
        await asyncio.sleep(0)
        return await super()._read(key)

    async def _write(self, key, raw):
        await asyncio.sleep(0)
        await super()._write(key, raw)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        STORAGE_BACKEND="memory",
        STORAGE_PATH=str(tmp_path / "storage"),
    )


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def locks():
    return KeyedLocks()


@pytest.fixture
def fake_redis():
    return fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture(params=["memory", "file", "redis"])
def any_store(request, tmp_path, fake_redis):
    if request.param == "memory":
        return MemoryKeyValueStore()
    if request.param == "file":
        return FileKeyValueStore(tmp_path / "kv")
    return RedisKeyValueStore(fake_redis, namespace="test")


@pytest.fixture
def cache(store, clock):
    return CacheManager(store, clock=clock.timestamp)


@pytest.fixture
def yielding_store():
    return YieldingStore()
