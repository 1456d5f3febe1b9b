"""
Per-key asyncio locks for read-modify-write cycles on shared documents.

Coroutines in one process that mutate the same storage key run one after
another instead of interleaving between their read and their write. Writers
in other processes are not covered and remain last-write-wins.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyedLocks:
    """Registry of one asyncio.Lock per storage key."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        async with self.get(key):
            yield

    def __len__(self) -> int:
        return len(self._locks)
