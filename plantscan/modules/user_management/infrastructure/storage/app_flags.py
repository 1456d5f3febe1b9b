"""
Device-wide boolean flags (first launch, launched before, signed in).

Flags are stored as the strings "true" / "false" so values written by older
builds keep reading correctly.
"""

import logging

from plantscan.shared.config.cache import StorageKey
from plantscan.shared.infrastructure.storage import KeyValueStore

logger = logging.getLogger(__name__)


class AppFlags:
    """Read and write launch and session flags."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def _get_flag(self, key: StorageKey, default: bool = False) -> bool:
        value = await self.store.get(key.value)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).lower() == "true"

    async def _set_flag(self, key: StorageKey, value: bool):
        await self.store.set(key.value, "true" if value else "false")
        logger.debug(f"Flag {key.value} set to {value}")

    async def has_launched(self) -> bool:
        return await self._get_flag(StorageKey.HAS_LAUNCHED)

    async def mark_as_launched(self):
        await self._set_flag(StorageKey.HAS_LAUNCHED, True)

    async def is_first_launch(self) -> bool:
        # The first-launch flag is written as "false" once onboarding is done
        return await self._get_flag(StorageKey.APP_FIRST_LAUNCH, default=True)

    async def mark_first_launch_done(self):
        await self._set_flag(StorageKey.APP_FIRST_LAUNCH, False)

    async def is_logged_in(self) -> bool:
        return await self._get_flag(StorageKey.USER_LOGGED_IN)

    async def set_logged_in(self, value: bool):
        await self._set_flag(StorageKey.USER_LOGGED_IN, value)
