# 📄 File: plantscan/modules/scan_history/infrastructure/storage/scan_history_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Saves past scans on the device, putting the newest on top and forgetting the oldest once the list is full
# 🧪 Purpose (Technical Summary):
# KeyValueStore-backed ScanHistoryRepository storing a JSON array, capped on append
# 🔗 Dependencies:
# pydantic, plantscan.shared.infrastructure.storage, domain models
# 🔄 Connected Modules / Calls From:
# ScanService, plantscan.main (application container)

from typing import List, Optional

from pydantic import ValidationError as ModelValidationError

from plantscan.shared.config.cache import StorageKey, UserKeyPrefix
from plantscan.shared.config.settings import Settings, get_settings
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.infrastructure.storage.document_repository import JsonDocumentRepository
from plantscan.shared.utils.logging import get_logger

from ...domain.models.scan_entry import ScanEntry
from ...domain.repositories.scan_history_repository import ScanHistoryRepository

logger = get_logger(__name__)


def scan_history_key(owner_id: Optional[str] = None) -> str:
    """Device history key, or the per-user key when owner_id is given."""
    if owner_id:
        return UserKeyPrefix.SCAN_HISTORY.for_user(owner_id)
    return StorageKey.SCAN_HISTORY.value


class StorageScanHistoryRepository(JsonDocumentRepository, ScanHistoryRepository):
    """Scan history stored as a newest-first JSON array under one key."""

    def __init__(
        self,
        store: KeyValueStore,
        owner_id: Optional[str] = None,
        capacity: Optional[int] = None,
        locks: Optional[KeyedLocks] = None,
        settings: Optional[Settings] = None
    ):
        super().__init__(store, scan_history_key(owner_id), locks)
        self.owner_id = owner_id
        if capacity is None:
            settings = settings or get_settings()
            capacity = settings.USER_SCAN_HISTORY_LIMIT if owner_id else settings.SCAN_HISTORY_LIMIT
        if capacity <= 0:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity

    async def get_all(self) -> List[ScanEntry]:
        document = await self._load_document()
        if not isinstance(document, list):
            return []

        history = []
        for value in document:
            try:
                history.append(ScanEntry.model_validate(value))
            except ModelValidationError:
                logger.warning("Skipping malformed scan history entry", key=self.key)
        return history

    async def _write(self, history: List[ScanEntry]) -> None:
        await self._save_document([entry.model_dump(mode="json") for entry in history])

    async def append(self, entry: ScanEntry) -> ScanEntry:
        async with self.mutation():
            history = await self.get_all()
            history.insert(0, entry)

            dropped = len(history) - self.capacity
            if dropped > 0:
                del history[self.capacity:]
                logger.debug(f"Dropped {dropped} oldest scan(s) from history", key=self.key)

            await self._write(history)

        logger.info(f"Saved scan {entry.id} to history", status=entry.status.value)
        return entry

    async def remove(self, scan_id: str) -> bool:
        async with self.mutation():
            history = await self.get_all()
            remaining = [entry for entry in history if entry.id != scan_id]
            if len(remaining) == len(history):
                return False
            await self._write(remaining)
        return True

    async def clear(self) -> None:
        async with self.mutation():
            await self._delete_document()
        logger.info("Scan history cleared", key=self.key)
