"""
Base class for collections stored as a single JSON document under one key.

Reads fail soft (a missing or corrupt document reads as empty). Writes raise
StorageError, since these documents are authoritative user state. Mutations
run their read-modify-write cycle under the per-key lock.
"""

import logging
from typing import Any, Optional

from plantscan.shared.core.locking import KeyedLocks

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonDocumentRepository:
    """Read-modify-write access to one stored JSON document."""

    def __init__(self, store: KeyValueStore, key: str, locks: Optional[KeyedLocks] = None):
        self.store = store
        self.key = key
        self.locks = locks if locks is not None else KeyedLocks()

    def mutation(self):
        """Async context serialising read-modify-write cycles on this key."""
        return self.locks.hold(self.key)

    async def _load_document(self) -> Optional[Any]:
        try:
            return await self.store.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read {self.key}: {e}")
            return None

    async def _save_document(self, document: Any) -> None:
        await self.store.set(self.key, document)

    async def _delete_document(self) -> None:
        await self.store.remove(self.key)
