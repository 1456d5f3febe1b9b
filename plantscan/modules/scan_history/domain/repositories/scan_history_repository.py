# 📄 File: plantscan/modules/scan_history/domain/repositories/scan_history_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines how we keep the list of past scans: newest first and never longer than a set size
# 🧪 Purpose (Technical Summary):
# Repository interface for the capped, newest-first scan history collection
# 🔗 Dependencies:
# Domain models (ScanEntry), typing, abc
# 🔄 Connected Modules / Calls From:
# ScanService, history screens, infrastructure implementations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.scan_entry import ScanEntry


class ScanHistoryRepository(ABC):
    """
    Repository interface for scan history.

    Implementation Notes:
    - Index 0 is always the most recent entry
    - append() truncates the oldest entries beyond capacity
    - The list is one document rewritten on every mutation
    """

    capacity: int

    @abstractmethod
    async def get_all(self) -> List[ScanEntry]:
        """
        Get the history, newest first.

        Returns:
            List of ScanEntry (empty when none or unreadable)
        """
        pass

    @abstractmethod
    async def append(self, entry: ScanEntry) -> ScanEntry:
        """
        Insert an entry at the head and drop entries beyond capacity.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, scan_id: str) -> bool:
        """
        Remove one entry.

        Returns:
            True if an entry was removed
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
        pass

    async def get(self, scan_id: str) -> Optional[ScanEntry]:
        for entry in await self.get_all():
            if entry.id == scan_id:
                return entry
        return None
