# 📄 File: plantscan/modules/user_management/domain/repositories/uploads_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines how we keep track of photos a user sent for analysis, newest first
# 🧪 Purpose (Technical Summary):
# Repository interface for the per-user uploads collection
# 🔗 Dependencies:
# Domain models (UploadRecord), typing, abc
# 🔄 Connected Modules / Calls From:
# ScanService, infrastructure implementations

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from ..models.upload import UploadRecord


class UploadsRepository(ABC):
    """
    Repository interface for one user's uploads.

    Implementation Notes:
    - Newest upload first
    - Records are never capped; they go away with the user's other documents
    """

    @abstractmethod
    async def list_uploads(self) -> List[UploadRecord]:
        """All uploads, newest first."""
        pass

    @abstractmethod
    async def create(self, upload_data: Mapping[str, Any]) -> UploadRecord:
        """
        Create a pending upload.

        Args:
            upload_data: Fields to keep on the record; an "id" is honoured

        Returns:
            The stored record, status "pending"

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, upload_id: str, changes: Mapping[str, Any]) -> Optional[UploadRecord]:
        """
        Merge changes into an upload and stamp updated_at.

        Returns:
            The merged record, or None when no upload has that id
        """
        pass

    async def get(self, upload_id: str) -> Optional[UploadRecord]:
        for upload in await self.list_uploads():
            if upload.id == upload_id:
                return upload
        return None
