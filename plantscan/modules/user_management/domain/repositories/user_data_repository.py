# 📄 File: plantscan/modules/user_management/domain/repositories/user_data_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines how we read and change a user's saved profile, record what each scan found, and wipe everything on sign-out
# 🧪 Purpose (Technical Summary):
# Repository interface for the per-user data document and detected disease bookkeeping
# 🔗 Dependencies:
# Domain models (UserData, DetectedDisease, DiseaseStats), typing, abc
# 🔄 Connected Modules / Calls From:
# ScanService, PlantCatalogService, infrastructure implementations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from ..models.user_data import DetectedDisease, DiseaseStats, SetupStatus, UserData


class UserDataRepository(ABC):
    """
    Repository interface for per-user data.

    Implementation Notes:
    - One document per user, merged on update
    - A missing document reads as a default profile, it is not created on read
    - Writes raise StorageError; reads degrade to defaults
    """

    @abstractmethod
    async def get(self, user_id: str) -> UserData:
        """
        Get the user's data document.

        Args:
            user_id: Owner of the document

        Returns:
            Stored UserData, or a default document when none is stored
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, changes: Mapping[str, Any]) -> UserData:
        """
        Merge changes into the stored document and stamp updated_at.

        Args:
            user_id: Owner of the document
            changes: Fields to overwrite

        Returns:
            The merged document as written

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def record_scan(
        self,
        user_id: str,
        predictions: Iterable[Mapping[str, Any]]
    ) -> Optional[UserData]:
        """
        Record one completed scan for the user.

        Appends diseases whose names are not yet recorded, increments
        total_scans and stamps last_scan_at. Does nothing without predictions.

        Returns:
            The updated document, or None when there was nothing to record
        """
        pass

    async def check_setup(self, user_id: Optional[str]) -> SetupStatus:
        """
        Decide whether the user may enter the app and must finish setup first.

        Nobody signed in is refused and sent to setup. Admin accounts are
        refused. Everyone else is allowed, needing setup until the setup flag,
        name and phone are all present.
        """
        if not user_id:
            return SetupStatus(allowed=False, needs_setup=True)

        user_data = await self.get(user_id)
        if user_data.is_admin:
            return SetupStatus(allowed=False, needs_setup=False)
        return SetupStatus(allowed=True, needs_setup=user_data.needs_setup)

    @abstractmethod
    async def complete_setup(self, user_id: str, setup_data: Mapping[str, Any]) -> UserData:
        """
        Store the setup form and mark setup as done.

        Args:
            user_id: Owner of the document
            setup_data: "name" and "phone" are required; "location" and
                "location_address" are optional

        Returns:
            The merged document, with setup_completed_at stamped

        Raises:
            ValidationError: If name or phone is missing
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_all(self, user_id: str) -> None:
        """Delete every document owned by the user."""
        pass

    async def get_detected_diseases(self, user_id: str) -> List[DetectedDisease]:
        """Detected diseases, newest first."""
        user_data = await self.get(user_id)
        return sorted(user_data.detected_diseases, key=lambda d: d.detected_at, reverse=True)

    @abstractmethod
    async def disease_stats(self, user_id: str, now: Optional[datetime] = None) -> DiseaseStats:
        """Total, recent and high confidence disease counts."""
        pass
