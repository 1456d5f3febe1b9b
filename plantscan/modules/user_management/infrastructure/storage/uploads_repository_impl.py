# 📄 File: plantscan/modules/user_management/infrastructure/storage/uploads_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Remembers each photo a signed-in user sent for analysis and updates it when the answer comes back
# 🧪 Purpose (Technical Summary):
# KeyValueStore-backed UploadsRepository storing a newest-first JSON array under uploads_<uid>
# 🔗 Dependencies:
# pydantic, plantscan.shared.infrastructure.storage, domain models
# 🔄 Connected Modules / Calls From:
# ScanService (signed-in scans), account deletion through StorageUserDataRepository.delete_all

from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from plantscan.shared.config.cache import UserKeyPrefix
from plantscan.shared.core.exceptions import ValidationError
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.infrastructure.storage.document_repository import JsonDocumentRepository
from plantscan.shared.utils.helpers import utc_now
from plantscan.shared.utils.logging import get_logger

from ...domain.models.upload import UPLOAD_PENDING, UploadRecord
from ...domain.repositories.uploads_repository import UploadsRepository

logger = get_logger(__name__)


def uploads_key(user_id: str) -> str:
    return UserKeyPrefix.UPLOADS.for_user(user_id)


class StorageUploadsRepository(JsonDocumentRepository, UploadsRepository):
    """A user's uploads stored as a newest-first JSON array."""

    def __init__(
        self,
        store: KeyValueStore,
        owner_id: str,
        locks: Optional[KeyedLocks] = None,
        now: Callable[[], datetime] = utc_now
    ):
        if not owner_id:
            raise ValidationError("Uploads belong to a signed-in user", field="owner_id")

        super().__init__(store, uploads_key(owner_id), locks)
        self.owner_id = owner_id
        self.now = now

    async def list_uploads(self) -> List[UploadRecord]:
        document = await self._load_document()
        if not isinstance(document, list):
            return []

        uploads = []
        for value in document:
            try:
                uploads.append(UploadRecord.model_validate(value))
            except ModelValidationError:
                logger.warning("Skipping malformed upload record", key=self.key)
        return uploads

    async def _write(self, uploads: List[UploadRecord]) -> None:
        await self._save_document([upload.model_dump(mode="json") for upload in uploads])

    async def create(self, upload_data: Mapping[str, Any]) -> UploadRecord:
        fields = {key: value for key, value in upload_data.items() if value is not None}
        upload = UploadRecord.model_validate({
            **fields,
            "status": UPLOAD_PENDING,
            "created_at": self.now(),
        })

        async with self.mutation():
            uploads = await self.list_uploads()
            uploads.insert(0, upload)
            await self._write(uploads)

        logger.info(f"Created upload {upload.id}", user_id=self.owner_id)
        return upload

    async def update(self, upload_id: str, changes: Mapping[str, Any]) -> Optional[UploadRecord]:
        async with self.mutation():
            uploads = await self.list_uploads()
            for index, upload in enumerate(uploads):
                if upload.id == upload_id:
                    break
            else:
                logger.debug(f"No upload {upload_id} to update", key=self.key)
                return None

            updated = UploadRecord.model_validate({
                **upload.model_dump(),
                **changes,
                "id": upload.id,
                "updated_at": self.now(),
            })
            uploads[index] = updated
            await self._write(uploads)

        logger.debug(f"Upload {upload_id} updated", status=updated.status)
        return updated
