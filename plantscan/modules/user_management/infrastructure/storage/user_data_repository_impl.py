# 📄 File: plantscan/modules/user_management/infrastructure/storage/user_data_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Keeps each user's profile on the device, adds newly found plant diseases after a scan, and can wipe a user's data
# 🧪 Purpose (Technical Summary):
# KeyValueStore-backed UserDataRepository with merge-on-update, setup completion, disease de-duplication and windowed statistics
# 🔗 Dependencies:
# pydantic, plantscan.shared.infrastructure.storage, domain models
# 🔄 Connected Modules / Calls From:
# ScanService.scan, PlantCatalogService.load_location, account deletion in plantscan.main

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from plantscan.shared.config.cache import UserKeyPrefix
from plantscan.shared.core.exceptions import ValidationError
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.utils.helpers import utc_now
from plantscan.shared.utils.logging import get_logger

from ...domain.models.user_data import CurrentUser, DetectedDisease, DiseaseStats, UserData
from ...domain.repositories.user_data_repository import UserDataRepository

logger = get_logger(__name__)

RECENT_DISEASE_WINDOW = timedelta(days=30)
HIGH_CONFIDENCE_THRESHOLD = 0.8

# Analyzer payloads name the disease under one of these fields
DISEASE_NAME_FIELDS = ("class_name", "disease_name", "name")


def user_data_key(user_id: str) -> str:
    return UserKeyPrefix.USER_DATA.for_user(user_id)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class StorageUserDataRepository(UserDataRepository):
    """Per-user data documents stored under user_data_<uid>."""

    def __init__(
        self,
        store: KeyValueStore,
        locks: Optional[KeyedLocks] = None,
        profile_source: Optional[Callable[[], Optional[CurrentUser]]] = None,
        now: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.locks = locks if locks is not None else KeyedLocks()
        self.profile_source = profile_source
        self.now = now

    @staticmethod
    def _require_user(user_id: str) -> str:
        if not user_id:
            raise ValidationError("A user id is required", field="user_id", value=user_id)
        return user_id

    def _default_document(self, user_id: str) -> UserData:
        profile = self.profile_source() if self.profile_source else None
        if profile is not None and profile.user_id == user_id:
            return UserData(
                email=profile.email,
                display_name=profile.display_name,
                created_at=self.now()
            )
        return UserData(created_at=self.now())

    async def get(self, user_id: str) -> UserData:
        key = user_data_key(self._require_user(user_id))

        try:
            stored = await self.store.get(key)
        except Exception as e:
            logger.error(f"Error getting user data: {e}", key=key)
            stored = None

        if isinstance(stored, dict):
            try:
                return UserData.model_validate(stored)
            except ModelValidationError as e:
                logger.warning(f"Stored user data is malformed, using defaults: {e}", key=key)

        return self._default_document(user_id)

    async def _merge(self, user_id: str, changes: Mapping[str, Any]) -> UserData:
        current = await self.get(user_id)
        merged = UserData.model_validate({
            **current.model_dump(),
            **changes,
            "updated_at": self.now(),
        })
        await self.store.set(user_data_key(user_id), merged.model_dump(mode="json"))
        return merged

    async def update(self, user_id: str, changes: Mapping[str, Any]) -> UserData:
        key = user_data_key(self._require_user(user_id))

        async with self.locks.hold(key):
            merged = await self._merge(user_id, changes)

        logger.debug("User data updated", user_id=user_id, fields=sorted(changes))
        return merged

    @staticmethod
    def _confidence(prediction: Mapping[str, Any]) -> Optional[float]:
        value = prediction.get("confidence")
        if value is None or isinstance(value, bool):
            return None
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable confidence: {value!r}")
            return None
        return confidence if math.isfinite(confidence) else None

    @staticmethod
    def _disease_name(prediction: Mapping[str, Any]) -> Optional[str]:
        for field in DISEASE_NAME_FIELDS:
            name = prediction.get(field)
            if name:
                return str(name)
        return None

    async def record_scan(
        self,
        user_id: str,
        predictions: Iterable[Mapping[str, Any]]
    ) -> Optional[UserData]:
        predictions = list(predictions or [])
        if not predictions:
            return None

        key = user_data_key(self._require_user(user_id))

        async with self.locks.hold(key):
            current = await self.get(user_id)
            known = set(current.disease_names())
            detected_at = self.now()

            new_diseases = []
            for prediction in predictions:
                name = self._disease_name(prediction)
                if name is None or name in known:
                    continue
                known.add(name)
                new_diseases.append(DetectedDisease(
                    disease_name=name,
                    confidence=self._confidence(prediction),
                    detected_at=detected_at
                ))

            updated = await self._merge(user_id, {
                "detected_diseases": current.detected_diseases + new_diseases,
                "total_scans": current.total_scans + 1,
                "last_scan_at": detected_at,
            })

        logger.info(
            "Updated user document with scan data",
            user_id=user_id,
            new_diseases=len(new_diseases),
            total_scans=updated.total_scans
        )
        return updated

    async def complete_setup(self, user_id: str, setup_data: Mapping[str, Any]) -> UserData:
        key = user_data_key(self._require_user(user_id))

        missing = [field for field in ("name", "phone") if not setup_data.get(field)]
        if missing:
            raise ValidationError(
                f"Setup requires {' and '.join(missing)}",
                field=missing[0],
                value=setup_data.get(missing[0])
            )

        async with self.locks.hold(key):
            merged = await self._merge(user_id, {
                "setup": True,
                "name": setup_data["name"],
                "display_name": setup_data["name"],
                "phone": setup_data["phone"],
                "location": setup_data.get("location"),
                "location_address": setup_data.get("location_address"),
                "setup_completed_at": self.now(),
            })

        logger.log_user_action("complete_setup", user_id)
        return merged

    async def disease_stats(self, user_id: str, now: Optional[datetime] = None) -> DiseaseStats:
        diseases = await self.get_detected_diseases(user_id)
        cutoff = _as_aware(now or self.now()) - RECENT_DISEASE_WINDOW

        return DiseaseStats(
            total=len(diseases),
            recent=sum(1 for d in diseases if _as_aware(d.detected_at) >= cutoff),
            high_confidence=sum(
                1 for d in diseases if (d.confidence or 0) >= HIGH_CONFIDENCE_THRESHOLD
            )
        )

    async def delete_all(self, user_id: str) -> None:
        self._require_user(user_id)
        keys = [prefix.for_user(user_id) for prefix in UserKeyPrefix]
        await self.store.multi_remove(keys)
        logger.info("Deleted all local data for user", user_id=user_id)
