# 📄 File: plantscan/modules/favorites/infrastructure/storage/favorites_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Saves the user's favorite plants on the device as one list and updates it whenever a plant is starred or unstarred
# 🧪 Purpose (Technical Summary):
# KeyValueStore-backed FavoritesRepository. The collection is one JSON object keyed by plant id,
# written back in full on every mutation under a per-key lock
# 🔗 Dependencies:
# pydantic, plantscan.shared.infrastructure.storage, domain models
# 🔄 Connected Modules / Calls From:
# plantscan.main (application container), screens toggling favorites

from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from plantscan.shared.config.cache import StorageKey, UserKeyPrefix
from plantscan.shared.core.exceptions import ValidationError
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.infrastructure.storage.document_repository import JsonDocumentRepository
from plantscan.shared.utils.helpers import utc_now
from plantscan.shared.utils.logging import get_logger

from ...domain.models.favorite import FavoriteRecord
from ...domain.repositories.favorites_repository import FavoritesRepository

logger = get_logger(__name__)


def favorites_key(owner_id: Optional[str] = None) -> str:
    """Storage key for a user's favorites; guests share the device key."""
    if owner_id:
        return UserKeyPrefix.FAVORITES.for_user(owner_id)
    return StorageKey.FAVORITES.value


class StorageFavoritesRepository(JsonDocumentRepository, FavoritesRepository):
    """Favorites stored as {plant_id: record} under one key."""

    def __init__(
        self,
        store: KeyValueStore,
        owner_id: Optional[str] = None,
        locks: Optional[KeyedLocks] = None,
        now: Callable[[], datetime] = utc_now
    ):
        super().__init__(store, favorites_key(owner_id), locks)
        self.owner_id = owner_id
        self.now = now

    @staticmethod
    def _plant_id(plant: Mapping[str, Any]) -> str:
        if not plant or plant.get("plant_id") in (None, ""):
            raise ValidationError("Plant data must include a plant_id", field="plant_id")
        return str(plant["plant_id"])

    async def get_all(self) -> Dict[str, FavoriteRecord]:
        document = await self._load_document()
        if not isinstance(document, dict):
            return {}

        favorites = {}
        for plant_id, value in document.items():
            try:
                favorites[plant_id] = FavoriteRecord.model_validate(value)
            except ModelValidationError:
                logger.warning(f"Skipping malformed favorite {plant_id}", key=self.key)
        return favorites

    async def _write(self, favorites: Dict[str, FavoriteRecord]) -> None:
        await self._save_document({
            plant_id: record.model_dump(mode="json")
            for plant_id, record in favorites.items()
        })

    def _new_record(self, plant_id: str, plant: Mapping[str, Any]) -> FavoriteRecord:
        return FavoriteRecord.model_validate({
            **plant,
            "plant_id": plant_id,
            "added_to_favorites_at": self.now(),
        })

    async def add(self, plant: Mapping[str, Any]) -> bool:
        plant_id = self._plant_id(plant)

        async with self.mutation():
            favorites = await self.get_all()
            if plant_id in favorites:
                logger.debug(f"Plant {plant_id} already in favorites")
                return False

            favorites[plant_id] = self._new_record(plant_id, plant)
            await self._write(favorites)

        logger.info(f"Added plant {plant_id} to favorites", count=len(favorites))
        return True

    async def remove(self, plant_id: str) -> bool:
        plant_id = str(plant_id)

        async with self.mutation():
            favorites = await self.get_all()
            if favorites.pop(plant_id, None) is None:
                logger.debug(f"Plant {plant_id} not in favorites")
                return False
            await self._write(favorites)

        logger.info(f"Removed plant {plant_id} from favorites", count=len(favorites))
        return True

    async def toggle(self, plant: Mapping[str, Any]) -> bool:
        plant_id = self._plant_id(plant)

        async with self.mutation():
            favorites = await self.get_all()
            if plant_id in favorites:
                del favorites[plant_id]
                logger.info(f"Removing plant {plant_id} from favorites")
                is_favorite = False
            else:
                favorites[plant_id] = self._new_record(plant_id, plant)
                logger.info(f"Adding plant {plant_id} to favorites")
                is_favorite = True

            await self._write(favorites)

        return is_favorite

    async def clear(self) -> None:
        async with self.mutation():
            await self._write({})
        logger.info("Cleared all favorites", key=self.key)
