# 📄 File: plantscan/modules/favorites/domain/repositories/favorites_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines what we can do with a user's favorite plants: list, star, unstar, toggle and clear
# 🧪 Purpose (Technical Summary):
# Repository interface for the favorites collection following the Repository pattern
# 🔗 Dependencies:
# Domain models (FavoriteRecord), typing, abc
# 🔄 Connected Modules / Calls From:
# Screens via the application container, infrastructure implementations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from ..models.favorite import FavoriteRecord


class FavoritesRepository(ABC):
    """
    Repository interface for one user's favorite plants.

    Implementation Notes:
    - The whole collection is one document keyed by plant id
    - Every mutation loads, changes and writes back the whole document
    - All operations are async for non-blocking I/O
    """

    @abstractmethod
    async def get_all(self) -> Dict[str, FavoriteRecord]:
        """
        Get every favorite keyed by plant id.

        Returns:
            Mapping of plant id to FavoriteRecord (empty when none or unreadable)
        """
        pass

    @abstractmethod
    async def add(self, plant: Mapping[str, Any]) -> bool:
        """
        Add a plant to favorites.

        Args:
            plant: Plant data carrying a plant_id

        Returns:
            True if added, False if it was already a favorite

        Raises:
            ValidationError: If plant has no plant_id
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, plant_id: str) -> bool:
        """
        Remove a plant from favorites.

        Returns:
            True if removed, False if it was not a favorite
        """
        pass

    @abstractmethod
    async def toggle(self, plant: Mapping[str, Any]) -> bool:
        """
        Remove the plant if present, otherwise add it with a fresh timestamp.

        Returns:
            True if the plant is a favorite after the call
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every favorite."""
        pass

    async def get(self, plant_id: str) -> Optional[FavoriteRecord]:
        return (await self.get_all()).get(str(plant_id))

    async def is_favorite(self, plant_id: str) -> bool:
        return str(plant_id) in await self.get_all()

    async def list_favorites(self) -> List[FavoriteRecord]:
        """Favorites ordered by when they were added, newest first."""
        favorites = list((await self.get_all()).values())
        return sorted(favorites, key=lambda record: record.added_to_favorites_at, reverse=True)

    async def favorite_ids(self) -> List[str]:
        return list((await self.get_all()).keys())
