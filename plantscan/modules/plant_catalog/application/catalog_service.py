# 📄 File: plantscan/modules/plant_catalog/application/catalog_service.py
# 🧭 Purpose (Layman Explanation):
# Gets the plant list and the user's location for the home screen. It shows saved data
# right away if it is recent, downloads new data otherwise, and falls back to old saved
# data when the phone is offline.
# 🧪 Purpose (Technical Summary):
# Cache orchestration over CacheManager: fresh cache -> remote fetch (save + refresh stamp)
# -> fresh copy / stale copy with offline flag -> empty result with error notice.
# Location follows the same path and is mirrored into the signed-in user's data document.
# 🔗 Dependencies:
# CacheManager, CacheConfig, PlantDataClient, LocationProvider, UserDataRepository, AuthProvider
# 🔄 Connected Modules / Calls From:
# plantscan.main (application container), home screen

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from plantscan.modules.user_management.application.auth import AuthProvider
from plantscan.modules.user_management.domain.repositories import UserDataRepository
from plantscan.shared.config.cache import CacheConfig, StorageKey
from plantscan.shared.core.exceptions import StorageError
from plantscan.shared.infrastructure.cache import CacheManager
from plantscan.shared.utils.helpers import utc_now
from plantscan.shared.utils.logging import get_logger

from ..domain.models.catalog import (
    CatalogLoadResult,
    CatalogSource,
    LocationLoadResult,
    Notice,
    NoticeType,
)
from ..domain.services.providers import LocationProvider, PlantDataClient

logger = get_logger(__name__)

PLANTS_KEY = StorageKey.CACHED_PLANTS.value
LOCATION_KEY = StorageKey.CACHED_USER_LOCATION.value
LAST_REFRESH_KEY = StorageKey.LAST_REFRESH.value

NOTICE_PLANTS_LOADED = Notice(
    type=NoticeType.SUCCESS, title="Plants Loaded",
    message="Fresh plant data loaded successfully"
)
NOTICE_REFRESHED = Notice(
    type=NoticeType.SUCCESS, title="Refreshed", message="Data updated successfully!"
)
NOTICE_UPDATE_FAILED = Notice(
    type=NoticeType.WARNING, title="Update Failed",
    message="Using cached data. Pull to refresh to try again."
)
NOTICE_OFFLINE = Notice(
    type=NoticeType.WARNING, title="Offline Mode",
    message="Showing cached data. Pull to refresh when online."
)
NOTICE_CONNECTION_ERROR = Notice(
    type=NoticeType.ERROR, title="Connection Error",
    message="Could not load plants. Please check your internet connection."
)
NOTICE_LOCATION_UNAVAILABLE = Notice(
    type=NoticeType.WARNING, title="Location", message="Could not get current location"
)


class PlantCatalogService:
    """
    Cache-first loader for the plant list and user location.

    A non-empty remote result always wins and refreshes the cache. When the
    remote source fails or returns nothing, a cached copy is served with
    is_offline set; with no copy at all an empty result carries an error notice.
    """

    def __init__(
        self,
        cache: CacheManager,
        plant_client: PlantDataClient,
        location_provider: Optional[LocationProvider] = None,
        user_data: Optional[UserDataRepository] = None,
        auth: Optional[AuthProvider] = None,
        cache_config: Optional[CacheConfig] = None,
        now: Callable[[], datetime] = utc_now
    ):
        self.cache = cache
        self.plant_client = plant_client
        self.location_provider = location_provider
        self.user_data = user_data
        self.auth = auth
        self.cache_config = cache_config or CacheConfig()
        self.now = now

    async def _read_cached(self, key: str):
        """
        Cached copy of key and whether it is still fresh.

        Reads through is_valid and load_stale so an expired copy stays in
        storage as the offline fallback until a successful fetch replaces it.
        """
        cached = await self.cache.load_stale(key)
        if cached is None:
            return None, False
        return cached, await self.cache.is_valid(key, self.cache_config.get_expiry(key))

    # -------------------------------------------------------------------------
    # Plants
    # -------------------------------------------------------------------------

    async def _fetch_remote_plants(self) -> Optional[List[Dict[str, Any]]]:
        try:
            plants = await self.plant_client.get_plants()
        except Exception as e:
            logger.error(f"Failed to fetch plants from API: {e}")
            return None

        if not plants:
            logger.warning("No plant data received from API")
            return None
        return list(plants)

    async def _stamp_refresh(self):
        try:
            await self.cache.store.set(LAST_REFRESH_KEY, int(self.now().timestamp() * 1000))
        except StorageError as e:
            logger.error(f"Failed to record last refresh: {e}")

    async def load_plants(self, force_refresh: bool = False) -> CatalogLoadResult:
        """
        Load the plant list.

        Args:
            force_refresh: Skip the fresh-cache shortcut (pull to refresh)

        Returns:
            CatalogLoadResult with plants, source, offline flag and notice
        """
        cached, is_fresh = await self._read_cached(PLANTS_KEY)

        if cached and is_fresh and not force_refresh:
            logger.info(f"Loaded {len(cached)} plants from cache")
            return CatalogLoadResult(plants=cached, source=CatalogSource.FRESH_CACHE)

        plants = await self._fetch_remote_plants()
        if plants is not None:
            logger.info(f"Fetched {len(plants)} plants from API")
            await self.cache.save(PLANTS_KEY, plants)
            await self._stamp_refresh()

            if force_refresh:
                notice = NOTICE_REFRESHED
            elif cached and is_fresh:
                notice = None
            else:
                notice = NOTICE_PLANTS_LOADED
            return CatalogLoadResult(plants=plants, source=CatalogSource.REMOTE, notice=notice)

        if cached and is_fresh:
            return CatalogLoadResult(
                plants=cached,
                source=CatalogSource.FRESH_CACHE,
                is_offline=True,
                notice=NOTICE_UPDATE_FAILED
            )

        if cached:
            logger.info(f"Loading {len(cached)} plants from stale cache")
            return CatalogLoadResult(
                plants=cached,
                source=CatalogSource.STALE_CACHE,
                is_offline=True,
                notice=NOTICE_OFFLINE
            )

        logger.warning("No plant data available from API or cache")
        return CatalogLoadResult(notice=NOTICE_CONNECTION_ERROR)

    async def last_refreshed_at(self) -> Optional[datetime]:
        """When the plant list was last fetched successfully."""
        value = await self.cache.store.get(LAST_REFRESH_KEY)
        try:
            return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
        except (TypeError, ValueError):
            return None

    # -------------------------------------------------------------------------
    # Location
    # -------------------------------------------------------------------------

    async def _fetch_location(self) -> Optional[Dict[str, Any]]:
        if self.location_provider is None:
            return None

        try:
            location = await self.location_provider.get_current_location()
        except Exception as e:
            logger.error(f"Location update error: {e}")
            return None

        if not location:
            logger.info("Location unavailable or permission denied")
            return None
        return {"timestamp": self.now().isoformat(), **location}

    async def _mirror_location(self, location: Dict[str, Any]):
        user = self.auth.get_current_user() if self.auth else None
        if user is None or self.user_data is None:
            return

        try:
            await self.user_data.update(user.user_id, {
                "current_location": location,
                "last_location_update": self.now().isoformat(),
            })
            logger.debug("User location updated in local database", user_id=user.user_id)
        except StorageError as e:
            logger.error(f"Error updating user location: {e}", user_id=user.user_id)

    async def load_location(self, force_refresh: bool = False) -> LocationLoadResult:
        """Load the user location, cached for the location expiry window."""
        cached, is_fresh = await self._read_cached(LOCATION_KEY)

        if cached and is_fresh and not force_refresh:
            return LocationLoadResult(location=cached, source=CatalogSource.FRESH_CACHE)

        location = await self._fetch_location()
        if location is not None:
            await self.cache.save(LOCATION_KEY, location)
            await self._mirror_location(location)
            return LocationLoadResult(location=location, source=CatalogSource.REMOTE)

        if cached:
            source = CatalogSource.FRESH_CACHE if is_fresh else CatalogSource.STALE_CACHE
            return LocationLoadResult(location=cached, source=source, is_offline=True)

        return LocationLoadResult(notice=NOTICE_LOCATION_UNAVAILABLE)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def clear_cached_data(self) -> bool:
        """Drop cached plants, location and the refresh stamp."""
        cleared = await self.cache.clear_multiple([PLANTS_KEY, LOCATION_KEY, LAST_REFRESH_KEY])
        if cleared:
            logger.info("All cached catalog data has been removed")
        return cleared
