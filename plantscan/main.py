# 📄 File: plantscan/main.py
#
# 🧭 Purpose (Layman Explanation):
# The main control center that sets up the app's on-device data: where it is stored,
# the cache, the daily scan counter, and the services the screens talk to.
#
# 🧪 Purpose (Technical Summary):
# Application container and lifespan. Builds one KeyValueStore from settings and wires
# CacheManager, DailyRateLimiter, per-user repositories and the orchestration services
# around it, sharing a single per-key lock registry.
#
# 🔗 Dependencies:
# - plantscan.shared.config (settings, storage factory, cache config)
# - plantscan.shared.utils.logging
# - All feature modules
#
# 🔄 Connected Modules / Calls From:
# - Host application start-up
# - Integration tests

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Mapping, Optional

from plantscan.modules.favorites.infrastructure.storage import StorageFavoritesRepository
from plantscan.modules.plant_catalog.application import PlantCatalogService
from plantscan.modules.plant_catalog.domain.services import LocationProvider, PlantDataClient
from plantscan.modules.scan_history.application import DiseaseAnalyzer, ScanService
from plantscan.modules.scan_history.infrastructure.storage import StorageScanHistoryRepository
from plantscan.modules.user_management.application import SessionAuthProvider
from plantscan.modules.user_management.domain.models import SetupStatus, UserData
from plantscan.modules.user_management.infrastructure.storage import (
    AppFlags,
    StorageUploadsRepository,
    StorageUserDataRepository,
)
from plantscan.shared.config.cache import CacheConfig
from plantscan.shared.config.settings import Settings, get_settings
from plantscan.shared.config.storage import StorageConfig
from plantscan.shared.core.exceptions import CacheError
from plantscan.shared.core.locking import KeyedLocks
from plantscan.shared.core.rate_limiter import DailyRateLimiter
from plantscan.shared.infrastructure.cache import CacheManager
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.utils.logging import setup_logging

logger = logging.getLogger(__name__)


class PlantScanApp:
    """
    Wires every component around one store.

    Repositories for the signed-in user are built on demand, so signing in
    or out never requires rebuilding the container.
    """

    def __init__(
        self,
        store: KeyValueStore,
        plant_client: PlantDataClient,
        analyzer: DiseaseAnalyzer,
        location_provider: Optional[LocationProvider] = None,
        settings: Optional[Settings] = None,
        storage_config: Optional[StorageConfig] = None
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.storage_config = storage_config
        self.locks = KeyedLocks()

        self.cache_config = CacheConfig(self.settings)
        self.cache = CacheManager(
            store,
            on_error=self._on_cache_error,
            default_expiry_hours=self.cache_config.default_expiry_hours
        )
        self.rate_limiter = DailyRateLimiter(store)
        self.flags = AppFlags(store)
        self.auth = SessionAuthProvider(self.flags)
        self.user_data = StorageUserDataRepository(
            store, locks=self.locks, profile_source=self.auth.get_current_user
        )

        self.catalog = PlantCatalogService(
            self.cache,
            plant_client,
            location_provider=location_provider,
            user_data=self.user_data,
            auth=self.auth,
            cache_config=self.cache_config
        )
        self.scans = ScanService(
            self.rate_limiter,
            StorageScanHistoryRepository(store, locks=self.locks, settings=self.settings),
            analyzer,
            user_data=self.user_data,
            auth=self.auth,
            user_history_factory=self.user_scan_history,
            uploads_factory=self.uploads
        )

    @staticmethod
    def _on_cache_error(error: CacheError):
        logger.warning(f"Cache degraded: {error.message}")

    def favorites(self) -> StorageFavoritesRepository:
        """Favorites of the signed-in user, or the device list for guests."""
        user = self.auth.get_current_user()
        return StorageFavoritesRepository(
            self.store, owner_id=user.user_id if user else None, locks=self.locks
        )

    def user_scan_history(self, user_id: str) -> StorageScanHistoryRepository:
        return StorageScanHistoryRepository(
            self.store, owner_id=user_id, locks=self.locks, settings=self.settings
        )

    def uploads(self, user_id: str) -> StorageUploadsRepository:
        return StorageUploadsRepository(self.store, owner_id=user_id, locks=self.locks)

    async def check_setup(self) -> SetupStatus:
        """Setup gate for the signed-in user."""
        user = self.auth.get_current_user()
        return await self.user_data.check_setup(user.user_id if user else None)

    async def complete_setup(self, setup_data: Mapping[str, Any]) -> UserData:
        """
        Finish setup for the signed-in user and refresh their session profile.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            ValidationError: If name or phone is missing
        """
        user = self.auth.require_user("complete_setup")
        user_data = await self.user_data.complete_setup(user.user_id, setup_data)
        self.auth.update_profile(display_name=user_data.display_name)
        return user_data

    async def delete_account(self, user_id: Optional[str] = None):
        """
        Remove every document owned by user_id and sign out.

        Defaults to the signed-in user; raises NotAuthenticatedError when
        there is none.
        """
        if user_id is None:
            user_id = self.auth.require_user("delete_account").user_id

        await self.user_data.delete_all(user_id)
        current = self.auth.get_current_user()
        if current is not None and current.user_id == user_id:
            await self.auth.sign_out()
        logger.info(f"Local data deleted for user {user_id}")

    async def close(self):
        await self.store.close()
        if self.storage_config is not None:
            await self.storage_config.close_connections()


@asynccontextmanager
async def lifespan(
    plant_client: PlantDataClient,
    analyzer: DiseaseAnalyzer,
    location_provider: Optional[LocationProvider] = None,
    settings: Optional[Settings] = None
) -> AsyncGenerator[PlantScanApp, None]:
    """
    Application lifespan context manager.

    Configures logging, builds the store from settings, marks the launch and
    closes backend connections on exit.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_FILE)
    logger.info(f"🌱 {settings.APP_NAME} starting up ({settings.STORAGE_BACKEND} storage)")

    storage_config = StorageConfig(settings)
    app = PlantScanApp(
        storage_config.create_store(),
        plant_client,
        analyzer,
        location_provider=location_provider,
        settings=settings,
        storage_config=storage_config
    )

    try:
        if not await app.flags.has_launched():
            logger.info("First launch on this device")
            await app.flags.mark_as_launched()
        yield app
    finally:
        logger.info(f"🔄 {settings.APP_NAME} shutting down...")
        try:
            await app.close()
        except Exception as e:
            logger.error(f"❌ Shutdown error: {e}")
