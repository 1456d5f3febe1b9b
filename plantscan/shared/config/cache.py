# 📄 File: plantscan/shared/config/cache.py
#
# 🧭 Purpose (Layman Explanation):
# The list of every name our app saves data under on the device, and how many
# hours each kind of downloaded data stays fresh before we fetch it again.
#
# 🧪 Purpose (Technical Summary):
# Closed catalogue of storage keys, per-user key prefixes and the expiry table
# for remote-derived cache entries. User-authored state has no expiry.
#
# 🔗 Dependencies:
# - plantscan.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - CacheManager.clear_all / get_all_cache_info / get_cache_size
# - DailyRateLimiter, domain repositories, PlantCatalogService

from enum import Enum
from typing import FrozenSet, Optional

from .settings import Settings, get_settings


class StorageKey(str, Enum):
    """Fixed application storage keys."""

    # Remote-derived, re-fetchable (expiring)
    CACHED_PLANTS = "cached_plants"
    CACHED_USER_LOCATION = "cached_user_location"
    WEATHER_CACHE = "weather_cache"
    DISEASE_CACHE = "disease_cache"
    LAST_REFRESH = "last_refresh"

    # User-authored, authoritative (no expiry)
    USER_PREFERENCES = "user_preferences"
    SEARCH_HISTORY = "search_history"
    FAVORITES = "plant_favorites"
    SCAN_HISTORY = "scan_history"

    # App flags
    USER_LOGGED_IN = "user_logged_in"
    APP_FIRST_LAUNCH = "app_first_launch"
    HAS_LAUNCHED = "has_launched"

    # Daily scan window
    SCAN_RATE_LIMIT = "scan_rate_limit"


class UserKeyPrefix(str, Enum):
    """Prefixes for documents owned by a single user."""

    USER_DATA = "user_data_"
    SCAN_HISTORY = "scan_history_"
    FAVORITES = "plant_favorites_"
    UPLOADS = "uploads_"

    def for_user(self, user_id: str) -> str:
        return f"{self.value}{user_id}"


class CacheConfig:
    """Cache expiry settings and the recognised key set."""

    # clear_all() never resets the daily scan window
    APP_KEYS: FrozenSet[str] = frozenset(
        key.value for key in StorageKey if key is not StorageKey.SCAN_RATE_LIMIT
    )

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.expiry_hours = {
            StorageKey.CACHED_PLANTS.value: self.settings.CACHE_PLANTS_EXPIRY_HOURS,
            StorageKey.CACHED_USER_LOCATION.value: self.settings.CACHE_LOCATION_EXPIRY_HOURS,
            StorageKey.WEATHER_CACHE.value: self.settings.CACHE_WEATHER_EXPIRY_HOURS,
            StorageKey.DISEASE_CACHE.value: self.settings.CACHE_DISEASES_EXPIRY_HOURS,
        }

    @property
    def default_expiry_hours(self) -> float:
        return self.settings.CACHE_PLANTS_EXPIRY_HOURS

    def get_expiry(self, key: str, custom_expiry: Optional[float] = None) -> float:
        """
        Get expiry window in hours for a cache key.

        Args:
            key: Storage key
            custom_expiry: Override expiry value

        Returns:
            Expiry in hours
        """
        if custom_expiry is not None:
            return custom_expiry

        return self.expiry_hours.get(key, self.default_expiry_hours)

    @classmethod
    def is_app_key(cls, key: str) -> bool:
        return key in cls.APP_KEYS
