# 📄 File: plantscan/shared/infrastructure/cache/cache_manager.py
#
# 🧭 Purpose (Layman Explanation):
# Remembers downloaded data (plant lists, location) together with the time we saved it,
# so the app can show it instantly while it is fresh and still show the old copy
# when the phone is offline.
#
# 🧪 Purpose (Technical Summary):
# Timestamped cache store over a KeyValueStore. Every save writes a new envelope
# (data, epoch-ms timestamp, optional per-entry expiry). load() honours the
# expiry window and lazily evicts expired entries; load_stale() ignores expiry.
# Every storage failure is logged, reported to an optional hook, and degraded
# to a safe default so the cache can never crash the app.
#
# 🔗 Dependencies:
# - pydantic (CacheEntry envelope validation)
# - plantscan.shared.infrastructure.storage.KeyValueStore
# - plantscan.shared.config.cache (recognised key set)
#
# 🔄 Connected Modules / Calls From:
# - PlantCatalogService (fresh -> remote -> stale load path)
# - Diagnostics screens (metadata, size)

import asyncio
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from plantscan.shared.config.cache import CacheConfig
from plantscan.shared.core.exceptions import CacheError
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.utils.formatters import format_file_size
from plantscan.shared.utils.logging import get_logger

from .models import CacheEntry, CacheMetadata, CacheSizeInfo

logger = get_logger(__name__)

DEFAULT_EXPIRY_HOURS = 24

ErrorHook = Callable[[CacheError], None]


class CacheManager:
    """
    Best-effort timestamped cache.

    Entry lifecycle:
    - fresh: age below the applicable expiry, returned by load()
    - stale: age at or above expiry, only returned by load_stale()
    - evicted: removed by the next load() that finds it expired

    There is no background sweep; expired entries stay in storage until
    load() targets that exact key.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], float] = time.time,
        on_error: Optional[ErrorHook] = None,
        default_expiry_hours: float = DEFAULT_EXPIRY_HOURS
    ):
        self.store = store
        self.clock = clock
        self.on_error = on_error
        self.default_expiry_hours = default_expiry_hours

    def _now_millis(self) -> int:
        return int(self.clock() * 1000)

    def _report_failure(self, operation: str, key: Optional[str], error: Exception):
        logger.performance.log_storage_failure(operation, key, error)

        if self.on_error is None:
            return

        cache_error = CacheError(
            message=f"Cache {operation} failed: {error}",
            operation=operation,
            key=key,
            details={"error_type": type(error).__name__}
        )
        try:
            self.on_error(cache_error)
        except Exception as hook_error:
            logger.error(f"Cache error hook raised: {hook_error}", exc_info=True)

    async def _read_entry(self, key: str) -> Optional[CacheEntry]:
        raw = await self.store.get(key)
        if raw is None:
            return None

        try:
            return CacheEntry.model_validate(raw)
        except ModelValidationError:
            logger.warning(f"Value under {key} is not a cache entry, treating as absent")
            return None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def save(self, key: str, data: Any, custom_expiry: Optional[float] = None) -> bool:
        """
        Save data to cache with the current timestamp.

        Args:
            key: Storage key
            data: JSON-serializable payload
            custom_expiry: Per-entry expiry in hours, overriding load() defaults

        Returns:
            True if written, False if the write failed (already logged)
        """
        try:
            entry = CacheEntry(
                data=data,
                timestamp=self._now_millis(),
                custom_expiry=custom_expiry
            )
            await self.store.set(key, entry.model_dump(mode="json"))
            logger.performance.log_cache_operation(
                "save", key, extra={"custom_expiry": custom_expiry}
            )
            return True
        except Exception as e:
            self._report_failure("save", key, e)
            return False

    async def update(self, key: str, update_function: Callable[[Any], Any]) -> bool:
        """
        Apply update_function to cached data, keeping the original timestamp.

        Returns:
            True if an entry existed and was rewritten
        """
        try:
            entry = await self._read_entry(key)
            if entry is None:
                logger.debug(f"No cache to update for key: {key}")
                return False

            updated = entry.model_copy(update={
                "data": update_function(entry.data),
                "last_updated": self._now_millis(),
            })
            await self.store.set(key, updated.model_dump(mode="json"))
            logger.performance.log_cache_operation("update", key)
            return True
        except Exception as e:
            self._report_failure("update", key, e)
            return False

    async def preload_caches(self, cache_map: Mapping[str, Any]) -> bool:
        """Save several entries concurrently; True only if every save succeeded."""
        results = await asyncio.gather(
            *(self.save(key, data) for key, data in cache_map.items())
        )
        successful = sum(1 for result in results if result)
        logger.info(f"Preloaded {successful}/{len(results)} caches")
        return successful == len(results)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def load(self, key: str, expiry_hours: Optional[float] = None) -> Optional[Any]:
        """
        Load data from cache if not expired.

        An expired entry is removed from storage as a side effect.

        Args:
            key: Storage key
            expiry_hours: Expiry window; the entry's custom expiry wins when set

        Returns:
            Cached data, or None if missing, expired or unreadable
        """
        expiry_hours = self.default_expiry_hours if expiry_hours is None else expiry_hours

        try:
            entry = await self._read_entry(key)
            if entry is None:
                logger.performance.log_cache_operation("load", key, hit=False)
                return None

            now = self._now_millis()
            age_hours = entry.age_hours(now)

            if entry.is_fresh(now, expiry_hours):
                logger.performance.log_cache_operation(
                    "load", key, hit=True, age_hours=age_hours,
                    extra={"expires_in_hours": round(entry.effective_expiry(expiry_hours) - age_hours, 2)}
                )
                return entry.data

            logger.performance.log_cache_operation(
                "evict", key, hit=False, age_hours=age_hours,
                extra={"expiry_hours": entry.effective_expiry(expiry_hours)}
            )
            await self.store.remove(key)
            return None
        except Exception as e:
            self._report_failure("load", key, e)
            return None

    async def load_stale(self, key: str) -> Optional[Any]:
        """
        Load cached data regardless of age, for offline fallback.

        Never evicts.
        """
        try:
            entry = await self._read_entry(key)
            if entry is None:
                return None

            logger.performance.log_cache_operation(
                "load_stale", key, hit=True, age_hours=entry.age_hours(self._now_millis())
            )
            return entry.data
        except Exception as e:
            self._report_failure("load_stale", key, e)
            return None

    async def is_valid(self, key: str, expiry_hours: Optional[float] = None) -> bool:
        """True when load() would return data; never evicts."""
        expiry_hours = self.default_expiry_hours if expiry_hours is None else expiry_hours

        try:
            entry = await self._read_entry(key)
            if entry is None:
                return False
            return entry.is_fresh(self._now_millis(), expiry_hours)
        except Exception as e:
            self._report_failure("is_valid", key, e)
            return False

    async def get_metadata(self, key: str) -> Optional[CacheMetadata]:
        """Timestamp, age and expiry information for one entry."""
        try:
            entry = await self._read_entry(key)
            if entry is None:
                return None
            return CacheMetadata.from_entry(key, entry, self._now_millis())
        except Exception as e:
            self._report_failure("get_metadata", key, e)
            return None

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    async def clear(self, key: str) -> bool:
        """Clear a single cache entry."""
        try:
            await self.store.remove(key)
            logger.performance.log_cache_operation("clear", key)
            return True
        except Exception as e:
            self._report_failure("clear", key, e)
            return False

    async def clear_multiple(self, keys: Iterable[str]) -> bool:
        """Clear several cache entries."""
        key_list = list(keys)
        try:
            await self.store.multi_remove(key_list)
            logger.debug(f"Multiple caches cleared: {key_list}")
            return True
        except Exception as e:
            self._report_failure("clear_multiple", ",".join(key_list), e)
            return False

    async def clear_all(self) -> bool:
        """Clear every recognised application key (the scan window is kept)."""
        try:
            app_keys = await self._present_app_keys()
            await self.store.multi_remove(app_keys)
            logger.info(f"All app cache cleared: {app_keys}")
            return True
        except Exception as e:
            self._report_failure("clear_all", None, e)
            return False

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    async def _present_app_keys(self) -> List[str]:
        return sorted(key for key in await self.store.keys() if CacheConfig.is_app_key(key))

    async def get_all_cache_info(self) -> Dict[str, CacheMetadata]:
        """Metadata for every recognised key holding a cache entry."""
        try:
            cache_info = {}
            for key in await self._present_app_keys():
                metadata = await self.get_metadata(key)
                if metadata:
                    cache_info[key] = metadata
            return cache_info
        except Exception as e:
            self._report_failure("get_all_cache_info", None, e)
            return {}

    async def get_cache_size(self) -> CacheSizeInfo:
        """Byte usage of recognised application keys."""
        try:
            app_keys = await self._present_app_keys()
            size_by_key = {}
            for key in app_keys:
                raw = await self.store.get_raw(key)
                if raw is not None:
                    size_by_key[key] = len(raw.encode("utf-8"))

            total_size = sum(size_by_key.values())
            return CacheSizeInfo(
                total_size=total_size,
                size_by_key=size_by_key,
                total_size_formatted=format_file_size(total_size),
                key_count=len(app_keys)
            )
        except Exception as e:
            self._report_failure("get_cache_size", None, e)
            return CacheSizeInfo()
