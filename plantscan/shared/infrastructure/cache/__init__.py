"""
Timestamped cache store with fresh, stale and expired reads.
"""

from .cache_manager import DEFAULT_EXPIRY_HOURS, CacheManager
from .models import CacheEntry, CacheMetadata, CacheSizeInfo

__all__ = [
    "CacheManager",
    "CacheEntry",
    "CacheMetadata",
    "CacheSizeInfo",
    "DEFAULT_EXPIRY_HOURS",
]
