"""
Cache envelope and diagnostics models.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from plantscan.shared.utils.formatters import format_relative_hours

CACHE_FORMAT_VERSION = "1.0"
MILLIS_PER_HOUR = 1000 * 60 * 60


class CacheEntry(BaseModel):
    """
    Envelope stored for every cached value.

    timestamp is set once per save and never rewritten; update() only
    stamps last_updated.
    """

    data: Any = None
    timestamp: int  # epoch milliseconds
    custom_expiry: Optional[float] = None  # hours
    version: str = CACHE_FORMAT_VERSION
    last_updated: Optional[int] = None

    def age_hours(self, now_millis: int) -> float:
        return (now_millis - self.timestamp) / MILLIS_PER_HOUR

    def effective_expiry(self, expiry_hours: float) -> float:
        """Per-entry expiry wins over the caller's default."""
        if self.custom_expiry is not None:
            return self.custom_expiry
        return expiry_hours

    def is_fresh(self, now_millis: int, expiry_hours: float) -> bool:
        return self.age_hours(now_millis) < self.effective_expiry(expiry_hours)


class CacheMetadata(BaseModel):
    """Diagnostics for one cache entry ("cached 3 hours ago")."""

    key: str
    timestamp: int
    age_hours: float
    custom_expiry: Optional[float] = None
    version: str = CACHE_FORMAT_VERSION
    created_at: str

    @classmethod
    def from_entry(cls, key: str, entry: CacheEntry, now_millis: int) -> "CacheMetadata":
        created = datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc)
        return cls(
            key=key,
            timestamp=entry.timestamp,
            age_hours=entry.age_hours(now_millis),
            custom_expiry=entry.custom_expiry,
            version=entry.version,
            created_at=created.isoformat(),
        )

    @property
    def age_text(self) -> str:
        return format_relative_hours(self.age_hours)


class CacheSizeInfo(BaseModel):
    """Byte usage of recognised application keys."""

    total_size: int = 0
    size_by_key: Dict[str, int] = Field(default_factory=dict)
    total_size_formatted: str = "0 B"
    key_count: int = 0
