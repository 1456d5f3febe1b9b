# 📄 File: plantscan/modules/plant_catalog/domain/models/catalog.py
# 🧭 Purpose (Layman Explanation):
# Describes what the home screen gets back when it asks for plants or location: the data,
# where it came from, whether we are offline, and a message to show the user
# 🧪 Purpose (Technical Summary):
# Result models for cache-first catalog loads, including source provenance and user notices
# 🔗 Dependencies:
# pydantic, enum, typing
# 🔄 Connected Modules / Calls From:
# PlantCatalogService

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CatalogSource(str, Enum):
    """Where a load result came from"""
    FRESH_CACHE = "fresh_cache"    # Cached copy within its expiry window
    REMOTE = "remote"              # Just fetched from the remote source
    STALE_CACHE = "stale_cache"    # Expired cached copy (offline fallback)
    NONE = "none"                  # Nothing available


class NoticeType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """User-facing message describing how data was loaded."""
    type: NoticeType
    title: str
    message: str


class CatalogLoadResult(BaseModel):
    """Plant list plus provenance."""
    plants: List[Dict[str, Any]] = Field(default_factory=list)
    source: CatalogSource = CatalogSource.NONE
    is_offline: bool = False
    notice: Optional[Notice] = None

    @property
    def has_data(self) -> bool:
        return bool(self.plants)


class LocationLoadResult(BaseModel):
    """User location plus provenance."""
    location: Optional[Dict[str, Any]] = None
    source: CatalogSource = CatalogSource.NONE
    is_offline: bool = False
    notice: Optional[Notice] = None
