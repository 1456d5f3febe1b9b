# 📄 File: plantscan/modules/favorites/domain/models/favorite.py
# 🧭 Purpose (Layman Explanation):
# Describes one plant the user starred: the plant's own details plus the moment it was added
# 🧪 Purpose (Technical Summary):
# Domain model for a favorite entry keyed by plant id; arbitrary plant fields are kept as extras
# 🔗 Dependencies:
# pydantic, datetime, typing
# 🔄 Connected Modules / Calls From:
# favorites_repository.py, favorites_repository_impl.py

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator


class FavoriteRecord(BaseModel):
    """
    A favorite plant.

    plant_id is unique within a user's collection; added_to_favorites_at is
    stamped once on insertion and never changed while the record exists.
    """

    model_config = ConfigDict(extra="allow")

    plant_id: str
    added_to_favorites_at: datetime

    @field_validator("plant_id", mode="before")
    @classmethod
    def coerce_plant_id(cls, v: Any) -> str:
        if v is None or str(v).strip() == "":
            raise ValueError("plant_id is required")
        return str(v)

    @property
    def plant_data(self) -> Mapping[str, Any]:
        """The plant fields without the favorites bookkeeping."""
        data = self.model_dump()
        data.pop("added_to_favorites_at", None)
        return data
