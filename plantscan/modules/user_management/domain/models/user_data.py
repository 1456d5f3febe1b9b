# 📄 File: plantscan/modules/user_management/domain/models/user_data.py
# 🧭 Purpose (Layman Explanation):
# Describes what we remember about a user on this device: their name, their scans and the plant diseases we found
# 🧪 Purpose (Technical Summary):
# Pydantic models for the per-user data document, setup state, detected disease records and derived statistics
# 🔗 Dependencies:
# pydantic, datetime, typing
# 🔄 Connected Modules / Calls From:
# user_data_repository.py, user_data_repository_impl.py, ScanService, PlantCatalogService

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from plantscan.shared.utils.helpers import utc_now


class CurrentUser(BaseModel):
    """The signed-in user as reported by the auth provider."""
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class DetectedDisease(BaseModel):
    """A disease the analyzer reported for this user."""

    model_config = ConfigDict(extra="allow")

    disease_name: str
    confidence: Optional[float] = None
    detected_at: datetime = Field(default_factory=utc_now)


class DiseaseStats(BaseModel):
    """Summary counts shown on the history screen."""
    total: int = 0
    recent: int = 0
    high_confidence: int = 0


class SetupStatus(BaseModel):
    """Whether the user may enter the app and still has to finish setup."""
    allowed: bool
    needs_setup: bool


class UserData(BaseModel):
    """
    Per-user data document stored under user_data_<uid>.

    Unknown fields are preserved so partial updates from other screens
    survive a round trip.
    """

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    display_name: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    setup: bool = False
    setup_completed_at: Optional[datetime] = None
    role: str = "user"
    favorite_plants: Dict[str, Any] = Field(default_factory=dict)
    detected_diseases: List[DetectedDisease] = Field(default_factory=list)
    total_scans: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    last_scan_at: Optional[datetime] = None

    def disease_names(self) -> List[str]:
        return [disease.disease_name for disease in self.detected_diseases]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def needs_setup(self) -> bool:
        return not (self.setup and self.name and self.phone)
