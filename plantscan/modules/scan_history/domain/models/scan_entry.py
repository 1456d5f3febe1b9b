# 📄 File: plantscan/modules/scan_history/domain/models/scan_entry.py
# 🧭 Purpose (Layman Explanation):
# Describes one plant scan: the photo, what the AI thought it saw, when it happened and whether it worked
# 🧪 Purpose (Technical Summary):
# Domain model for a scan history entry with status lifecycle and prediction payload
# 🔗 Dependencies:
# pydantic, datetime, typing, enum
# 🔄 Connected Modules / Calls From:
# scan_history_repository.py, scan_history_repository_impl.py, scan_service.py

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from plantscan.shared.utils.helpers import generate_id, utc_now


class ScanStatus(str, Enum):
    """Scan outcome states"""
    PENDING = "pending"                # Image captured, analysis not finished
    INFERENCE_DONE = "inference_done"  # Model answered, post-processing pending
    COMPLETE = "complete"              # Analysis finished
    ERROR = "error"                    # Analysis failed

    @property
    def has_results(self) -> bool:
        return self in (ScanStatus.COMPLETE, ScanStatus.INFERENCE_DONE)

    @classmethod
    def from_reported(cls, value: Any) -> "ScanStatus":
        """Map a status reported by the analyzer; anything unknown means complete."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.COMPLETE


class ScanEntry(BaseModel):
    """A single scan in the history list (index 0 is the most recent)."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: generate_id("scan"))
    predictions: List[Dict[str, Any]] = Field(default_factory=list)
    image_uri: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
    status: ScanStatus = ScanStatus.COMPLETE
    upload_id: Optional[str] = None
