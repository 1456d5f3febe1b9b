# 📄 File: plantscan/modules/user_management/domain/models/upload.py
# 🧭 Purpose (Layman Explanation):
# Describes one photo the user sent for analysis and how far along that analysis is
# 🧪 Purpose (Technical Summary):
# Domain model for a per-user upload record, created pending and merged as the scan progresses
# 🔗 Dependencies:
# pydantic, datetime, typing
# 🔄 Connected Modules / Calls From:
# uploads_repository.py, uploads_repository_impl.py, ScanService

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from plantscan.shared.utils.helpers import generate_id, utc_now

UPLOAD_PENDING = "pending"


class UploadRecord(BaseModel):
    """
    An image upload awaiting or holding analysis results.

    Status is free text: "pending" on creation, then whatever the scan
    workflow reports (complete, inference_done, error).
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: generate_id("upload"))
    status: str = UPLOAD_PENDING
    image_uri: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
