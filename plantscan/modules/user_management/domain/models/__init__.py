from .upload import UPLOAD_PENDING, UploadRecord
from .user_data import CurrentUser, DetectedDisease, DiseaseStats, SetupStatus, UserData

__all__ = [
    "CurrentUser",
    "DetectedDisease",
    "DiseaseStats",
    "SetupStatus",
    "UPLOAD_PENDING",
    "UploadRecord",
    "UserData",
]
