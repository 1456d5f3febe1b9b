from .uploads_repository import UploadsRepository
from .user_data_repository import UserDataRepository

__all__ = ["UploadsRepository", "UserDataRepository"]
