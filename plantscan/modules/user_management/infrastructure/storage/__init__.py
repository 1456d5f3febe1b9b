from .app_flags import AppFlags
from .uploads_repository_impl import StorageUploadsRepository, uploads_key
from .user_data_repository_impl import StorageUserDataRepository, user_data_key

__all__ = [
    "AppFlags",
    "StorageUploadsRepository",
    "StorageUserDataRepository",
    "uploads_key",
    "user_data_key",
]
