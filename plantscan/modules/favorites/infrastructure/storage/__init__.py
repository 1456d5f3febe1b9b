from .favorites_repository_impl import StorageFavoritesRepository

__all__ = ["StorageFavoritesRepository"]
