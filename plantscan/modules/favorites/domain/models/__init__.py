from .favorite import FavoriteRecord

__all__ = ["FavoriteRecord"]
