from .catalog_service import PlantCatalogService

__all__ = ["PlantCatalogService"]
