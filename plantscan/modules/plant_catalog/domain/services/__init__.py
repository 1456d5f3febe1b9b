from .providers import LocationProvider, PlantDataClient

__all__ = ["LocationProvider", "PlantDataClient"]
