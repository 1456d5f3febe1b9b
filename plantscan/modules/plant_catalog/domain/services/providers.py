"""
Collaborators the plant catalog depends on.

The HTTP client and the device location API live outside this package; they
are consumed through these protocols only.
"""

from typing import Any, Dict, List, Optional, Protocol


class PlantDataClient(Protocol):
    """Remote plant data source."""

    async def get_plants(self) -> List[Dict[str, Any]]:
        """Fetch the plant list. Raises on network or server failure."""
        ...


class LocationProvider(Protocol):
    """Device location source."""

    async def get_current_location(self) -> Optional[Dict[str, Any]]:
        """
        Current position as a dict with latitude and longitude.

        Returns None when permission is denied.
        """
        ...
