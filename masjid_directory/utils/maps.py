from typing import Optional
from urllib.parse import quote

from masjid_directory.models.dto import Coordinate

GOOGLE_MAPS_URL = "https://www.google.com/maps"


def _destination_query(latitude: float, longitude: float, address: Optional[str]) -> str:
    # Prefer the address so the map shows the place name rather than a pin
    if address:
        return quote(address, safe="")
    return f"{latitude},{longitude}"


def map_search_url(latitude: float, longitude: float, address: Optional[str] = None) -> str:
    return f"{GOOGLE_MAPS_URL}/search/?api=1&query={_destination_query(latitude, longitude, address)}"


def map_directions_url(
    latitude: float,
    longitude: float,
    address: Optional[str] = None,
    origin: Optional[Coordinate] = None,
) -> str:
    """Directions link; without an origin Google Maps starts from the viewer's location."""
    destination = _destination_query(latitude, longitude, address)
    if origin is not None:
        return f"{GOOGLE_MAPS_URL}/dir/{origin.latitude},{origin.longitude}/{destination}"
    return f"{GOOGLE_MAPS_URL}/dir/?api=1&destination={destination}"
