import httpx
import logging
import math
from typing import Any, Optional

from masjid_directory.core.config import settings
from masjid_directory.core.errors import GeocodingError, InputValidationError
from masjid_directory.models.dto import Coordinate

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def explicit_coordinate(latitude: Any, longitude: Any) -> Optional[Coordinate]:
    """
    Returns the caller's coordinate when it counts as provided.

    (0, 0) is treated as absent: it is what a zeroed client form submits,
    not a real location.
    """
    if not (_is_number(latitude) and _is_number(longitude)):
        return None
    if latitude == 0 and longitude == 0:
        return None
    return Coordinate(latitude=latitude, longitude=longitude)


async def geocode_address(address: str, client: Optional[httpx.AsyncClient] = None) -> Coordinate:
    """
    Geocodes a free-text address and returns the first candidate.

    Raises:
        GeocodingError: If the service fails or returns no usable candidate.
    """
    params = {"q": address, "api_key": settings.GEOCODE_API_KEY}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as own_client:
                response = await own_client.get(settings.GEOCODE_URL, params=params)
        else:
            response = await client.get(settings.GEOCODE_URL, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Geocoding API returned status error: {e.response.status_code}")
        raise GeocodingError("Unable to geocode address.")
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Geocoding request failed: {e}")
        raise GeocodingError("Unable to geocode address.")

    if not isinstance(data, list) or not data:
        logger.warning(f"Geocoding returned no candidates for address: {address!r}")
        raise GeocodingError("Unable to geocode address.")

    first = data[0]
    try:
        coordinate = Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Malformed geocoding candidate {first!r}: {e}")
        raise GeocodingError("Unable to geocode address.")

    logger.info(f"Geocoded {address!r} to {coordinate.latitude}, {coordinate.longitude}")
    return coordinate


async def resolve_coordinates(
    latitude: Any,
    longitude: Any,
    address: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> Coordinate:
    """
    Resolves the coordinate for a registration.

    Explicit coordinates win and are not checked against the address; the
    geocoding service is only called when they are absent or invalid.

    Raises:
        InputValidationError: If neither coordinates nor an address are given.
        GeocodingError: If the address cannot be geocoded.
    """
    coordinate = explicit_coordinate(latitude, longitude)
    if coordinate is not None:
        return coordinate

    if not address or not address.strip():
        raise InputValidationError("Address is required if coordinates are not provided.")

    return await geocode_address(address, client=client)
