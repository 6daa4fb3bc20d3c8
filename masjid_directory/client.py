"""
Async client for the directory API.

`find_nearby` runs the "centers near me" flow end to end: acquire the
caller's position through the geolocation tier ladder, fetch every masjid,
have the server rank them by distance, then sort locally.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from masjid_directory.core.config import settings
from masjid_directory.models.dto import Coordinate, LocatedEntity
from masjid_directory.services.distance import merge_distances, sort_masajid
from masjid_directory.services.geolocation import GeolocationResult, PositionProvider, acquire_position

logger = logging.getLogger(__name__)


class MasjidDirectoryClient:
    def __init__(
        self,
        base_url: str = settings.API_BASE_URL,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=settings.HTTP_TIMEOUT)

    async def __aenter__(self) -> "MasjidDirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_masajid(self) -> List[Dict[str, Any]]:
        response = await self._client.get("/masjid")
        response.raise_for_status()
        return response.json()["data"]

    async def calculate_distances(self, location: Coordinate, masajid: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Returns copies of `masajid` with a `distance` (miles) from the server."""
        if not masajid:
            return []
        stubs = [
            LocatedEntity(id=m.get("id"), latitude=m.get("latitude"), longitude=m.get("longitude")).model_dump()
            for m in masajid
        ]
        response = await self._client.post(
            "/masjid/distances",
            json={"userLatitude": location.latitude, "userLongitude": location.longitude, "masajid": stubs},
        )
        response.raise_for_status()
        return merge_distances(masajid, response.json())

    async def find_nearby(self, provider: Optional[PositionProvider], sort_by: str = "distance") -> "NearbyResult":
        """
        Raises:
            GeolocationError: If no position could be acquired.
            httpx.HTTPError: If the API call fails.
        """
        position = await acquire_position(provider)
        logger.info(f"Position acquired on tier {position.tier}: {position.coordinate.latitude}, {position.coordinate.longitude}")

        masajid = await self.calculate_distances(position.coordinate, await self.list_masajid())
        return NearbyResult(position=position, masajid=sort_masajid(masajid, sort_by))


@dataclass
class NearbyResult:
    position: GeolocationResult
    masajid: List[Dict[str, Any]]
