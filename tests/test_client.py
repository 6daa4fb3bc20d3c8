import asyncio
import json

import httpx
import pytest

from masjid_directory.client import MasjidDirectoryClient
from masjid_directory.models.dto import Coordinate
from masjid_directory.services.geolocation import GeolocationError, PositionError, PositionErrorCode

MASAJID = [
    {"id": "1", "name": "Far Masjid", "address": "1 North Rd", "latitude": 41.7128, "longitude": -74.006},
    {"id": "2", "name": "Near Masjid", "address": "2 Main St", "latitude": 40.72, "longitude": -74.006},
]


class FakeApi:
    def __init__(self):
        self.distance_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET" and request.url.path == "/api/masjid":
            return httpx.Response(200, json={"success": True, "count": len(MASAJID), "data": MASAJID})
        if request.method == "POST" and request.url.path == "/api/masjid/distances":
            body = json.loads(request.content)
            self.distance_requests.append(body)
            distances = {"1": 69.0976, "2": 0.4975}
            return httpx.Response(200, json=[{"id": m["id"], "distance": distances[m["id"]]} for m in body["masajid"]])
        return httpx.Response(404)


class FixedProvider:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)

    async def get_current_position(self, options):
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def run(api, action):
    async def _run():
        http = httpx.AsyncClient(base_url="http://directory.test/api", transport=httpx.MockTransport(api))
        async with MasjidDirectoryClient(client=http) as directory:
            return await action(directory)

    return asyncio.run(_run())


def test_find_nearby_sorts_by_distance():
    api = FakeApi()
    provider = FixedProvider(Coordinate(latitude=40.7128, longitude=-74.006))

    result = run(api, lambda directory: directory.find_nearby(provider))

    assert result.position.tier == 1
    assert [m["name"] for m in result.masajid] == ["Near Masjid", "Far Masjid"]
    assert result.masajid[0]["distance"] == 0.4975
    assert api.distance_requests[0]["userLatitude"] == 40.7128
    assert api.distance_requests[0]["masajid"][0] == {"id": "1", "latitude": 41.7128, "longitude": -74.006}


def test_find_nearby_can_sort_by_name():
    provider = FixedProvider(Coordinate(latitude=40.7128, longitude=-74.006))

    result = run(FakeApi(), lambda directory: directory.find_nearby(provider, sort_by="name"))

    assert [m["name"] for m in result.masajid] == ["Far Masjid", "Near Masjid"]


def test_find_nearby_propagates_denied_location():
    api = FakeApi()
    provider = FixedProvider(PositionError(PositionErrorCode.PERMISSION_DENIED))

    with pytest.raises(GeolocationError):
        run(api, lambda directory: directory.find_nearby(provider))
    assert api.distance_requests == []


def test_no_distance_call_for_empty_directory():
    api = FakeApi()

    result = run(api, lambda directory: directory.calculate_distances(Coordinate(latitude=0, longitude=0), []))

    assert result == []
    assert api.distance_requests == []
