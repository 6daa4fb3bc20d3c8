import asyncio

import httpx
import pytest

from masjid_directory.models.dto import Coordinate
from masjid_directory.services.geolocation import (
    TIERS,
    GeolocationError,
    GeolocationErrorKind,
    IPGeolocationProvider,
    PositionError,
    PositionErrorCode,
    acquire_position,
)

LONDON = Coordinate(latitude=51.5, longitude=-0.12)


class ScriptedProvider:
    """Answers each position request with the next scripted outcome."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def get_current_position(self, options):
        self.calls.append(options)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_first_tier_success():
    provider = ScriptedProvider(LONDON)

    result = asyncio.run(acquire_position(provider))

    assert result.coordinate == LONDON
    assert result.tier == 1
    assert provider.calls == [TIERS[0]]


def test_timeouts_relax_to_later_tiers():
    provider = ScriptedProvider(
        PositionError(PositionErrorCode.TIMEOUT),
        PositionError(PositionErrorCode.TIMEOUT),
        LONDON,
    )

    result = asyncio.run(acquire_position(provider))

    assert result.tier == 3
    assert result.coordinate == LONDON
    assert provider.calls == list(TIERS)


def test_tier_options_relax_monotonically():
    assert TIERS[0].enable_high_accuracy is True
    assert [t.timeout_ms for t in TIERS] == [15000, 10000, 5000]
    assert [t.maximum_age_ms for t in TIERS] == [0, 300000, 600000]


def test_unavailable_position_is_retried():
    provider = ScriptedProvider(PositionError(PositionErrorCode.POSITION_UNAVAILABLE), LONDON)

    assert asyncio.run(acquire_position(provider)).tier == 2


def test_permission_denied_stops_immediately():
    provider = ScriptedProvider(PositionError(PositionErrorCode.PERMISSION_DENIED), LONDON, LONDON)

    with pytest.raises(GeolocationError) as exc_info:
        asyncio.run(acquire_position(provider))

    assert exc_info.value.kind is GeolocationErrorKind.PERMISSION_DENIED
    assert exc_info.value.code == 1
    assert not exc_info.value.exhausted
    assert len(provider.calls) == 1


def test_unrecognised_code_is_unknown():
    provider = ScriptedProvider(PositionError(99, "sensor exploded"), LONDON)

    with pytest.raises(GeolocationError) as exc_info:
        asyncio.run(acquire_position(provider))

    assert exc_info.value.kind is GeolocationErrorKind.UNKNOWN
    assert exc_info.value.message == "sensor exploded"
    assert len(provider.calls) == 1


def test_unexpected_provider_failure_is_unknown():
    provider = ScriptedProvider(RuntimeError("GPS driver crashed"), LONDON)

    with pytest.raises(GeolocationError) as exc_info:
        asyncio.run(acquire_position(provider))

    assert exc_info.value.kind is GeolocationErrorKind.UNKNOWN
    assert exc_info.value.code == 0
    assert exc_info.value.message == "GPS driver crashed"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert len(provider.calls) == 1


def test_exhausted_ladder_reports_timeout():
    provider = ScriptedProvider(
        PositionError(PositionErrorCode.TIMEOUT),
        PositionError(PositionErrorCode.POSITION_UNAVAILABLE),
        PositionError(PositionErrorCode.TIMEOUT),
    )

    with pytest.raises(GeolocationError) as exc_info:
        asyncio.run(acquire_position(provider))

    error = exc_info.value
    assert error.kind is GeolocationErrorKind.TIMEOUT
    assert error.code == PositionErrorCode.TIMEOUT
    assert error.exhausted
    assert error.message == "Failed to get location after multiple attempts."
    assert len(provider.calls) == 3


def test_missing_provider_is_unsupported():
    with pytest.raises(GeolocationError) as exc_info:
        asyncio.run(acquire_position(None))

    assert exc_info.value.kind is GeolocationErrorKind.UNKNOWN
    assert "not supported" in exc_info.value.message


def ip_position(handler, options=TIERS[0]):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = IPGeolocationProvider(url="https://ip.example/json/", client=client)
            return await provider.get_current_position(options)

    return asyncio.run(_run())


def test_ip_provider_reads_coordinates():
    coordinate = ip_position(lambda request: httpx.Response(200, json={"latitude": 51.5, "longitude": -0.12, "city": "London"}))

    assert coordinate == LONDON


@pytest.mark.parametrize(
    "handler, code",
    [
        (lambda request: httpx.Response(403, json={"error": True}), PositionErrorCode.PERMISSION_DENIED),
        (lambda request: httpx.Response(429), PositionErrorCode.POSITION_UNAVAILABLE),
        (lambda request: httpx.Response(200, json={"city": "London"}), PositionErrorCode.POSITION_UNAVAILABLE),
        (lambda request: httpx.Response(200, text="<html>"), PositionErrorCode.POSITION_UNAVAILABLE),
    ],
)
def test_ip_provider_error_mapping(handler, code):
    with pytest.raises(PositionError) as exc_info:
        ip_position(handler)

    assert exc_info.value.code == code


def test_ip_provider_timeout_maps_to_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(PositionError) as exc_info:
        ip_position(handler)

    assert exc_info.value.code == PositionErrorCode.TIMEOUT


def test_ip_provider_reuses_recent_position():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"latitude": 51.5, "longitude": -0.12})

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = IPGeolocationProvider(url="https://ip.example/json/", client=client)
            first = await provider.get_current_position(TIERS[1])
            second = await provider.get_current_position(TIERS[1])
            fresh = await provider.get_current_position(TIERS[0])
            return first, second, fresh

    first, second, fresh = asyncio.run(_run())

    assert first == second == fresh == LONDON
    assert len(calls) == 2


def test_ladder_over_ip_provider_survives_one_timeout():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectTimeout("slow", request=request)
        return httpx.Response(200, json={"latitude": 51.5, "longitude": -0.12})

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await acquire_position(IPGeolocationProvider(url="https://ip.example/json/", client=client))

    result = asyncio.run(_run())

    assert result.tier == 2
    assert result.coordinate == LONDON
