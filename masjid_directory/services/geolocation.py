"""
Current-position acquisition for clients of the directory.

`acquire_position` walks a fixed ladder of progressively relaxed position
options. Timeouts and unavailable positions move on to the next tier; any
other failure (a permission decision, an unknown error) ends the ladder at
once since retrying cannot change it.
"""

import httpx
import logging
import time
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Protocol, Tuple

from masjid_directory.core.config import settings
from masjid_directory.models.dto import Coordinate

logger = logging.getLogger(__name__)


class PositionErrorCode(IntEnum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


class GeolocationErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool
    timeout_ms: int
    maximum_age_ms: int


TIERS: Tuple[PositionOptions, ...] = (
    PositionOptions(enable_high_accuracy=True, timeout_ms=15000, maximum_age_ms=0),
    PositionOptions(enable_high_accuracy=False, timeout_ms=10000, maximum_age_ms=300000),
    PositionOptions(enable_high_accuracy=False, timeout_ms=5000, maximum_age_ms=600000),
)

RETRYABLE_CODES = (PositionErrorCode.TIMEOUT, PositionErrorCode.POSITION_UNAVAILABLE)


class PositionError(Exception):
    """Raised by a provider for a single position request."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"position error {code}")
        self.code = code
        self.message = message


class GeolocationError(Exception):
    """Terminal failure of `acquire_position`."""

    def __init__(self, kind: GeolocationErrorKind, message: str, code: int, exhausted: bool = False):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        # True when every tier was tried, as opposed to a single request timing out
        self.exhausted = exhausted


@dataclass(frozen=True)
class GeolocationResult:
    coordinate: Coordinate
    tier: int


class PositionProvider(Protocol):
    async def get_current_position(self, options: PositionOptions) -> Coordinate: ...


def _terminal_error(error: PositionError) -> GeolocationError:
    if error.code == PositionErrorCode.PERMISSION_DENIED:
        return GeolocationError(
            GeolocationErrorKind.PERMISSION_DENIED,
            "Location access denied. Please check your browser permissions.",
            error.code,
        )
    if error.code == PositionErrorCode.POSITION_UNAVAILABLE:
        return GeolocationError(
            GeolocationErrorKind.POSITION_UNAVAILABLE, "Location information unavailable.", error.code
        )
    if error.code == PositionErrorCode.TIMEOUT:
        return GeolocationError(GeolocationErrorKind.TIMEOUT, "Location request timed out.", error.code)
    return GeolocationError(GeolocationErrorKind.UNKNOWN, error.message or str(error), error.code)


async def acquire_position(
    provider: Optional[PositionProvider],
    tiers: Tuple[PositionOptions, ...] = TIERS,
) -> GeolocationResult:
    if provider is None:
        raise GeolocationError(
            GeolocationErrorKind.UNKNOWN, "Geolocation is not supported by this browser.", 0
        )

    tier = 0
    while tier < len(tiers):
        options = tiers[tier]
        try:
            coordinate = await provider.get_current_position(options)
        except PositionError as e:
            if e.code in RETRYABLE_CODES:
                logger.info(f"Geolocation tier {tier + 1} failed with code {e.code}, relaxing options")
                tier += 1
                continue
            raise _terminal_error(e)
        except Exception as e:
            logger.warning(f"Geolocation provider failed on tier {tier + 1}: {e!r}")
            raise GeolocationError(GeolocationErrorKind.UNKNOWN, str(e) or type(e).__name__, 0) from e
        return GeolocationResult(coordinate=coordinate, tier=tier + 1)

    raise GeolocationError(
        GeolocationErrorKind.TIMEOUT,
        "Failed to get location after multiple attempts.",
        PositionErrorCode.TIMEOUT,
        exhausted=True,
    )


class IPGeolocationProvider:
    """
    Position provider for non-browser clients, backed by an IP lookup service.

    The service is expected to answer with JSON carrying `latitude` and
    `longitude`. Accuracy hints are ignored; the tier timeout is honoured and
    the last position is reused while it is younger than `maximum_age_ms`.
    """

    def __init__(self, url: str = settings.IP_GEOLOCATION_URL, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._client = client
        self._cached: Optional[Coordinate] = None
        self._cached_at: float = 0.0

    async def _fetch(self, timeout: float) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.url, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.get(self.url)

    async def get_current_position(self, options: PositionOptions) -> Coordinate:
        now = time.monotonic()
        if self._cached is not None and (now - self._cached_at) * 1000 < options.maximum_age_ms:
            return self._cached

        try:
            response = await self._fetch(options.timeout_ms / 1000)
        except httpx.TimeoutException as e:
            raise PositionError(PositionErrorCode.TIMEOUT, "Location request timed out.") from e
        except httpx.HTTPError as e:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, str(e)) from e

        if response.status_code in (401, 403):
            raise PositionError(PositionErrorCode.PERMISSION_DENIED, "IP geolocation service refused the request.")
        if response.is_error:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, f"IP geolocation returned {response.status_code}")

        try:
            body = response.json()
            coordinate = Coordinate(latitude=float(body["latitude"]), longitude=float(body["longitude"]))
        except (ValueError, KeyError, TypeError) as e:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "Location information unavailable.") from e

        self._cached = coordinate
        self._cached_at = now
        return coordinate
