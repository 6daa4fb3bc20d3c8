# Prayer times are best-effort enrichment: any upstream failure yields an
# empty schedule and the registration still goes through.

import httpx
import logging
from datetime import date
from typing import Optional

from masjid_directory.core.config import settings
from masjid_directory.data.enums import calculation_method_index
from masjid_directory.models.dto import Coordinate, PrayerSchedule

logger = logging.getLogger(__name__)

# Response key -> stored key
TIMINGS_KEYS = {
    "Fajr": "fajr",
    "Dhuhr": "dhuhr",
    "Asr": "asr",
    "Maghrib": "maghrib",
    "Isha": "isha",
}


def format_timings_date(on_date: date) -> str:
    """D-M-YYYY without zero padding, e.g. 5-3-2025."""
    return f"{on_date.day}-{on_date.month}-{on_date.year}"


def build_timings_url(coordinate: Coordinate, on_date: date, calculation_method: Optional[str]) -> str:
    method = calculation_method_index(calculation_method)
    return (
        f"{settings.PRAYER_TIMES_URL}/{format_timings_date(on_date)}"
        f"?latitude={coordinate.latitude}&longitude={coordinate.longitude}&method={method}"
    )


def parse_timings(body: dict) -> PrayerSchedule:
    """Extracts the five daily prayers; a key the service left out stays None."""
    timings = body["data"]["timings"]
    return PrayerSchedule(**{ours: timings.get(theirs) for theirs, ours in TIMINGS_KEYS.items()})


async def fetch_prayer_times(
    coordinate: Coordinate,
    on_date: date,
    calculation_method: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> PrayerSchedule:
    url = build_timings_url(coordinate, on_date, calculation_method)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
        schedule = parse_timings(response.json())
    except httpx.HTTPStatusError as e:
        logger.error(f"Failed to fetch prayer times: {e.response.status_code} {e.response.reason_phrase}")
        return PrayerSchedule()
    except httpx.HTTPError as e:
        logger.error(f"Prayer times request failed: {e}")
        return PrayerSchedule()
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Malformed prayer times response: {e!r}")
        return PrayerSchedule()

    return schedule
