import asyncio
import sys

from masjid_directory.client import MasjidDirectoryClient
from masjid_directory.core.config import settings
from masjid_directory.logging import configure_logging
from masjid_directory.services.distance import format_distance
from masjid_directory.services.geolocation import GeolocationError, IPGeolocationProvider

# Prints the closest masajid to this machine's (IP based) location.
# Usage: python find_nearby.py [limit]

async def find_nearby(limit: int):
    async with MasjidDirectoryClient(settings.API_BASE_URL) as client:
        try:
            result = await client.find_nearby(IPGeolocationProvider())
        except GeolocationError as e:
            print(f"Could not determine your location ({e.kind.value}): {e.message}")
            return 1

    coordinate = result.position.coordinate
    print(f"Your location: {coordinate.latitude}, {coordinate.longitude} (tier {result.position.tier})")
    for masjid in result.masajid[:limit]:
        print(f"{format_distance(masjid.get('distance')):>8}  {masjid['name']}  ({masjid['address']})")
    return 0

if __name__ == "__main__":
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else 5
    configure_logging()
    sys.exit(asyncio.run(find_nearby(limit)))
