import logging
from datetime import date
from typing import Callable, List, Optional

import httpx

from masjid_directory.core.errors import DocumentValidationError, NotFoundError
from masjid_directory.models.dto import Masjid, MasjidCreate, MasjidUpdate
from masjid_directory.models.validation import normalize_masjid, validate_masjid
from masjid_directory.services.geocoding import resolve_coordinates
from masjid_directory.services.prayer_times import fetch_prayer_times
from masjid_directory.services.repository import MasjidRepository

logger = logging.getLogger(__name__)


class MasjidService:
    """
    Registration and maintenance of masjid documents.

    Registration runs strictly in sequence: resolve the coordinate, fetch
    the day's prayer times for it, validate, then persist.
    """

    def __init__(
        self,
        repository: MasjidRepository,
        http_client: Optional[httpx.AsyncClient] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.http_client = http_client
        self.today = today

    async def register(self, data: MasjidCreate) -> Masjid:
        coordinate = await resolve_coordinates(
            data.latitude, data.longitude, data.address, client=self.http_client
        )

        # Computed once for the registration day; not refreshed later
        prayer_times = await fetch_prayer_times(
            coordinate, self.today(), data.calculationMethod, client=self.http_client
        )

        doc = normalize_masjid({
            "name": data.name,
            "address": data.address,
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "calculationMethod": data.calculationMethod,
            "description": data.description,
            "phone": data.phone,
            "email": data.email,
            "services": data.services or [],
            "prayerTimes": prayer_times.model_dump(exclude_none=True),
        })

        errors = validate_masjid(doc)
        if errors:
            raise DocumentValidationError(errors)

        masjid = await self.repository.create(doc)
        logger.info(f"New masjid created: {masjid.name} (id={masjid.id})")
        return masjid

    async def list(self) -> List[Masjid]:
        return await self.repository.list()

    async def get(self, masjid_id: str) -> Masjid:
        masjid = await self.repository.get(masjid_id)
        if masjid is None:
            raise NotFoundError("Masjid not found")
        return masjid

    async def update(self, masjid_id: str, data: MasjidUpdate) -> Masjid:
        current = await self.get(masjid_id)

        changes = data.model_dump(exclude_unset=True)
        for field in ("services", "prayerTimes"):
            if field in changes and changes[field] is None:
                del changes[field]
        if "prayerTimes" in changes:
            changes["prayerTimes"] = {k: v for k, v in changes["prayerTimes"].items() if v is not None}

        doc = normalize_masjid({**current.model_dump(), **changes, "id": current.id})
        errors = validate_masjid(doc)
        if errors:
            raise DocumentValidationError(errors)

        masjid = await self.repository.replace(Masjid.model_validate(doc))
        logger.info(f"Masjid updated: {masjid.name} (id={masjid.id})")
        return masjid
