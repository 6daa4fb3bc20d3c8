# Server-rendered pages: the searchable list and a masjid detail page.

import os
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from masjid_directory.core.errors import InputValidationError, NotFoundError
from masjid_directory.models.dto import Coordinate
from masjid_directory.services.distance import (
    SORT_KEYS,
    filter_masajid,
    format_distance,
    merge_distances,
    rank_distances,
    sort_masajid,
)
from masjid_directory.services.masjid_service import MasjidService
from masjid_directory.api.routes import get_masjid_service
from masjid_directory.utils.haversine import haversine_km
from masjid_directory.utils.maps import map_directions_url, map_search_url

router = APIRouter()

templates_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "templates"))
templates = Jinja2Templates(directory=templates_dir)
templates.env.filters["distance"] = format_distance


def _origin(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinate]:
    if lat is None or lng is None:
        return None
    return Coordinate(latitude=lat, longitude=lng)


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    q: Optional[str] = None,
    sort: str = "name",
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    masjids: MasjidService = Depends(get_masjid_service),
):
    all_items = [m.model_dump() for m in await masjids.list()]
    items = filter_masajid(all_items, q)

    origin = _origin(lat, lng)
    if origin is not None and items:
        try:
            items = merge_distances(items, rank_distances(origin.latitude, origin.longitude, items))
        except InputValidationError:
            origin = None

    if sort not in SORT_KEYS or (sort == "distance" and origin is None):
        sort = "name"

    context = {
        "masajid": sort_masajid(items, sort),
        "total": len(all_items),
        "query": q or "",
        "sort": sort,
        "origin": origin,
        "sort_keys": SORT_KEYS,
    }
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/masjid/{masjid_id}", response_class=HTMLResponse)
async def masjid_detail(
    request: Request,
    masjid_id: str,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    masjids: MasjidService = Depends(get_masjid_service),
):
    try:
        masjid = await masjids.get(masjid_id)
    except NotFoundError:
        return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)
    origin = _origin(lat, lng)

    distance_km = None
    if origin is not None:
        distance_km = haversine_km(origin.latitude, origin.longitude, masjid.latitude, masjid.longitude)

    context = {
        "masjid": masjid,
        "origin": origin,
        "distance_km": distance_km,
        "search_url": map_search_url(masjid.latitude, masjid.longitude, masjid.address),
        "directions_url": map_directions_url(masjid.latitude, masjid.longitude, masjid.address, origin),
    }
    return templates.TemplateResponse(request, "masjid.html", context)
