import locale
import logging
import math
import unicodedata
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from masjid_directory.core.errors import InputValidationError
from masjid_directory.models.dto import DistanceResult
from masjid_directory.utils.haversine import haversine_miles

logger = logging.getLogger(__name__)

SORT_KEYS = ("name", "address", "distance")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def rank_distances(origin_lat: Any, origin_lng: Any, entities: Any) -> List[DistanceResult]:
    """
    Computes the mile distance from the origin to every entity.

    Output order matches input order. An entity with a missing id or
    non-numeric coordinates gets `distance=None` and an error message; the
    rest of the batch is still ranked.

    Raises:
        InputValidationError: If the origin is not numeric or `entities` is
            not a non-empty list.
    """
    if not (_is_number(origin_lat) and _is_number(origin_lng)):
        raise InputValidationError("User latitude and longitude are required as numbers")

    if not isinstance(entities, list) or not entities:
        raise InputValidationError("Masajid array is required and cannot be empty")

    logger.info(
        f"Calculating distances from user location ({origin_lat}, {origin_lng}) to {len(entities)} masajid"
    )

    results: List[DistanceResult] = []
    for entity in entities:
        entity_id = _field(entity, "id")
        lat = _field(entity, "latitude")
        lng = _field(entity, "longitude")

        if not entity_id or not (_is_number(lat) and _is_number(lng)):
            logger.warning(f"Invalid masjid data: {entity!r}")
            results.append(DistanceResult(id=entity_id, distance=None, error="Invalid masjid coordinates"))
            continue

        results.append(DistanceResult(id=entity_id, distance=haversine_miles(origin_lat, origin_lng, lat, lng)))

    return results


def merge_distances(masajid: Iterable[Dict[str, Any]], ranked: Iterable[Any]) -> List[Dict[str, Any]]:
    """Copies each ranked distance onto the matching masjid dict (by id)."""
    by_id = {str(_field(r, "id")): _field(r, "distance") for r in ranked}
    merged = []
    for masjid in masajid:
        item = dict(masjid)
        key = str(item.get("id"))
        if key in by_id:
            item["distance"] = by_id[key]
        merged.append(item)
    return merged


def collation_key(value: Optional[str]) -> Tuple[str, str]:
    """
    Sort key approximating a locale-aware comparison.

    Case and accents are ignored first (NFKD with combining marks dropped,
    then casefolded), so "al-Noor" sorts with the A's and "Étoile" with the
    E's. Ties fall back to the process locale's collation.
    """
    text = value or ""
    base = "".join(c for c in unicodedata.normalize("NFKD", text) if not unicodedata.combining(c))
    return base.casefold(), locale.strxfrm(text)


def sort_masajid(items: Sequence[Any], sort_by: str) -> List[Any]:
    """
    Returns a sorted copy of `items`.

    A missing distance sorts as 0, so unlocated masajid appear alongside the
    nearest ones rather than last.
    """
    if sort_by in ("name", "address"):
        return sorted(items, key=lambda item: collation_key(_field(item, sort_by)))
    if sort_by == "distance":
        return sorted(items, key=lambda item: _field(item, "distance") or 0)
    return list(items)


def filter_masajid(items: Sequence[Any], query: Optional[str]) -> List[Any]:
    """Case-insensitive substring search over name and address."""
    if not query or not query.strip():
        return list(items)
    needle = query.lower()
    return [
        item for item in items
        if needle in (_field(item, "name") or "").lower() or needle in (_field(item, "address") or "").lower()
    ]


def format_distance(distance: Optional[float]) -> str:
    """Human readable distance in miles, used by the list page."""
    if distance is None:
        return "—"
    if distance < 1:
        return f"{round(distance * 1000)}m"
    if distance < 10:
        return f"{distance:.1f}mi"
    return f"{round(distance)}mi"
