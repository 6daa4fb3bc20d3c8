from math import atan2, cos, floor, radians, sin, sqrt

# Earth's radius in miles, used for distances returned by the API
R_MILES = 3959.0
# Earth's radius in kilometers, used by the server-rendered detail page
R_KM = 6371.0


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    # Rounding can push `a` just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * atan2(sqrt(a), sqrt(1 - a))


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance in miles, rounded to 4 decimal places.

    Rounding is half-up, not banker's rounding.
    """
    distance = R_MILES * _central_angle(lat1, lon1, lat2, lon2)
    return floor(distance * 10000 + 0.5) / 10000


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers, unrounded."""
    return R_KM * _central_angle(lat1, lon1, lat2, lon2)
