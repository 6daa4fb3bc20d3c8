import math

import pytest

from masjid_directory.utils.haversine import haversine_km, haversine_miles

NEW_YORK = (40.7128, -74.0060)
LONDON = (51.5074, -0.1278)


def test_mile_distance_is_symmetric():
    assert haversine_miles(*NEW_YORK, *LONDON) == haversine_miles(*LONDON, *NEW_YORK)


def test_mile_distance_to_self_is_zero():
    assert haversine_miles(*NEW_YORK, *NEW_YORK) == 0


def test_one_degree_of_latitude_at_equator_is_about_69_miles():
    assert haversine_miles(0.0, 0.0, 1.0, 0.0) == pytest.approx(69.0, abs=0.5)


@pytest.mark.parametrize(
    "a, b",
    [
        (NEW_YORK, LONDON),
        ((0.0, 0.0), (1.0, 0.0)),
        ((21.4225, 39.8262), (24.4672, 39.6111)),
        ((-33.8688, 151.2093), (35.6762, 139.6503)),
    ],
)
def test_mile_distance_has_at_most_four_decimals(a, b):
    scaled = haversine_miles(*a, *b) * 10000
    assert scaled == pytest.approx(round(scaled), abs=1e-6)


def test_kilometer_variant_is_unrounded_and_uses_km_radius():
    km = haversine_km(0.0, 0.0, 1.0, 0.0)
    assert km == pytest.approx(111.195, abs=0.01)
    assert km != round(km, 4)
    # Same arc, different radius: never the mile figure
    assert km != haversine_miles(0.0, 0.0, 1.0, 0.0)


@pytest.mark.parametrize("a, b", [((8.0, -179.0), (-8.0, 1.0)), ((0.0, 0.0), (0.0, 180.0)), ((90.0, 0.0), (-90.0, 0.0))])
def test_antipodal_points_are_half_the_circumference(a, b):
    assert haversine_miles(*a, *b) == pytest.approx(math.pi * 3959.0, abs=1e-3)
    assert haversine_km(*a, *b) == pytest.approx(math.pi * 6371.0, abs=1e-6)
