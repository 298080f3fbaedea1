"""Tests for allocation/geo.py."""
import pytest

from allocation.geo import bounding_box, haversine_km

from tests.conftest import RIO, SAO_PAULO


def test_haversine_zero_distance():
    assert haversine_km(*SAO_PAULO, *SAO_PAULO) == 0


def test_haversine_sao_paulo_to_rio():
    distance = haversine_km(*SAO_PAULO, *RIO)
    assert 350 < distance < 370


def test_haversine_is_symmetric():
    assert haversine_km(*SAO_PAULO, *RIO) == pytest.approx(haversine_km(*RIO, *SAO_PAULO))


def test_bounding_box_contains_circle_edge():
    box = bounding_box(*SAO_PAULO, 50)
    # A point 49 km due north and due east must be inside the box
    north = (SAO_PAULO[0] + 49 / 111.045, SAO_PAULO[1])
    assert box.min_lat <= north[0] <= box.max_lat
    assert haversine_km(*SAO_PAULO, *north) < 50
    assert box.min_lon < SAO_PAULO[1] < box.max_lon


def test_bounding_box_excludes_far_points():
    box = bounding_box(*SAO_PAULO, 50)
    assert not (box.min_lat <= RIO[0] <= box.max_lat and box.min_lon <= RIO[1] <= box.max_lon)


def test_bounding_box_near_pole_spans_all_longitudes():
    box = bounding_box(89.9, 10.0, 50)
    assert (box.min_lon, box.max_lon) == (-180.0, 180.0)


def test_bounding_box_as_filter_prefix():
    lookups = bounding_box(0, 0, 10).as_filter("locations__")
    assert set(lookups) == {
        "locations__latitude__gte", "locations__latitude__lte",
        "locations__longitude__gte", "locations__longitude__lte",
    }
