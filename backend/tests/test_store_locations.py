"""Tests for allocation/services/store_locations.py and StoreLocation.covers."""
import pytest

from allocation.exceptions import BusinessRuleViolation, ValidationError
from allocation.models import StoreLocation
from allocation.services.store_locations import save_location, set_main_location

from tests.conftest import RIO, SAO_PAULO

pytestmark = pytest.mark.django_db


def test_minimum_coverage_radius(company, make_store):
    store = make_store(company)
    with pytest.raises(BusinessRuleViolation):
        save_location(StoreLocation(store=store, latitude=SAO_PAULO[0], longitude=SAO_PAULO[1], coverage_radius=5))


def test_coordinates_must_be_in_range(company, make_store):
    store = make_store(company)
    with pytest.raises(ValidationError):
        save_location(StoreLocation(store=store, latitude=-91, longitude=0, coverage_radius=10))


def test_single_main_location(company, make_store):
    store = make_store(company)
    original = store.main_location()

    second = save_location(StoreLocation(
        store=store, latitude=-23.6, longitude=-46.7, coverage_radius=20, is_main=True,
    ))
    original.refresh_from_db()
    assert not original.is_main
    assert store.main_location() == second

    set_main_location(original)
    second.refresh_from_db()
    assert store.locations.filter(is_main=True).count() == 1
    assert store.main_location() == original


def test_covers(company, make_store):
    location = make_store(company, at=SAO_PAULO, radius=10).main_location()
    assert location.covers(-23.56, -46.64)
    assert not location.covers(*RIO)
