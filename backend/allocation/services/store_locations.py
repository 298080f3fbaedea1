"""Write path for store locations: minimum coverage radius and a single main location per store."""
import logging

from django.conf import settings
from django.db import transaction

from allocation.exceptions import BusinessRuleViolation, ValidationError
from allocation.models import StoreLocation

logger = logging.getLogger(__name__)

MIN_COVERAGE_RADIUS_KM = getattr(settings, "MIN_COVERAGE_RADIUS_KM", 10)


def validate_location(location: StoreLocation) -> None:
    if location.latitude is None or not -90 <= location.latitude <= 90:
        raise ValidationError("latitude out of range", latitude=location.latitude)
    if location.longitude is None or not -180 <= location.longitude <= 180:
        raise ValidationError("longitude out of range", longitude=location.longitude)
    if location.coverage_radius is None or location.coverage_radius < MIN_COVERAGE_RADIUS_KM:
        raise BusinessRuleViolation(
            f"Coverage radius must be at least {MIN_COVERAGE_RADIUS_KM} km",
            coverage_radius=location.coverage_radius,
        )


def save_location(location: StoreLocation) -> StoreLocation:
    validate_location(location)
    with transaction.atomic():
        if location.is_main:
            _unset_siblings(location)
        location.save()
    logger.info("Saved location %s for store %s", location.id, location.store_id)
    return location


def set_main_location(location: StoreLocation) -> StoreLocation:
    with transaction.atomic():
        _unset_siblings(location)
        location.is_main = True
        location.save(update_fields=["is_main", "updated_at"])
    logger.info("Location %s is now the main location of store %s", location.id, location.store_id)
    return location


def _unset_siblings(location: StoreLocation) -> None:
    (
        StoreLocation.objects
        .filter(store_id=location.store_id, is_main=True)
        .exclude(pk=location.pk)
        .update(is_main=False)
    )
