"""
Eligibility Matcher

Answers two questions:
- which stores may receive this lead, nearest first
- which new leads may this store receive, nearest first

Both run the same two-step radius query: an indexed bounding-box prefilter on
latitude/longitude, then haversine_km() on the survivors. A store's distance to
a lead is the minimum over its active locations whose radius covers the lead.

Exclusivity: a lead is withheld from a store (or from every store of a
company) when any assignment created inside the restriction window shares one
of the lead's normalized phones. The window is measured in calendar months.
Tombstoned assignments still count.
"""
import logging

from django.conf import settings
from django.db.models import Max, Q

from allocation.exceptions import ValidationError
from allocation.geo import bounding_box, haversine_km
from allocation.models import (
    Contract, Lead, LeadAssignment, LeadStatus, OwnerType, Store, StoreLocation,
)
from allocation.utils import months_before, utcnow

logger = logging.getLogger(__name__)

DEFAULT_RESTRICTION_MONTHS = getattr(settings, "LEAD_RESTRICTION_MONTHS", 3)


class EligibilityMatcher:
    def __init__(self, restriction_months: int = DEFAULT_RESTRICTION_MONTHS):
        self.set_restriction_period(restriction_months)

    def set_restriction_period(self, months: int) -> None:
        if months is None or int(months) < 1:
            raise ValidationError("Restriction period must be at least 1 month", months=months)
        self.restriction_months = int(months)

    def window_start(self, as_of=None):
        return months_before(as_of or utcnow(), self.restriction_months)

    # ─── Exclusivity ─────────────────────────────────────────────────────────

    def _recent_assignments(self, lead: Lead, as_of=None):
        phones = lead.normalized_phones()
        if not phones:
            return LeadAssignment.all_objects.none()
        as_of = as_of or utcnow()
        return LeadAssignment.all_objects.filter(
            created_at__gte=self.window_start(as_of),
            created_at__lte=as_of,
            lead__phones__phone_normalized__in=phones,
        )

    def has_been_sent_to_store(self, lead: Lead, store: Store, as_of=None) -> bool:
        return self._recent_assignments(lead, as_of).filter(store=store).exists()

    def has_been_sent_to_company(self, lead: Lead, company, as_of=None) -> bool:
        company_id = getattr(company, "pk", company)
        return self._recent_assignments(lead, as_of).filter(store__company_id=company_id).exists()

    # ─── Lead → stores ───────────────────────────────────────────────────────

    def _contracted_store_filter(self) -> Q:
        active = Contract.objects.filter(is_active=True)
        store_owners = active.filter(owner_type=OwnerType.STORE).values("owner_id")
        company_owners = active.filter(owner_type=OwnerType.COMPANY).values("owner_id")
        return Q(store_id__in=store_owners) | Q(store__company_id__in=company_owners)

    def find_stores_for_lead(self, lead: Lead, as_of=None) -> list[tuple[Store, float]]:
        """
        Active stores with an active contract (their own or their company's)
        whose coverage includes the lead, excluding stores that received the
        same contact inside the restriction window. Sorted by (distance, store id).
        """
        if lead.latitude is None or lead.longitude is None:
            return []

        # The widest radius in use bounds the prefilter box
        max_radius = StoreLocation.objects.filter(is_active=True).aggregate(
            r=Max("coverage_radius")
        )["r"]
        if not max_radius:
            return []

        box = bounding_box(lead.latitude, lead.longitude, max_radius)
        candidates = (
            StoreLocation.objects
            .filter(
                self._contracted_store_filter(),
                is_active=True,
                store__is_active=True,
                store__deleted_at__isnull=True,
                **box.as_filter(),
            )
            .select_related("store")
        )

        recently_sent = set(
            self._recent_assignments(lead, as_of).values_list("store_id", flat=True)
        )

        best: dict = {}
        for location in candidates:
            if location.store_id in recently_sent:
                continue
            distance = haversine_km(
                location.latitude, location.longitude, lead.latitude, lead.longitude
            )
            if distance > location.coverage_radius:
                continue
            current = best.get(location.store_id)
            if current is None or distance < current[1]:
                best[location.store_id] = (location.store, distance)

        ranked = sorted(best.values(), key=lambda pair: (pair[1], str(pair[0].pk)))
        logger.debug("Lead %s: %d eligible store(s)", lead.pk, len(ranked))
        return ranked

    # ─── Store → leads ───────────────────────────────────────────────────────

    def find_leads_for_store(self, store: Store) -> list[tuple[Lead, float]]:
        """
        New, active leads covered by any of the store's active locations,
        excluding leads already assigned to any store of the same company.
        Sorted by (distance, lead id).
        """
        locations = list(store.locations.filter(is_active=True))
        if not locations:
            return []

        box_filter = Q()
        for location in locations:
            box = bounding_box(location.latitude, location.longitude, location.coverage_radius)
            box_filter |= Q(**box.as_filter())

        already_with_company = LeadAssignment.all_objects.filter(
            store__company_id=store.company_id
        ).values("lead_id")

        candidates = (
            Lead.objects
            .filter(box_filter, status=LeadStatus.NEW, is_active=True)
            .exclude(id__in=already_with_company)
        )

        ranked = []
        for lead in candidates:
            distances = [
                haversine_km(loc.latitude, loc.longitude, lead.latitude, lead.longitude)
                for loc in locations
            ]
            covered = [
                d for d, loc in zip(distances, locations) if d <= loc.coverage_radius
            ]
            if covered:
                ranked.append((lead, min(covered)))

        ranked.sort(key=lambda pair: (pair[1], str(pair[0].pk)))
        logger.debug("Store %s: %d eligible lead(s)", store.pk, len(ranked))
        return ranked
