"""
Tests for allocation/services/eligibility.py.

Covers:
- radius coverage (São Paulo / Rio scenario)
- contract requirements (own contract, company contract, inactive contract)
- exclusivity window by normalized phone, store and company level
- ranking by distance
"""
from dateutil.relativedelta import relativedelta

import pytest

from allocation.exceptions import ValidationError
from allocation.models import Contract, Lead, LeadAssignment, LeadStatus, StoreLocation
from allocation.services.assignments import create_assignment
from allocation.services.eligibility import EligibilityMatcher

from tests.conftest import RIO, SAO_PAULO

pytestmark = pytest.mark.django_db


def _ids(pairs):
    return [obj.id for obj, _ in pairs]


def test_restriction_period_must_be_at_least_one_month():
    with pytest.raises(ValidationError):
        EligibilityMatcher(0)
    assert EligibilityMatcher(1).restriction_months == 1


def test_lead_in_sao_paulo_reaches_only_sao_paulo_store(
    company, other_company, make_store, make_contract, make_lead, matcher
):
    sp = make_store(company, name="SP", at=SAO_PAULO, radius=50)
    rio = make_store(other_company, name="Rio", at=RIO, radius=50)
    make_contract(sp)
    make_contract(rio)

    lead = make_lead(at=(-23.56, -46.64))
    stores = matcher.find_stores_for_lead(lead)

    assert _ids(stores) == [sp.id]
    assert stores[0][1] < 5


def test_radius_scenario_same_point_and_rio(company, other_company, make_store, make_contract, make_lead, matcher):
    here = make_store(company, name="Here", at=SAO_PAULO, radius=10)
    rio = make_store(other_company, name="Rio", at=RIO, radius=10)
    make_contract(here)
    make_contract(rio)

    stores = matcher.find_stores_for_lead(make_lead(at=SAO_PAULO))
    assert stores == [(here, 0.0)]
    assert rio.id not in _ids(stores)


def test_store_without_active_contract_is_excluded(company, make_store, make_contract, make_lead, matcher):
    store = make_store(company)
    contract = make_contract(store)
    Contract.objects.filter(pk=contract.pk).update(is_active=False)

    assert matcher.find_stores_for_lead(make_lead()) == []


def test_store_covered_by_company_contract(company, make_store, make_contract, make_lead, matcher):
    store = make_store(company)
    make_contract(company)
    assert _ids(matcher.find_stores_for_lead(make_lead())) == [store.id]


def test_inactive_store_and_location_are_excluded(company, make_store, make_contract, make_lead, matcher):
    make_contract(company)
    make_store(company, name="Closed", is_active=False)
    quiet = make_store(company, name="Quiet")
    StoreLocation.objects.filter(store=quiet).update(is_active=False)

    assert matcher.find_stores_for_lead(make_lead()) == []


def test_lead_outside_radius_is_excluded(company, make_store, make_contract, make_lead, matcher):
    store = make_store(company, at=SAO_PAULO, radius=10)
    make_contract(store)
    # ~15 km south of the store
    lead = make_lead(at=(SAO_PAULO[0] - 0.135, SAO_PAULO[1]))
    assert matcher.find_stores_for_lead(lead) == []


def test_stores_ranked_by_nearest_location(company, other_company, make_store, make_contract, make_lead, matcher):
    far = make_store(company, name="Far", at=(-23.65, -46.70), radius=30)
    near = make_store(other_company, name="Near", at=(-23.555, -46.635), radius=30)
    make_contract(far)
    make_contract(near)
    # A second location brings "Far" closer than its main one, still farther than "Near"
    StoreLocation.objects.create(store=far, latitude=-23.58, longitude=-46.65, coverage_radius=30)

    stores = matcher.find_stores_for_lead(make_lead(at=SAO_PAULO))
    assert _ids(stores) == [near.id, far.id]
    assert stores[0][1] <= stores[1][1]
    assert stores[1][1] < 5


def test_exclusivity_window_by_phone(store, make_lead, matcher):
    first = make_lead(phone="(11) 98765-4321")
    assignment = create_assignment(first, store, matcher)
    sent_at = assignment.created_at

    # Same contact, different formatting, arriving as a new lead
    again = make_lead(phone="+55 11 98765-4321")

    assert matcher.has_been_sent_to_store(again, store, as_of=sent_at + relativedelta(months=1))
    assert not matcher.has_been_sent_to_store(again, store, as_of=sent_at + relativedelta(months=4))

    assert matcher.find_stores_for_lead(again, as_of=sent_at + relativedelta(months=1)) == []
    assert _ids(matcher.find_stores_for_lead(again, as_of=sent_at + relativedelta(months=4))) == [store.id]


def test_exclusivity_ignores_assignments_after_as_of(store, make_lead, matcher):
    first = make_lead(phone="(11) 98765-4321")
    sent_at = create_assignment(first, store, matcher).created_at
    again = make_lead(phone="(11) 98765-4321")

    assert not matcher.has_been_sent_to_store(again, store, as_of=sent_at - relativedelta(days=1))
    assert not matcher.has_been_sent_to_company(again, store.company, as_of=sent_at - relativedelta(days=1))
    assert _ids(matcher.find_stores_for_lead(again, as_of=sent_at - relativedelta(days=1))) == [store.id]
    assert matcher.has_been_sent_to_store(again, store, as_of=sent_at)


def test_exclusivity_counts_tombstoned_assignments(store, make_lead, matcher):
    lead = make_lead(phone="(11) 91111-2222")
    create_assignment(lead, store, matcher).soft_delete()
    again = make_lead(phone="(11) 91111-2222")
    assert matcher.has_been_sent_to_store(again, store)


def test_has_been_sent_to_company(company, other_company, store, make_store, make_lead, matcher):
    sibling = make_store(company, name="Sibling")
    outsider = make_store(other_company, name="Outsider")
    lead = make_lead(phone="(11) 93333-4444")
    create_assignment(lead, store, matcher)

    assert matcher.has_been_sent_to_company(lead, company)
    assert not matcher.has_been_sent_to_company(lead, other_company)
    assert not matcher.has_been_sent_to_store(lead, sibling)
    assert not matcher.has_been_sent_to_store(lead, outsider)


def test_find_leads_for_store(store, make_lead, matcher):
    near = make_lead(at=(-23.551, -46.634))
    nearer = make_lead(at=SAO_PAULO)
    make_lead(at=RIO)
    archived = make_lead(at=SAO_PAULO)
    Lead.objects.filter(pk=archived.pk).update(status=LeadStatus.ARCHIVED)

    leads = matcher.find_leads_for_store(store)
    assert _ids(leads) == [nearer.id, near.id]
    assert all(distance <= 50 for _, distance in leads)


def test_find_leads_for_store_skips_sent_and_company_assigned(
    company, other_company, store, make_store, make_lead, matcher
):
    lead = make_lead()
    create_assignment(lead, store, matcher)
    # Back to "new" so only the company exclusion hides it
    Lead.objects.filter(pk=lead.pk).update(status=LeadStatus.NEW)

    sibling = make_store(company, name="Sibling")
    outsider = make_store(other_company, name="Outsider")

    assert lead.id not in _ids(matcher.find_leads_for_store(sibling))
    assert lead.id in _ids(matcher.find_leads_for_store(outsider))


def test_find_leads_for_store_without_location(company, make_store, make_lead, matcher):
    store = make_store(company)
    StoreLocation.objects.filter(store=store).update(is_active=False)
    make_lead()
    assert matcher.find_leads_for_store(store) == []


def test_no_candidates_returns_empty_list(company, make_lead, matcher):
    assert matcher.find_stores_for_lead(make_lead()) == []
    assert LeadAssignment.objects.count() == 0
