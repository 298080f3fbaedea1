"""
Tests for allocation/services/contract_ledger.py.

Covers:
- counter bounds and derived fields
- completion on quota with and without remaining warranty allowance
- returns against the warranty allowance
- the auto-close sweep
- single active contract per owner
"""
from datetime import date, timedelta

import pytest
from django.db import OperationalError

from allocation.exceptions import BusinessRuleViolation, ConcurrencyConflict, ValidationError
from allocation.models import Contract, OwnerRef
from allocation.services import contract_ledger
from allocation.services.contract_ledger import (
    active_contract_for_store, close_due_contracts, complete_contract, create_contract,
    increment_delivered, process_return, validate_contract,
)
from allocation.utils import utcnow

pytestmark = pytest.mark.django_db


def test_derived_fields(company, make_contract):
    contract = make_contract(company, leads=100, warranty=30)
    assert contract.max_warranty_leads == 30
    assert contract.available_warranty_leads == 30
    assert contract.remaining_leads == 100
    assert contract.warranty_usage_percentage == 0.0
    assert not contract.is_complete


def test_warranty_allowance_rounds_up(company, make_contract):
    contract = make_contract(company, leads=10, warranty=15)
    assert contract.max_warranty_leads == 2


def test_deliveries_on_zero_warranty_contract_complete_it(company, make_contract):
    contract = make_contract(company, leads=5, warranty=0)
    now = utcnow()
    for _ in range(5):
        increment_delivered(contract, now=now)

    contract.refresh_from_db()
    assert contract.leads_delivered == 5
    assert not contract.is_active
    assert contract.completed_at == now
    assert contract.auto_close_at is None


def test_reaching_quota_with_allowance_schedules_auto_close(company, make_contract):
    contract = make_contract(company, leads=2, warranty=50)
    now = utcnow()
    increment_delivered(contract, now=now)
    assert contract.auto_close_at is None

    increment_delivered(contract, now=now)
    contract.refresh_from_db()
    assert contract.is_active
    assert contract.auto_close_at == now + timedelta(days=7)


def test_delivery_beyond_quota_is_refused(company, make_contract):
    contract = make_contract(company, leads=1, warranty=50)
    increment_delivered(contract)
    with pytest.raises(BusinessRuleViolation):
        increment_delivered(contract)

    contract.refresh_from_db()
    assert contract.leads_delivered == 1


def test_returns_exhausting_allowance_complete_the_contract(company, make_contract):
    contract = make_contract(company, leads=100, warranty=30)
    Contract.objects.filter(pk=contract.pk).update(leads_delivered=100, auto_close_at=utcnow())
    contract.refresh_from_db()

    for _ in range(30):
        assert process_return(contract, None) is True

    contract.refresh_from_db()
    assert contract.leads_returned == 30
    assert contract.leads_warranty_used == 30
    assert contract.has_reached_warranty_limit()
    assert not contract.is_active
    assert contract.completed_at is not None

    # Allowance exhausted: nothing changes
    assert process_return(contract, None) is False
    contract.refresh_from_db()
    assert contract.leads_returned == 30


def test_return_on_incomplete_contract_keeps_it_active(company, make_contract):
    contract = make_contract(company, leads=10, warranty=10)
    increment_delivered(contract)
    assert process_return(contract, None) is True

    contract.refresh_from_db()
    assert contract.has_reached_warranty_limit()
    assert contract.is_active


def test_counters_stay_within_bounds(company, make_contract):
    contract = make_contract(company, leads=3, warranty=34)
    for _ in range(3):
        increment_delivered(contract)
    while process_return(contract, None):
        pass

    contract.refresh_from_db()
    assert 0 <= contract.leads_delivered <= contract.leads_contracted
    assert 0 <= contract.leads_returned <= contract.leads_delivered
    assert 0 <= contract.leads_warranty_used <= contract.max_warranty_leads


def test_complete_contract(company, make_contract):
    contract = make_contract(company)
    complete_contract(contract)
    assert not contract.is_active
    assert contract.completed_at is not None


@pytest.mark.parametrize("overrides", [
    {"leads_contracted": 0},
    {"warranty_percentage": 101},
    {"lead_price": "-1"},
    {"end_date": date.today() - timedelta(days=1)},
])
def test_validate_contract_rejects_bad_terms(company, overrides):
    terms = {
        "start_date": date.today(),
        "end_date": date.today() + timedelta(days=30),
        "leads_contracted": 10,
        "lead_price": "10.00",
        "warranty_percentage": 30,
    }
    terms.update(overrides)
    with pytest.raises(ValidationError):
        create_contract(company, **terms)


def test_validate_contract_rejects_out_of_bounds_counters(company, make_contract):
    contract = make_contract(company, leads=5)
    contract.leads_delivered = 6
    with pytest.raises(ValidationError):
        validate_contract(contract)


def test_one_active_contract_per_owner(company, make_contract):
    make_contract(company)
    with pytest.raises(BusinessRuleViolation):
        make_contract(company)


def test_new_contract_allowed_after_completion(company, make_contract):
    first = make_contract(company)
    complete_contract(first)
    second = make_contract(company)
    assert second.is_active


def test_owner_ref(company, store):
    assert OwnerRef.of(company) == OwnerRef.company(company)
    assert OwnerRef.of(store).owner_type == "store"
    with pytest.raises(TypeError):
        OwnerRef.of(object())


def test_active_contract_for_store_falls_back_to_company(company, make_store, make_contract):
    store = make_store(company, name="No contract")
    assert active_contract_for_store(store) is None

    company_contract = make_contract(company)
    assert active_contract_for_store(store) == company_contract

    own = make_contract(store)
    assert active_contract_for_store(store) == own


def test_close_due_contracts(company, other_company, make_contract):
    due = make_contract(company)
    later = make_contract(other_company)
    now = utcnow()
    Contract.objects.filter(pk=due.pk).update(auto_close_at=now - timedelta(minutes=1))
    Contract.objects.filter(pk=later.pk).update(auto_close_at=now + timedelta(days=1))

    assert close_due_contracts(now=now) == 1

    due.refresh_from_db()
    later.refresh_from_db()
    assert not due.is_active
    assert due.completed_at == now
    assert later.is_active


def test_lock_failure_surfaces_as_concurrency_conflict(company, make_contract, monkeypatch):
    contract = make_contract(company)

    def locked(*args, **kwargs):
        raise OperationalError("database is locked")

    monkeypatch.setattr(contract_ledger.Contract.objects, "select_for_update", locked)
    with pytest.raises(ConcurrencyConflict):
        increment_delivered(contract)
