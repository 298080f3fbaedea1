"""
Shared fixtures for the allocation tests.

Coordinates used throughout:
- São Paulo (Sé)         -23.5505, -46.6333
- Rio de Janeiro (Centro) -22.9068, -43.1729   (~360 km from São Paulo)
"""
from datetime import date, timedelta

import pytest

from allocation.models import Company, Store, StoreLocation
from allocation.services.contract_ledger import create_contract
from allocation.services.eligibility import EligibilityMatcher
from allocation.services.lead_intake import apply_lead_event

SAO_PAULO = (-23.5505, -46.6333)
RIO = (-22.9068, -43.1729)


@pytest.fixture
def company(db):
    return Company.objects.create(name="Auto Center Brasil", city="São Paulo", state="SP")


@pytest.fixture
def other_company(db):
    return Company.objects.create(name="Rio Motors", city="Rio de Janeiro", state="RJ")


@pytest.fixture
def make_store(db):
    def _make(company, name="Store", at=SAO_PAULO, radius=50, is_active=True):
        store = Store.objects.create(company=company, name=name, is_active=is_active)
        StoreLocation.objects.create(
            store=store, name=f"{name} main", latitude=at[0], longitude=at[1],
            coverage_radius=radius, is_main=True,
        )
        return store
    return _make


@pytest.fixture
def make_contract(db):
    def _make(owner, leads=10, warranty=30):
        today = date.today()
        return create_contract(
            owner,
            start_date=today,
            end_date=today + timedelta(days=90),
            leads_contracted=leads,
            warranty_percentage=warranty,
            lead_price="25.00",
        )
    return _make


@pytest.fixture
def make_lead(db):
    counter = {"n": 0}

    def _make(name=None, phone=None, at=SAO_PAULO, **extra):
        counter["n"] += 1
        n = counter["n"]
        return apply_lead_event("created", {
            "name": name or f"Lead {n}",
            "phone": phone or f"(11) 9{n:04d}-{n:04d}",
            "latitude": at[0],
            "longitude": at[1],
            **extra,
        })
    return _make


@pytest.fixture
def store(company, make_store, make_contract):
    store = make_store(company, name="Paulista")
    make_contract(store)
    return store


@pytest.fixture
def matcher():
    return EligibilityMatcher(3)
