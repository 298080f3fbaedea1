"""
Seed data script. Populates the database with a small demo network of
two companies, stores in São Paulo and Rio de Janeiro, active contracts,
and a batch of leads that are distributed through the allocation core.

Usage: cd backend && python seed_data.py
"""
import os
import sys
from datetime import date, timedelta

import django

# Setup Django
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lead_router.settings')
django.setup()

from allocation.models import Company, Lead, Segment, Store, StoreLocation
from allocation.services.assignments import distribute_lead
from allocation.services.contract_ledger import create_contract
from allocation.services.eligibility import EligibilityMatcher
from allocation.services.lead_intake import apply_lead_event
from allocation.services.store_locations import save_location


COMPANIES = [
    {"name": "Auto Center Brasil", "document": "12.345.678/0001-90", "city": "São Paulo", "state": "SP"},
    {"name": "Rio Motors", "document": "98.765.432/0001-10", "city": "Rio de Janeiro", "state": "RJ"},
]

# company_index, store fields, locations, contract owner ("store" or "company")
STORES = [
    {
        "company_index": 0,
        "name": "Auto Center Paulista",
        "city": "São Paulo", "state": "SP",
        "locations": [
            {"name": "Paulista", "latitude": -23.5614, "longitude": -46.6559, "coverage_radius": 15, "is_main": True},
            {"name": "Pinheiros", "latitude": -23.5672, "longitude": -46.7020, "coverage_radius": 10},
        ],
        "contract": {"owner": "store", "leads_contracted": 20, "warranty_percentage": 30},
    },
    {
        "company_index": 0,
        "name": "Auto Center Santo Amaro",
        "city": "São Paulo", "state": "SP",
        "locations": [
            {"name": "Santo Amaro", "latitude": -23.6525, "longitude": -46.7096, "coverage_radius": 20, "is_main": True},
        ],
        "contract": None,  # served by the company contract below
    },
    {
        "company_index": 1,
        "name": "Rio Motors Botafogo",
        "city": "Rio de Janeiro", "state": "RJ",
        "locations": [
            {"name": "Botafogo", "latitude": -22.9519, "longitude": -43.1822, "coverage_radius": 25, "is_main": True},
        ],
        "contract": {"owner": "store", "leads_contracted": 5, "warranty_percentage": 0},
    },
]

COMPANY_CONTRACTS = [
    {"company_index": 0, "leads_contracted": 50, "warranty_percentage": 20},
]

LEADS = [
    {"name": "Ana Souza", "phone": "(11) 98765-4321", "email": "ana.souza@example.com",
     "city": "São Paulo", "state": "SP", "latitude": -23.5587, "longitude": -46.6625},
    {"name": "Bruno Lima", "phone": "+55 11 99876-5432", "email": "bruno.lima@example.com",
     "city": "São Paulo", "state": "SP", "latitude": -23.5701, "longitude": -46.6910},
    {"name": "Carla Mendes", "phone": "(11) 97654-3210", "email": None,
     "city": "São Paulo", "state": "SP", "latitude": -23.6440, "longitude": -46.7150},
    {"name": "Diego Rocha", "phone": "(21) 98877-6655", "email": "diego.rocha@example.com",
     "city": "Rio de Janeiro", "state": "RJ", "latitude": -22.9711, "longitude": -43.1822},
    {"name": "Elisa Prado", "phone": "(21) 99911-2233", "email": None,
     "city": "Rio de Janeiro", "state": "RJ", "latitude": -22.9068, "longitude": -43.1729},
    {"name": "Fábio Nunes", "phone": "(31) 98555-1212", "email": "fabio.nunes@example.com",
     "city": "Belo Horizonte", "state": "MG", "latitude": -19.9167, "longitude": -43.9345},
]


def seed():
    existing = Lead.objects.count()
    if existing > 0:
        print(f"Database already has {existing} leads. Skipping seed.")
        print("Run 'python manage.py flush --no-input' to clear, then re-seed.")
        return

    today = date.today()
    segment = Segment.objects.create(name="Automotive", description="Vehicle purchase inquiries")

    companies = [Company.objects.create(**data) for data in COMPANIES]
    print(f"Created {len(companies)} companies")

    for data in STORES:
        data = dict(data)
        company = companies[data.pop("company_index")]
        locations = data.pop("locations")
        contract = data.pop("contract")

        store = Store.objects.create(company=company, **data)
        for loc in locations:
            save_location(StoreLocation(store=store, **loc))
        if contract:
            create_contract(
                store,
                start_date=today,
                end_date=today + timedelta(days=90),
                leads_contracted=contract["leads_contracted"],
                warranty_percentage=contract["warranty_percentage"],
                lead_price="45.00",
            )
        print(f"  Store {store.name}: {len(locations)} location(s), contract={'own' if contract else 'company'}")

    for data in COMPANY_CONTRACTS:
        create_contract(
            companies[data["company_index"]],
            start_date=today,
            end_date=today + timedelta(days=180),
            leads_contracted=data["leads_contracted"],
            warranty_percentage=data["warranty_percentage"],
            lead_price="30.00",
        )

    matcher = EligibilityMatcher()
    for i, fields in enumerate(LEADS):
        lead = apply_lead_event("created", {
            **fields,
            "segment_id": segment.id,
            "external_id": f"demo-{i + 1}",
            "external_source": "seed",
        })
        assignment = distribute_lead(lead, matcher)
        target = assignment.store.name if assignment else "no eligible store"
        print(f"  [{i + 1}/{len(LEADS)}] {lead.name:14s} → {target}")

    print(f"\n{'='*50}")
    print(f"Seed complete! {len(LEADS)} leads distributed.")
    print(f"\nRun the server: python manage.py runserver")
    print(f"Register the auto-close sweep: python manage.py setup_auto_close_sweep")


if __name__ == "__main__":
    seed()
