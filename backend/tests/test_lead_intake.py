"""Tests for allocation/services/lead_intake.py."""
import pytest

from allocation.exceptions import NotFoundError, ValidationError
from allocation.models import LeadPhone, LeadStatus, Segment
from allocation.services.lead_intake import apply_lead_event

pytestmark = pytest.mark.django_db

CREATED = {
    "name": "Ana Souza",
    "email": "ana@example.com",
    "phone": "(11) 98765-4321",
    "latitude": "-23.5505",
    "longitude": "-46.6333",
    "external_id": "fb-1001",
    "external_source": "facebook",
}


def test_created_event_creates_lead_and_phone():
    lead = apply_lead_event("created", CREATED)

    assert lead.status == LeadStatus.NEW
    assert lead.is_active
    assert lead.latitude == pytest.approx(-23.5505)
    phone = LeadPhone.objects.get(lead=lead)
    assert phone.phone_original == "(11) 98765-4321"
    assert phone.phone_normalized == "11987654321"


def test_created_event_with_segment():
    segment = Segment.objects.create(name="Automotive")
    lead = apply_lead_event("created", {**CREATED, "segment_id": str(segment.id)})
    assert lead.segment == segment


@pytest.mark.parametrize("missing", ["name", "phone", "latitude"])
def test_created_event_requires_fields(missing):
    fields = {k: v for k, v in CREATED.items() if k != missing}
    with pytest.raises(ValidationError):
        apply_lead_event("created", fields)


def test_created_event_rejects_bad_coordinates():
    with pytest.raises(ValidationError):
        apply_lead_event("created", {**CREATED, "latitude": "95"})
    with pytest.raises(ValidationError):
        apply_lead_event("created", {**CREATED, "longitude": "west"})


def test_created_event_rejects_phone_without_digits():
    with pytest.raises(ValidationError):
        apply_lead_event("created", {**CREATED, "phone": "no phone"})


def test_updated_event_by_external_reference():
    lead = apply_lead_event("created", CREATED)
    updated = apply_lead_event("updated", {
        "external_id": "fb-1001", "external_source": "facebook", "city": "Campinas",
    })
    assert updated.id == lead.id
    assert updated.city == "Campinas"
    assert updated.name == "Ana Souza"


def test_updated_event_by_email_appends_phone():
    lead = apply_lead_event("created", CREATED)
    apply_lead_event("updated", {"email": "ana@example.com", "phone": "(11) 91234-5678"})

    assert sorted(lead.normalized_phones()) == ["11912345678", "11987654321"]


def test_updated_event_same_phone_does_not_duplicate():
    lead = apply_lead_event("created", CREATED)
    apply_lead_event("updated", {"email": "ana@example.com", "phone": "+55 11 98765-4321"})
    assert lead.phones.count() == 1


def test_updated_event_unknown_lead():
    with pytest.raises(NotFoundError):
        apply_lead_event("updated", {"email": "nobody@example.com"})


def test_updated_event_rejects_unknown_status():
    apply_lead_event("created", CREATED)
    with pytest.raises(ValidationError):
        apply_lead_event("updated", {"email": "ana@example.com", "status": "hot"})


def test_unknown_event_kind():
    with pytest.raises(ValidationError):
        apply_lead_event("deleted", CREATED)
