"""
Lead Intake

Applies lead events whose field names were already resolved upstream.

    created → new Lead (status "new") plus its LeadPhone
    updated → existing Lead located by (external_id, external_source), then
              email, then phone; present fields are applied. A changed phone
              appends a LeadPhone so earlier numbers keep counting toward the
              exclusivity window.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from allocation.exceptions import NotFoundError, ValidationError
from allocation.models import Lead, LeadPhone, LeadStatus, Segment
from allocation.phone import clean_phone

logger = logging.getLogger(__name__)

EVENT_KINDS = ("created", "updated")

LEAD_FIELDS = (
    "name", "email", "phone", "zip_code", "city", "state", "address",
    "latitude", "longitude", "external_id", "external_source", "status", "is_active",
)


def _coerce_coordinates(fields: dict) -> dict:
    cleaned = dict(fields)
    for key, bound in (("latitude", 90.0), ("longitude", 180.0)):
        if cleaned.get(key) is None:
            continue
        try:
            value = float(cleaned[key])
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be a number", **{key: cleaned[key]})
        if not -bound <= value <= bound:
            raise ValidationError(f"{key} out of range", **{key: value})
        cleaned[key] = value
    return cleaned


def _resolve_segment(fields: dict):
    segment_id = fields.get("segment_id") or fields.get("segment")
    if not segment_id:
        return None
    try:
        return Segment.objects.get(pk=segment_id)
    except (Segment.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFoundError(f"Segment {segment_id} not found", segment_id=str(segment_id))


def _attach_phone(lead: Lead, raw: str) -> LeadPhone | None:
    normalized = clean_phone(raw)
    if lead.phones.filter(phone_normalized=normalized).exists():
        return None
    return LeadPhone.objects.create(lead=lead, phone_original=raw, phone_normalized=normalized)


def find_lead(fields: dict) -> Lead | None:
    external_id = fields.get("external_id")
    external_source = fields.get("external_source")
    if external_id and external_source:
        lead = Lead.objects.filter(external_id=external_id, external_source=external_source).first()
        if lead:
            return lead

    if fields.get("email"):
        lead = Lead.objects.filter(email=fields["email"]).first()
        if lead:
            return lead

    if fields.get("phone"):
        lead = Lead.objects.filter(phone=fields["phone"]).first()
        if lead:
            return lead
        lead = Lead.objects.filter(phones__phone_original=fields["phone"]).first()
        if lead:
            return lead

    return None


def create_lead(fields: dict) -> Lead:
    fields = _coerce_coordinates(fields)
    if not fields.get("name"):
        raise ValidationError("Lead name is required")
    if fields.get("latitude") is None or fields.get("longitude") is None:
        raise ValidationError("Lead latitude and longitude are required")
    if not fields.get("phone"):
        raise ValidationError("Lead phone is required")

    with transaction.atomic():
        lead = Lead(segment=_resolve_segment(fields), status=LeadStatus.NEW, is_active=True)
        for key in LEAD_FIELDS:
            if key in ("status", "is_active"):
                continue
            if fields.get(key) is not None:
                setattr(lead, key, fields[key])
        lead.save()
        _attach_phone(lead, fields["phone"])

    logger.info("Lead %s created (source=%s)", lead.id, lead.external_source or "direct")
    return lead


def update_lead(fields: dict) -> Lead:
    lead = find_lead(fields)
    if lead is None:
        raise NotFoundError("No lead matches the update event", external_id=fields.get("external_id"))

    fields = _coerce_coordinates(fields)
    if fields.get("status") is not None and fields["status"] not in LeadStatus.values:
        raise ValidationError(f"Unknown lead status: {fields['status']!r}", status=fields["status"])

    with transaction.atomic():
        changed = []
        for key in LEAD_FIELDS:
            if key in fields and fields[key] is not None and getattr(lead, key) != fields[key]:
                setattr(lead, key, fields[key])
                changed.append(key)
        if "segment_id" in fields or "segment" in fields:
            lead.segment = _resolve_segment(fields)
            changed.append("segment")
        if changed:
            lead.save(update_fields=changed + ["updated_at"])
        if fields.get("phone"):
            _attach_phone(lead, fields["phone"])

    logger.info("Lead %s updated: %s", lead.id, ", ".join(changed) or "no changes")
    return lead


def apply_lead_event(kind: str, fields: dict) -> Lead:
    if kind == "created":
        return create_lead(fields)
    if kind == "updated":
        return update_lead(fields)
    raise ValidationError(f"Unknown lead event kind: {kind!r}", kind=kind)
