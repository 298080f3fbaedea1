"""
Warranty Workflow

A store disputes a delivered lead; an analyst approves or rejects the claim;
an approved claim consumes one unit of the contract's warranty allowance and
is settled by delivering a replacement lead.

    pending ──approve──▶ waiting_replacement ──assign_replacement──▶ replaced
        └────reject───▶ rejected

The originating assignment mirrors each step (warranty_pending,
warranty_waiting_replacement, warranty_rejected, warranty_replaced).
Replacement deliveries are flagged is_warranty and never count toward
leads_delivered.
"""
import logging

from django.db import OperationalError, transaction

from allocation.exceptions import (
    BusinessRuleViolation, ConcurrencyConflict, NotFoundError, ValidationError,
)
from allocation.models import (
    AssignmentStatus, Lead, LeadAssignment, LeadStatus, LeadWarranty, WarrantyStatus,
)
from allocation.services import contract_ledger
from allocation.utils import utcnow

logger = logging.getLogger(__name__)

OPEN_STATUSES = {WarrantyStatus.PENDING, WarrantyStatus.APPROVED, WarrantyStatus.WAITING_REPLACEMENT}
REPLACEABLE_STATUSES = {WarrantyStatus.APPROVED, WarrantyStatus.WAITING_REPLACEMENT}


def get_warranty(warranty_id) -> LeadWarranty:
    try:
        return LeadWarranty.objects.select_related("assignment").get(pk=warranty_id)
    except LeadWarranty.DoesNotExist:
        raise NotFoundError(f"Warranty {warranty_id} not found", warranty_id=str(warranty_id))


def _lock_warranty(warranty_id) -> LeadWarranty:
    try:
        return (
            LeadWarranty.objects
            .select_for_update()
            .select_related("assignment")
            .get(pk=warranty_id)
        )
    except LeadWarranty.DoesNotExist:
        raise NotFoundError(f"Warranty {warranty_id} not found", warranty_id=str(warranty_id))
    except OperationalError as exc:
        raise ConcurrencyConflict(
            f"Warranty {warranty_id} is locked by another operation", warranty_id=str(warranty_id)
        ) from exc


def _sync(target: LeadWarranty, source: LeadWarranty) -> None:
    if target is source:
        return
    for field in ("status", "analysis_notes", "analyzed_by", "analyzed_at", "new_lead_id", "replaced_at"):
        setattr(target, field, getattr(source, field))


def _mirror(assignment: LeadAssignment, status: str) -> None:
    assignment.status = status
    assignment.save(update_fields=["status", "updated_at"])


def _require_status(warranty: LeadWarranty, allowed: set, action: str) -> None:
    if warranty.status not in allowed:
        raise BusinessRuleViolation(
            f"Cannot {action} warranty {warranty.id} in status {warranty.status!r}",
            warranty_id=str(warranty.id), status=warranty.status,
        )


# ─── Opening a claim ──────────────────────────────────────────────────────────

def open_warranty(assignment: LeadAssignment, reason: str) -> LeadWarranty:
    if not reason or not reason.strip():
        raise ValidationError("A return reason is required")

    with transaction.atomic():
        has_open = LeadWarranty.objects.filter(
            assignment=assignment, status__in=OPEN_STATUSES
        ).exists()
        if has_open:
            raise BusinessRuleViolation(
                f"Assignment {assignment.id} already has an open warranty claim",
                assignment_id=str(assignment.id),
            )
        # A replaced lead was already returned and settled
        settled = (
            assignment.status == AssignmentStatus.WARRANTY_REPLACED
            or LeadWarranty.objects.filter(
                assignment=assignment, status=WarrantyStatus.REPLACED
            ).exists()
        )
        if settled:
            raise BusinessRuleViolation(
                f"Assignment {assignment.id} was already replaced under warranty",
                assignment_id=str(assignment.id),
            )

        warranty = LeadWarranty.objects.create(
            assignment=assignment, return_reason=reason.strip(), status=WarrantyStatus.PENDING,
        )
        _mirror(assignment, AssignmentStatus.WARRANTY_PENDING)

    logger.info("Warranty %s opened for assignment %s", warranty.id, assignment.id)
    return warranty


# ─── Analysis ─────────────────────────────────────────────────────────────────

def approve_warranty(warranty: LeadWarranty, analyst, notes=None, replacement_lead=None, now=None) -> LeadWarranty:
    """
    Approve a pending claim, consuming one unit of warranty allowance.

    Locks the warranty row, then the contract row. Fails with
    BusinessRuleViolation, changing nothing, when the contract has no
    allowance left. A replacement_lead is assigned in the same transaction.
    """
    now = now or utcnow()
    with transaction.atomic():
        locked = _lock_warranty(warranty.pk)
        _require_status(locked, {WarrantyStatus.PENDING}, "approve")

        assignment = locked.assignment
        contract = contract_ledger.lock_contract(assignment.contract_id)
        if contract.has_reached_warranty_limit():
            raise BusinessRuleViolation(
                f"Contract {contract.id} has reached its warranty limit "
                f"({contract.leads_warranty_used}/{contract.max_warranty_leads})",
                contract_id=str(contract.id),
            )

        locked.status = WarrantyStatus.WAITING_REPLACEMENT
        locked.analyzed_by = str(analyst)
        locked.analyzed_at = now
        if notes is not None:
            locked.analysis_notes = notes
        locked.save(update_fields=["status", "analyzed_by", "analyzed_at", "analysis_notes", "updated_at"])
        _mirror(assignment, AssignmentStatus.WARRANTY_WAITING_REPLACEMENT)

        if not contract_ledger.process_return(contract, assignment.lead, now=now):
            raise BusinessRuleViolation(
                f"Contract {contract.id} has reached its warranty limit",
                contract_id=str(contract.id),
            )

        if replacement_lead is not None:
            _replace(locked, replacement_lead, now)

    _sync(warranty, locked)
    logger.info("Warranty %s approved by %s", warranty.id, analyst)
    return warranty


def reject_warranty(warranty: LeadWarranty, analyst, notes=None, now=None) -> LeadWarranty:
    now = now or utcnow()
    with transaction.atomic():
        locked = _lock_warranty(warranty.pk)
        _require_status(locked, {WarrantyStatus.PENDING}, "reject")

        locked.status = WarrantyStatus.REJECTED
        locked.analyzed_by = str(analyst)
        locked.analyzed_at = now
        if notes is not None:
            locked.analysis_notes = notes
        locked.save(update_fields=["status", "analyzed_by", "analyzed_at", "analysis_notes", "updated_at"])
        _mirror(locked.assignment, AssignmentStatus.WARRANTY_REJECTED)

    _sync(warranty, locked)
    logger.info("Warranty %s rejected by %s", warranty.id, analyst)
    return warranty


# ─── Replacement ──────────────────────────────────────────────────────────────

def _replace(warranty: LeadWarranty, new_lead: Lead, now) -> LeadAssignment:
    _require_status(warranty, REPLACEABLE_STATUSES, "replace")
    if not new_lead.is_active or new_lead.is_deleted:
        raise BusinessRuleViolation(f"Lead {new_lead.id} is not active", lead_id=str(new_lead.id))

    original = warranty.assignment
    if new_lead.pk == original.lead_id:
        raise BusinessRuleViolation("A lead cannot replace itself", lead_id=str(new_lead.id))

    replacement = LeadAssignment.objects.create(
        lead=new_lead,
        store_id=original.store_id,
        contract_id=original.contract_id,
        status=AssignmentStatus.NEW,
        is_warranty=True,
    )
    new_lead.status = LeadStatus.SENT
    new_lead.save(update_fields=["status", "updated_at"])

    warranty.new_lead = new_lead
    warranty.replaced_at = now
    warranty.status = WarrantyStatus.REPLACED
    warranty.save(update_fields=["new_lead", "replaced_at", "status", "updated_at"])
    _mirror(original, AssignmentStatus.WARRANTY_REPLACED)

    logger.info(
        "Warranty %s settled: lead %s replaces %s for store %s",
        warranty.id, new_lead.id, original.lead_id, original.store_id,
    )
    return replacement


def assign_replacement(warranty: LeadWarranty, new_lead: Lead, now=None) -> LeadAssignment:
    now = now or utcnow()
    with transaction.atomic():
        locked = _lock_warranty(warranty.pk)
        replacement = _replace(locked, new_lead, now)
    _sync(warranty, locked)
    return replacement


def assign_next_replacement(warranty: LeadWarranty, matcher, now=None) -> LeadAssignment:
    """Replace with the nearest lead the store is eligible to receive."""
    store = warranty.assignment.store
    candidates = matcher.find_leads_for_store(store)
    if not candidates:
        raise BusinessRuleViolation(
            f"No eligible replacement lead for store {store.id}", store_id=str(store.id)
        )
    lead, distance = candidates[0]
    logger.info("Warranty %s: nearest replacement lead %s at %.1f km", warranty.id, lead.id, distance)
    return assign_replacement(warranty, lead, now=now)
