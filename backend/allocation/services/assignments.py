"""
Assignment lifecycle: delivering a lead to a store and tracking what the
store did with it.
"""
import logging

from django.db import transaction

from allocation.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from allocation.models import AssignmentStatus, Lead, LeadAssignment, LeadStatus, Store
from allocation.services import contract_ledger

logger = logging.getLogger(__name__)


def get_assignment(assignment_id) -> LeadAssignment:
    try:
        return LeadAssignment.objects.select_related("lead", "store", "contract").get(pk=assignment_id)
    except LeadAssignment.DoesNotExist:
        raise NotFoundError(f"Assignment {assignment_id} not found", assignment_id=str(assignment_id))


def update_assignment_status(assignment: LeadAssignment, status: str, notes=None) -> LeadAssignment:
    """Any transition is allowed; only membership in AssignmentStatus is checked."""
    if status not in AssignmentStatus.values:
        raise ValidationError(f"Unknown assignment status: {status!r}", status=status)

    assignment.status = status
    fields = ["status", "updated_at"]
    if notes is not None:
        assignment.notes = notes
        fields.append("notes")
    assignment.save(update_fields=fields)

    logger.info("Assignment %s → %s", assignment.id, status)
    return assignment


def create_assignment(lead: Lead, store: Store, matcher, now=None) -> LeadAssignment:
    """
    Deliver a lead to a store, counting it against the store's active contract.

    The record, the lead's `sent` status and the delivered counter are
    committed together or not at all.
    """
    if not store.is_active or store.is_deleted:
        raise BusinessRuleViolation(f"Store {store.id} is not active", store_id=str(store.id))
    if not lead.is_active or lead.is_deleted:
        raise BusinessRuleViolation(f"Lead {lead.id} is not active", lead_id=str(lead.id))

    contract = contract_ledger.active_contract_for_store(store)
    if contract is None:
        raise BusinessRuleViolation(
            f"Store {store.id} has no active contract", store_id=str(store.id)
        )
    if contract.is_complete:
        raise BusinessRuleViolation(
            f"Contract {contract.id} has no remaining leads", contract_id=str(contract.id)
        )
    if matcher.has_been_sent_to_store(lead, store, as_of=now):
        raise BusinessRuleViolation(
            f"Lead {lead.id} was sent to store {store.id} within the last "
            f"{matcher.restriction_months} month(s)",
            lead_id=str(lead.id), store_id=str(store.id),
        )

    with transaction.atomic():
        # Counting first takes the contract lock and re-checks the quota
        contract_ledger.increment_delivered(contract, now=now)

        assignment = LeadAssignment.objects.create(
            lead=lead, store=store, contract=contract, status=AssignmentStatus.NEW,
        )
        lead.status = LeadStatus.SENT
        lead.save(update_fields=["status", "updated_at"])

    logger.info(
        "Lead %s assigned to store %s under contract %s (%d/%d)",
        lead.id, store.id, contract.id, contract.leads_delivered, contract.leads_contracted,
    )
    return assignment


def distribute_lead(lead: Lead, matcher, now=None) -> LeadAssignment | None:
    """Assign the lead to the nearest eligible store that still accepts it."""
    for store, distance in matcher.find_stores_for_lead(lead, as_of=now):
        try:
            return create_assignment(lead, store, matcher, now=now)
        except BusinessRuleViolation as exc:
            logger.info("Store %s (%.1f km) skipped for lead %s: %s", store.id, distance, lead.id, exc.message)

    logger.info("No eligible store for lead %s", lead.id)
    return None
