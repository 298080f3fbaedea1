"""
Contract Ledger

Owns every mutation of a contract's counters. Each mutation re-reads the
contract under a row lock (select_for_update) inside a transaction, so two
concurrent deliveries can never both read the same leads_delivered.

- increment_delivered()   : count one delivery; complete or schedule auto-close
- process_return()        : consume one unit of warranty allowance
- complete_contract()     : deactivate and stamp completed_at
- close_due_contracts()   : django-q task; completes contracts whose auto_close_at passed
- create_contract()       : validated creation honoring one active contract per owner
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction

from allocation.exceptions import (
    BusinessRuleViolation, ConcurrencyConflict, NotFoundError, ValidationError,
)
from allocation.models.contract import Contract, OwnerRef
from allocation.utils import utcnow

logger = logging.getLogger(__name__)

# ─── Configuration ────────────────────────────────────────────────────────────

AUTO_CLOSE_DELAY = timedelta(days=getattr(settings, "CONTRACT_AUTO_CLOSE_DAYS", 7))

_COUNTER_FIELDS = [
    "leads_delivered", "leads_returned", "leads_warranty_used",
    "is_active", "completed_at", "auto_close_at", "updated_at",
]


# ─── Locking ──────────────────────────────────────────────────────────────────

def lock_contract(contract_id) -> Contract:
    """
    Re-read a contract with a row lock. Must be called inside transaction.atomic().

    Lock failures (timeouts, SQLite "database is locked") surface as
    ConcurrencyConflict so the caller can retry with fresh data.
    """
    try:
        return Contract.objects.select_for_update().get(pk=contract_id)
    except Contract.DoesNotExist:
        raise NotFoundError(f"Contract {contract_id} not found", contract_id=contract_id)
    except OperationalError as exc:
        logger.warning("Lock contention on contract %s: %s", contract_id, exc)
        raise ConcurrencyConflict(
            f"Contract {contract_id} is locked by another operation", contract_id=contract_id
        ) from exc


def _sync(target: Contract, source: Contract) -> None:
    """Copy freshly-locked counter values back onto the caller's instance."""
    if target is source:
        return
    for field in _COUNTER_FIELDS:
        setattr(target, field, getattr(source, field))


# ─── Validation ───────────────────────────────────────────────────────────────

def validate_contract(contract: Contract) -> None:
    """Reject a contract whose terms or counters are out of bounds."""
    if contract.start_date is None or contract.end_date is None:
        raise ValidationError("Contract start_date and end_date are required")
    if contract.start_date > contract.end_date:
        raise ValidationError(
            "Contract start_date must not be after end_date",
            start_date=str(contract.start_date), end_date=str(contract.end_date),
        )
    if contract.leads_contracted is None or contract.leads_contracted <= 0:
        raise ValidationError(
            "leads_contracted must be greater than zero",
            leads_contracted=contract.leads_contracted,
        )
    if Decimal(contract.lead_price or 0) < 0:
        raise ValidationError("lead_price must not be negative", lead_price=str(contract.lead_price))
    if not 0 <= contract.warranty_percentage <= 100:
        raise ValidationError(
            "warranty_percentage must be between 0 and 100",
            warranty_percentage=contract.warranty_percentage,
        )
    if contract.leads_delivered < 0 or contract.leads_delivered > contract.leads_contracted:
        raise ValidationError(
            "leads_delivered must be between 0 and leads_contracted",
            leads_delivered=contract.leads_delivered,
        )
    # Replacement deliveries do not count toward leads_delivered, so returns are not bounded by it
    if contract.leads_returned < 0:
        raise ValidationError(
            "leads_returned must not be negative",
            leads_returned=contract.leads_returned,
        )
    if contract.leads_warranty_used < 0 or contract.leads_warranty_used > contract.max_warranty_leads:
        raise ValidationError(
            "leads_warranty_used exceeds the warranty allowance",
            leads_warranty_used=contract.leads_warranty_used,
        )


def _save(contract: Contract) -> None:
    validate_contract(contract)
    contract.save(update_fields=_COUNTER_FIELDS)


# ─── Creation ─────────────────────────────────────────────────────────────────

def create_contract(owner, *, start_date, end_date, leads_contracted,
                    lead_price=0, warranty_percentage=30) -> Contract:
    """
    Create an active contract for a Company, a Store or an OwnerRef.

    Only one active contract may exist per owner; the partial unique constraint
    enforces it and a violation is reported as BusinessRuleViolation.
    """
    ref = owner if isinstance(owner, OwnerRef) else OwnerRef.of(owner)
    contract = Contract(
        owner_type=ref.owner_type,
        owner_id=ref.owner_id,
        start_date=start_date,
        end_date=end_date,
        leads_contracted=leads_contracted,
        lead_price=lead_price,
        warranty_percentage=warranty_percentage,
    )
    validate_contract(contract)

    try:
        with transaction.atomic():
            contract.save()
    except IntegrityError as exc:
        raise BusinessRuleViolation(
            f"{ref.owner_type} {ref.owner_id} already has an active contract",
            owner_type=ref.owner_type, owner_id=str(ref.owner_id),
        ) from exc

    logger.info(
        "Created contract %s for %s %s (%d leads, %d%% warranty)",
        contract.id, ref.owner_type, ref.owner_id, leads_contracted, warranty_percentage,
    )
    return contract


def active_contract_for_store(store) -> Contract | None:
    """The store's own active contract, falling back to its company's."""
    own = Contract.objects.filter(is_active=True, **OwnerRef.store(store).as_filter()).first()
    if own is not None:
        return own
    return Contract.objects.filter(
        is_active=True, **OwnerRef.company(store.company_id).as_filter()
    ).first()


# ─── Counter mutations ────────────────────────────────────────────────────────

def complete_contract(contract: Contract, now=None) -> Contract:
    now = now or utcnow()
    with transaction.atomic():
        locked = lock_contract(contract.pk)
        _complete(locked, now)
        _save(locked)
    _sync(contract, locked)
    return contract


def _complete(contract: Contract, now) -> None:
    contract.is_active = False
    contract.completed_at = now
    contract.auto_close_at = None
    logger.info(
        "Contract %s completed (%d/%d delivered, %d warranty used)",
        contract.id, contract.leads_delivered, contract.leads_contracted,
        contract.leads_warranty_used,
    )


def increment_delivered(contract: Contract, now=None) -> Contract:
    """
    Count one delivery against the quota.

    When the quota is reached the contract is completed at once if its warranty
    allowance is exhausted; otherwise it stays active for AUTO_CLOSE_DELAY so
    late warranty claims can still be honored.
    """
    now = now or utcnow()
    with transaction.atomic():
        locked = lock_contract(contract.pk)
        if not locked.is_active:
            raise BusinessRuleViolation(
                f"Contract {locked.id} is not active", contract_id=str(locked.id)
            )
        if locked.is_complete:
            raise BusinessRuleViolation(
                f"Contract {locked.id} has no remaining leads", contract_id=str(locked.id)
            )

        locked.leads_delivered += 1

        if locked.is_complete:
            if locked.has_reached_warranty_limit():
                _complete(locked, now)
            else:
                locked.auto_close_at = now + AUTO_CLOSE_DELAY
                logger.info(
                    "Contract %s reached its quota; auto-close scheduled for %s",
                    locked.id, locked.auto_close_at.isoformat(),
                )
        _save(locked)

    _sync(contract, locked)
    return contract


def process_return(contract: Contract, lead=None, now=None) -> bool:
    """
    Consume one unit of warranty allowance for a returned lead.

    Returns False, changing nothing, when the allowance is already exhausted.
    """
    now = now or utcnow()
    with transaction.atomic():
        locked = lock_contract(contract.pk)
        if locked.has_reached_warranty_limit():
            logger.info("Contract %s: warranty limit reached, return refused", locked.id)
            return False

        locked.leads_returned += 1
        locked.leads_warranty_used += 1
        logger.info(
            "Contract %s: lead %s returned (%d/%d warranty used)",
            locked.id, getattr(lead, "pk", lead),
            locked.leads_warranty_used, locked.max_warranty_leads,
        )

        if locked.has_reached_warranty_limit() and locked.is_complete and locked.is_active:
            _complete(locked, now)
        _save(locked)

    _sync(contract, locked)
    return True


# ─── Periodic sweep ───────────────────────────────────────────────────────────

def pending_auto_close(now=None):
    now = now or utcnow()
    return Contract.objects.filter(
        is_active=True, auto_close_at__isnull=False, auto_close_at__lte=now,
    )


def close_due_contracts(now=None) -> int:
    """
    Periodic sweep: complete every active contract whose auto_close_at has passed.

    A failure on one contract is logged and does not stop the sweep.
    """
    now = now or utcnow()
    closed = 0
    for contract_id in list(pending_auto_close(now).values_list("id", flat=True)):
        try:
            with transaction.atomic():
                locked = lock_contract(contract_id)
                # Re-check under the lock: another worker may have closed it
                if not locked.is_active or locked.auto_close_at is None or locked.auto_close_at > now:
                    continue
                _complete(locked, now)
                _save(locked)
            closed += 1
        except Exception:
            logger.exception("Auto-close failed for contract %s", contract_id)

    if closed:
        logger.info("Auto-close sweep: closed %d contract(s)", closed)
    return closed
