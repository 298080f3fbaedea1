"""
Typed failures raised by the allocation core.

Services raise these; the API layer translates them into HTTP responses
(see allocation.api.base). Every mutating service runs inside a single
transaction, so raising any of these rolls back the whole operation.
"""


class AllocationError(Exception):
    """Base class for all allocation-core failures."""

    kind = "allocation_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(AllocationError):
    """Input rejected before any mutation (bad dates, quotas, prices, phones, statuses)."""

    kind = "validation_error"


class BusinessRuleViolation(AllocationError):
    """A well-formed request that the current state does not allow (e.g. warranty limit reached)."""

    kind = "business_rule_violation"


class NotFoundError(AllocationError):
    """Unknown lead/store/contract/assignment/warranty id."""

    kind = "not_found"


class ConcurrencyConflict(AllocationError):
    """Lost a contract row lock under contention. Retry with fresh data."""

    kind = "concurrency_conflict"
