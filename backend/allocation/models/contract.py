import uuid
from dataclasses import dataclass

from django.db import models
from django.db.models import Q

from allocation.models.base import TrackedModel


class OwnerType(models.TextChoices):
    COMPANY = "company", "Company"
    STORE = "store", "Store"


@dataclass(frozen=True)
class OwnerRef:
    """
    Tagged reference to whoever holds a contract: Company(id) | Store(id).

    Stored as the (owner_type, owner_id) column pair on Contract; the pair is
    what the single-active-contract constraint is keyed on.
    """

    owner_type: str
    owner_id: uuid.UUID

    @classmethod
    def company(cls, company) -> "OwnerRef":
        return cls(OwnerType.COMPANY, getattr(company, "pk", company))

    @classmethod
    def store(cls, store) -> "OwnerRef":
        return cls(OwnerType.STORE, getattr(store, "pk", store))

    @classmethod
    def of(cls, instance) -> "OwnerRef":
        from allocation.models.company import Company
        from allocation.models.store import Store

        if isinstance(instance, Company):
            return cls.company(instance)
        if isinstance(instance, Store):
            return cls.store(instance)
        raise TypeError(f"Contracts can only be owned by a Company or a Store, not {type(instance).__name__}")

    def as_filter(self) -> dict:
        return {"owner_type": self.owner_type, "owner_id": self.owner_id}


class Contract(TrackedModel):
    """
    A lead-supply agreement with a company or a store.

    Counters are only ever mutated by allocation.services.contract_ledger,
    under a row lock:
      leads_delivered      : assignments counted against the quota
      leads_returned       : leads given back through an approved warranty
      leads_warranty_used  : warranty allowance consumed

    Lifecycle: active → (quota reached) → either completed right away when no
    warranty allowance is left, or kept active with auto_close_at = now + 7d
    so late warranty claims can still be honored.
    """

    owner_type = models.CharField(max_length=10, choices=OwnerType.choices)
    owner_id = models.UUIDField()

    start_date = models.DateField()
    end_date = models.DateField()
    lead_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    leads_contracted = models.IntegerField()
    leads_delivered = models.IntegerField(default=0)
    leads_returned = models.IntegerField(default=0)
    leads_warranty_used = models.IntegerField(default=0)
    warranty_percentage = models.IntegerField(default=30)

    is_active = models.BooleanField(default=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    auto_close_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "contracts"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner_type", "owner_id"],
                condition=Q(is_active=True, deleted_at__isnull=True),
                name="uniq_active_contract_per_owner",
            ),
        ]
        indexes = [
            models.Index(fields=["owner_type", "owner_id", "is_active"], name="idx_contract_owner_active"),
            models.Index(fields=["is_active", "auto_close_at"], name="idx_contract_auto_close"),
        ]

    def __str__(self):
        state = "active" if self.is_active else "closed"
        return (
            f"{self.owner_type}:{self.owner_id} "
            f"{self.leads_delivered}/{self.leads_contracted} ({state})"
        )

    @property
    def owner(self) -> OwnerRef:
        return OwnerRef(self.owner_type, self.owner_id)

    @property
    def max_warranty_leads(self) -> int:
        # ceil(contracted * pct / 100) in integer arithmetic
        return -(-(self.leads_contracted * self.warranty_percentage) // 100)

    @property
    def available_warranty_leads(self) -> int:
        return max(0, self.max_warranty_leads - self.leads_warranty_used)

    @property
    def is_complete(self) -> bool:
        return self.leads_delivered >= self.leads_contracted

    @property
    def remaining_leads(self) -> int:
        return max(0, self.leads_contracted - self.leads_delivered)

    @property
    def warranty_usage_percentage(self) -> float:
        if self.leads_contracted == 0:
            return 0.0
        return self.leads_warranty_used / self.leads_contracted * 100

    def has_reached_warranty_limit(self) -> bool:
        return self.available_warranty_leads <= 0
