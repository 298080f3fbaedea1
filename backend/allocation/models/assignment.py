from django.db import models

from allocation.models.base import TrackedModel


class AssignmentStatus(models.TextChoices):
    NEW = "new", "New"
    CONTACTED = "contacted", "Contacted"
    CONVERTED = "converted", "Converted"
    NOT_INTERESTED = "not_interested", "Not interested"
    INVALID = "invalid", "Invalid"
    WARRANTY_PENDING = "warranty_pending", "Warranty pending"
    WARRANTY_APPROVED = "warranty_approved", "Warranty approved"
    WARRANTY_REJECTED = "warranty_rejected", "Warranty rejected"
    WARRANTY_WAITING_REPLACEMENT = "warranty_waiting_replacement", "Warranty waiting replacement"
    WARRANTY_REPLACED = "warranty_replaced", "Warranty replaced"


class LeadAssignment(TrackedModel):
    """
    One delivery of a lead to a store, counted against a contract.

    created_at anchors the exclusivity window: a contact (by normalized phone)
    is not resold to the same store/company until the window has elapsed.

    Status lifecycle:
      new → contacted → converted | not_interested | invalid
      new → warranty_pending → warranty_approved | warranty_rejected
          → warranty_waiting_replacement → warranty_replaced
    Only enumeration membership is enforced on updates.
    """

    lead = models.ForeignKey("Lead", on_delete=models.PROTECT, related_name="assignments")
    store = models.ForeignKey("Store", on_delete=models.PROTECT, related_name="assignments")
    contract = models.ForeignKey("Contract", on_delete=models.PROTECT, related_name="assignments")

    status = models.CharField(
        max_length=40, choices=AssignmentStatus.choices, default=AssignmentStatus.NEW
    )
    notes = models.TextField(null=True, blank=True)

    # Replacement delivered through the warranty workflow (not counted as a delivery)
    is_warranty = models.BooleanField(default=False)

    class Meta:
        db_table = "lead_stores"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["store", "-created_at"], name="idx_assignment_store_date"),
            models.Index(fields=["lead", "-created_at"], name="idx_assignment_lead_date"),
            models.Index(fields=["contract"], name="idx_assignment_contract"),
        ]

    def __str__(self):
        return f"lead={self.lead_id} → store={self.store_id} ({self.status})"
