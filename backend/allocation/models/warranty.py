from django.db import models

from allocation.models.base import TrackedModel


class WarrantyStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    WAITING_REPLACEMENT = "waiting_replacement", "Waiting replacement"
    REPLACED = "replaced", "Replaced"


class LeadWarranty(TrackedModel):
    """
    A store's dispute over a delivered lead.

    pending → waiting_replacement → replaced
            ↘ rejected

    `approved` is accepted as a label meaning "allowance consumed, no
    replacement yet" and is treated like waiting_replacement.
    Terminal: rejected, replaced.
    """

    assignment = models.ForeignKey(
        "LeadAssignment", on_delete=models.PROTECT, related_name="warranties"
    )
    new_lead = models.ForeignKey(
        "Lead", on_delete=models.PROTECT, null=True, blank=True,
        related_name="replacement_warranties",
    )

    status = models.CharField(
        max_length=30, choices=WarrantyStatus.choices, default=WarrantyStatus.PENDING
    )
    return_reason = models.TextField()

    # Analysis
    analysis_notes = models.TextField(null=True, blank=True)
    analyzed_by = models.CharField(max_length=100, null=True, blank=True)  # analyst reference
    analyzed_at = models.DateTimeField(null=True, blank=True)
    replaced_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "lead_warranties"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="idx_warranty_status_date"),
        ]

    def __str__(self):
        return f"warranty for assignment={self.assignment_id} ({self.status})"
