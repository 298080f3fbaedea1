from django.db import models

from allocation.models.base import TrackedModel


class LeadStatus(models.TextChoices):
    NEW = "new", "New"
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    ARCHIVED = "archived", "Archived"
    SENT = "sent", "Sent"


class Lead(TrackedModel):
    """
    A consumer inquiry captured upstream and distributed to stores.

    Created by the intake path (already-normalized lead events). Only `new`
    leads are offered to stores; a lead becomes `sent` once assigned.
    """

    segment = models.ForeignKey(
        "Segment", on_delete=models.PROTECT, null=True, blank=True, related_name="leads"
    )

    # Contact
    name = models.CharField(max_length=255)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True)

    # Address
    zip_code = models.CharField(max_length=10, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=2, blank=True, default="")
    address = models.TextField(blank=True, default="")
    latitude = models.FloatField()
    longitude = models.FloatField()

    # Origin tracking
    external_id = models.CharField(max_length=255, null=True, blank=True)
    external_source = models.CharField(max_length=255, null=True, blank=True)

    status = models.CharField(max_length=20, choices=LeadStatus.choices, default=LeadStatus.NEW)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "leads"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["latitude", "longitude"], name="idx_lead_coords"),
            models.Index(fields=["status", "is_active"], name="idx_lead_status_active"),
            models.Index(fields=["external_source", "external_id"], name="idx_lead_external"),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"

    def normalized_phones(self) -> list[str]:
        return list(self.phones.values_list("phone_normalized", flat=True))
