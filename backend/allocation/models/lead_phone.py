from django.db import models

from allocation.models.base import TrackedModel


class LeadPhone(TrackedModel):
    """
    A phone number attached to a lead, kept in both raw and normalized form.

    phone_normalized is the exclusivity key. It is computed once, by the write
    path (allocation.services.lead_intake), never by a save hook.
    """

    lead = models.ForeignKey("Lead", on_delete=models.CASCADE, related_name="phones")

    phone_original = models.CharField(max_length=40)
    phone_normalized = models.CharField(max_length=20, db_index=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "lead_phones"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.phone_original} -> {self.phone_normalized}"
