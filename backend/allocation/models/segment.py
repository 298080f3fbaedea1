from django.db import models

from allocation.models.base import TrackedModel


class Segment(TrackedModel):
    """Business segment a lead was captured for. Field schemas live outside the core."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "segments"
        ordering = ["name"]

    def __str__(self):
        return self.name
