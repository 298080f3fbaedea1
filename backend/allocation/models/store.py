from django.db import models

from allocation.models.base import TrackedModel


class Store(TrackedModel):
    """A point of sale that receives leads. Owns one or more StoreLocations."""

    company = models.ForeignKey("Company", on_delete=models.PROTECT, related_name="stores")

    name = models.CharField(max_length=255)
    document = models.CharField(max_length=32, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True)

    zip_code = models.CharField(max_length=10, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=2, blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "stores"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def main_location(self):
        return self.locations.filter(is_main=True).first()
