from django.db import models

from allocation.models.base import TrackedModel


class Company(TrackedModel):
    """
    A retail group that owns one or more stores.

    A contract may be held by the company itself (covering all of its stores)
    or by an individual store.
    """

    name = models.CharField(max_length=255)
    document = models.CharField(max_length=32, null=True, blank=True)  # CNPJ
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True)

    zip_code = models.CharField(max_length=10, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=2, blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = "companies"

    def __str__(self):
        return self.name
