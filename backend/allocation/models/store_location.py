from django.db import models

from allocation.geo import haversine_km
from allocation.models.base import TrackedModel


class StoreLocation(TrackedModel):
    """
    A capture point for a store: a coordinate plus a coverage radius in km.

    Writes go through allocation.services.store_locations.save_location, which
    enforces the minimum radius and keeps a single `is_main` per store.
    """

    store = models.ForeignKey("Store", on_delete=models.CASCADE, related_name="locations")

    name = models.CharField(max_length=255, blank=True, default="")
    zip_code = models.CharField(max_length=10, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=2, blank=True, default="")
    address = models.TextField(blank=True, default="")

    latitude = models.FloatField()
    longitude = models.FloatField()
    coverage_radius = models.PositiveIntegerField(default=10)  # km

    is_main = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "store_locations"
        ordering = ["-is_main", "created_at"]
        indexes = [
            models.Index(fields=["latitude", "longitude"], name="idx_location_coords"),
            models.Index(fields=["store", "is_active"], name="idx_location_store_active"),
        ]

    def __str__(self):
        label = self.name or f"{self.latitude:.4f},{self.longitude:.4f}"
        return f"{label} (r={self.coverage_radius}km)"

    def distance_to(self, latitude: float, longitude: float) -> float:
        return haversine_km(self.latitude, self.longitude, latitude, longitude)

    def covers(self, latitude: float, longitude: float) -> bool:
        return self.distance_to(latitude, longitude) <= self.coverage_radius
