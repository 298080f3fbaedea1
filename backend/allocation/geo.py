"""
Great-circle distance and radius prefiltering.

haversine_km() is the only definition of "distance" in the system: every
coverage check (lead→stores, store→leads, StoreLocation.covers) goes through it.

Radius queries run in two steps:
1. bounding_box() gives a lat/lon rectangle that fully contains the circle,
   so the database can use the (latitude, longitude) indexes instead of
   scanning every row.
2. haversine_km() is applied to the surviving rows to drop the corners.
"""
import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.045


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two (lat, lon) pairs, in kilometers."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Guard against a > 1 from floating point noise near antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def as_filter(self, prefix: str = "") -> dict:
        """ORM lookup kwargs, e.g. as_filter("locations__") for a related model."""
        return {
            f"{prefix}latitude__gte": self.min_lat,
            f"{prefix}latitude__lte": self.max_lat,
            f"{prefix}longitude__gte": self.min_lon,
            f"{prefix}longitude__lte": self.max_lon,
        }


def bounding_box(lat: float, lon: float, radius_km: float) -> BoundingBox:
    """Rectangle enclosing the circle of radius_km around (lat, lon)."""
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    min_lat = max(-90.0, lat - lat_delta)
    max_lat = min(90.0, lat + lat_delta)

    cos_lat = math.cos(math.radians(lat))
    if cos_lat <= 1e-6 or min_lat <= -90.0 or max_lat >= 90.0:
        # Circle touches a pole: every longitude is in range
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    lon_delta = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    if lon_delta >= 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    # TODO: split the box in two when it crosses the antimeridian instead of widening it
    min_lon = lon - lon_delta
    max_lon = lon + lon_delta
    if min_lon < -180.0 or max_lon > 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    return BoundingBox(min_lat, max_lat, min_lon, max_lon)
