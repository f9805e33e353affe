"""Spherical Geometry: distances and bounding boxes on a mean-radius Earth.

Invariants:
    - All inputs and outputs in degrees / kilometres
    - EARTH_RADIUS_KM is the single source of truth for the sphere radius
    - A BoundingBox never under-covers its circle: boxes that reach a pole span
      every longitude, boxes that cross the antimeridian wrap (min > max)
"""

import math
from dataclasses import dataclass


EARTH_RADIUS_KM: float = 6371.0


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_longitude > self.max_longitude

    def contains(self, latitude: float, longitude: float) -> bool:
        if not self.min_latitude <= latitude <= self.max_latitude:
            return False
        if self.crosses_antimeridian:
            return longitude >= self.min_longitude or longitude <= self.max_longitude
        return self.min_longitude <= longitude <= self.max_longitude


def wrap_longitude(longitude: float) -> float:
    """Wrap any longitude into [-180, 180)."""
    return (longitude + 180.0) % 360.0 - 180.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lon points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def is_within_radius(
    latitude: float,
    longitude: float,
    center_latitude: float,
    center_longitude: float,
    radius_km: float,
) -> bool:
    """Check whether a point is inside or on the boundary of a circle."""
    return haversine_km(latitude, longitude, center_latitude, center_longitude) <= radius_km


def bounding_box(latitude: float, longitude: float, radius_km: float) -> BoundingBox:
    """Lat/lon box enclosing a circle, for coarse prefiltering before haversine."""
    lat_offset = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = latitude - lat_offset
    max_lat = latitude + lat_offset

    # circle reaches a pole: every meridian passes through it
    if min_lat <= -90.0 or max_lat >= 90.0:
        return BoundingBox(max(-90.0, min_lat), min(90.0, max_lat), -180.0, 180.0)

    lon_offset = math.degrees(
        radius_km / (EARTH_RADIUS_KM * math.cos(math.radians(latitude))),
    )
    if lon_offset >= 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    min_lon = longitude - lon_offset
    max_lon = longitude + lon_offset
    if min_lon < -180.0 or max_lon > 180.0:
        return BoundingBox(min_lat, max_lat, wrap_longitude(min_lon), wrap_longitude(max_lon))
    return BoundingBox(min_lat, max_lat, min_lon, max_lon)
