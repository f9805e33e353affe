"""Geo Fuzzer: input validation and randomized-offset privacy transform.

Invariants:
    - validate_location is PURE: returns a failure descriptor or None, never raises
    - Range checked before freshness: an out-of-range fix is OUT_OF_RANGE even when stale
    - apply_privacy_zone returns the same instance for a zero radius (EXACT passthrough)
    - Displacement distance = radius * sqrt(r): uniform over the disk area,
      maximum displacement equals the configured radius
    - Great-circle displacement never exceeds radius * sqrt(r): where the planar
      step overshoots (high latitudes) the exact destination point is used
    - Output latitude clamped to [-90, 90], output longitude wrapped into [-180, 180)
    - Given identical draws, output is identical (golden-value testable)

Design Decisions:
    - Randomness injected through the RandomSource protocol, drawn in a fixed
      order (angle, then radius fraction) so a scripted source is reproducible
    - fuzz_with_draws exposes the geometry with explicit draws; apply_privacy_zone
      is the only caller that touches the random source
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from geoprivacy.core.domain_types import ValidationReason
from geoprivacy.core.geo_math import EARTH_RADIUS_KM, is_within_radius, wrap_longitude
from geoprivacy.core.location import Location
from geoprivacy.core.privacy_zone import PrivacyZoneSettings
from geoprivacy.core.repository_protocols import RandomSource


MAX_LOCATION_AGE: timedelta = timedelta(hours=24)
MAX_CLOCK_SKEW: timedelta = timedelta(minutes=5)

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0

# relative slack before the planar step counts as an overshoot
_PLANAR_TOLERANCE = 1e-9


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """Why a location was rejected. Human-readable message for the caller."""
    reason: ValidationReason
    message: str


# ─── Validation ──────────────────────────────────────────────────

def validate_location(
    location: Location,
    now: datetime,
    max_age: timedelta = MAX_LOCATION_AGE,
) -> ValidationFailure | None:
    """Check coordinate domains and freshness. None means valid."""
    lat, lon = location.latitude, location.longitude
    if not (math.isfinite(lat) and MIN_LATITUDE <= lat <= MAX_LATITUDE):
        return ValidationFailure(
            ValidationReason.OUT_OF_RANGE,
            f"Latitude must be between {MIN_LATITUDE} and {MAX_LATITUDE} degrees, got {lat}",
        )
    if not (math.isfinite(lon) and MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
        return ValidationFailure(
            ValidationReason.OUT_OF_RANGE,
            f"Longitude must be between {MIN_LONGITUDE} and {MAX_LONGITUDE} degrees, got {lon}",
        )

    age = _as_utc(now) - _as_utc(location.captured_at)
    if age > max_age:
        return ValidationFailure(
            ValidationReason.STALE,
            f"Location is too old: captured {_format_age(age)} ago, "
            f"maximum allowed age is {_format_age(max_age)}",
        )
    if -age > MAX_CLOCK_SKEW:
        return ValidationFailure(
            ValidationReason.FUTURE_TIMESTAMP,
            f"Location capture time is {_format_age(-age)} in the future",
        )
    return None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _format_age(delta: timedelta) -> str:
    seconds = int(delta.total_seconds())
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if hours:
        return f"{hours}h{minutes:02d}m"
    return f"{minutes}m"


# ─── Privacy Zone Transform ──────────────────────────────────────

def apply_privacy_zone(
    location: Location, settings: PrivacyZoneSettings, rng: RandomSource,
) -> Location:
    """Offset a location to a uniformly random point within the fuzzing radius."""
    if settings.fuzzing_radius_km <= 0.0:
        return location
    theta = 2.0 * math.pi * rng.random()
    fraction = rng.random()
    return fuzz_with_draws(location, settings, theta, fraction)


def fuzz_with_draws(
    location: Location,
    settings: PrivacyZoneSettings,
    theta: float,
    fraction: float,
) -> Location:
    """Apply the privacy offset for an explicit bearing (radians) and radius fraction."""
    if settings.fuzzing_radius_km <= 0.0:
        return location

    distance_km = settings.fuzzing_radius_km * math.sqrt(fraction)
    angular = distance_km / EARTH_RADIUS_KM
    lat_rad = math.radians(location.latitude)

    d_lat = math.degrees(angular) * math.cos(theta)
    d_lon = math.degrees(angular / math.cos(lat_rad)) * math.sin(theta)

    latitude = min(MAX_LATITUDE, max(MIN_LATITUDE, location.latitude + d_lat))
    longitude = wrap_longitude(location.longitude + d_lon)
    if not is_within_radius(
        latitude, longitude, location.latitude, location.longitude,
        distance_km * (1.0 + _PLANAR_TOLERANCE),
    ):
        latitude, longitude = _destination_point(
            location.latitude, location.longitude, theta, angular,
        )
    return location.with_coordinates(latitude, longitude)


def _destination_point(
    latitude: float, longitude: float, bearing: float, angular: float,
) -> tuple[float, float]:
    """Point reached travelling `angular` radians along a great circle from a start bearing."""
    phi1 = math.radians(latitude)
    sin_phi2 = (
        math.sin(phi1) * math.cos(angular)
        + math.cos(phi1) * math.sin(angular) * math.cos(bearing)
    )
    phi2 = math.asin(min(1.0, max(-1.0, sin_phi2)))
    d_lambda = math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(phi1),
        math.cos(angular) - math.sin(phi1) * sin_phi2,
    )
    lat2 = min(MAX_LATITUDE, max(MIN_LATITUDE, math.degrees(phi2)))
    return lat2, wrap_longitude(longitude + math.degrees(d_lambda))
