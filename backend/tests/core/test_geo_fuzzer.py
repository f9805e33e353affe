"""Geo Fuzzer: tests for validation and the privacy-zone offset.

Tests cover:
    - validate_location: range, non-finite, stale, future, naive timestamps
    - apply_privacy_zone: EXACT passthrough, draw order, golden values
    - Displacement never exceeds the radius (seeded sweep over every latitude,
      bearing sweeps next to both poles)
    - Latitude clamp and longitude wrap at the domain edges
    - Input location is never mutated
"""

import math
import random
from datetime import timedelta

import pytest

from geoprivacy.core.domain_types import PrivacyLevel, ValidationReason
from geoprivacy.core.geo_fuzzer import (
    MAX_CLOCK_SKEW,
    MAX_LOCATION_AGE,
    apply_privacy_zone,
    fuzz_with_draws,
    validate_location,
)
from geoprivacy.core.geo_math import EARTH_RADIUS_KM, haversine_km
from geoprivacy.core.privacy_zone import PrivacyZoneSettings

from tests.doubles import NOW, ScriptedRandom, make_location


def _settings(level: PrivacyLevel) -> PrivacyZoneSettings:
    return PrivacyZoneSettings.from_privacy_level(level)


# ─── validate_location ───────────────────────────────────────────

def test_validate_accepts_fresh_in_range_location():
    assert validate_location(make_location(), NOW) is None


@pytest.mark.parametrize("lat, lon", [
    (90.0, 180.0), (-90.0, -180.0), (0.0, 0.0),
])
def test_validate_accepts_domain_boundaries(lat, lon):
    assert validate_location(make_location(lat, lon), NOW) is None


@pytest.mark.parametrize("lat, lon", [
    (90.0001, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0),
    (math.nan, 0.0), (0.0, math.inf),
])
def test_validate_rejects_out_of_range(lat, lon):
    failure = validate_location(make_location(lat, lon), NOW)
    assert failure is not None
    assert failure.reason is ValidationReason.OUT_OF_RANGE


def test_validate_rejects_stale_location():
    loc = make_location(captured_at=NOW - timedelta(hours=48))
    failure = validate_location(loc, NOW)
    assert failure.reason is ValidationReason.STALE
    assert "too old" in failure.message


def test_validate_accepts_location_exactly_at_max_age():
    loc = make_location(captured_at=NOW - MAX_LOCATION_AGE)
    assert validate_location(loc, NOW) is None


def test_validate_uses_custom_max_age():
    loc = make_location(captured_at=NOW - timedelta(minutes=10))
    failure = validate_location(loc, NOW, max_age=timedelta(minutes=5))
    assert failure.reason is ValidationReason.STALE


def test_validate_checks_range_before_freshness():
    loc = make_location(latitude=120.0, captured_at=NOW - timedelta(days=7))
    assert validate_location(loc, NOW).reason is ValidationReason.OUT_OF_RANGE


def test_validate_rejects_far_future_timestamp():
    loc = make_location(captured_at=NOW + MAX_CLOCK_SKEW + timedelta(seconds=1))
    assert validate_location(loc, NOW).reason is ValidationReason.FUTURE_TIMESTAMP


def test_validate_tolerates_small_clock_skew():
    loc = make_location(captured_at=NOW + timedelta(minutes=1))
    assert validate_location(loc, NOW) is None


def test_validate_treats_naive_timestamps_as_utc():
    naive_now = NOW.replace(tzinfo=None)
    loc = make_location(captured_at=naive_now - timedelta(hours=1))
    assert validate_location(loc, NOW) is None


# ─── apply_privacy_zone ──────────────────────────────────────────

def test_exact_returns_input_without_drawing():
    loc = make_location(privacy_level=PrivacyLevel.EXACT)
    rng = ScriptedRandom([])
    assert apply_privacy_zone(loc, _settings(PrivacyLevel.EXACT), rng) is loc
    assert rng.calls == 0


def test_draws_angle_then_fraction():
    loc = make_location(privacy_level=PrivacyLevel.HIDDEN)
    rng = ScriptedRandom([0.25, 1.0])
    fuzzed = apply_privacy_zone(loc, _settings(PrivacyLevel.HIDDEN), rng)
    assert rng.calls == 2
    # angle 0.25 * 2π = due east: latitude barely moves, longitude increases
    assert fuzzed.latitude == pytest.approx(loc.latitude, abs=1e-12)
    assert fuzzed.longitude > loc.longitude


def test_hidden_due_north_full_radius_golden_value():
    loc = make_location(40.0, -73.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=0.0, fraction=1.0)
    expected_d_lat = (5.0 / EARTH_RADIUS_KM) * (180.0 / math.pi)
    assert fuzzed.latitude == pytest.approx(40.0 + expected_d_lat, abs=1e-12)
    assert fuzzed.longitude == -73.0
    assert haversine_km(40.0, -73.0, fuzzed.latitude, fuzzed.longitude) == pytest.approx(5.0, rel=1e-9)


def test_east_quarter_fraction_golden_value():
    loc = make_location(40.0, -73.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=math.pi / 2, fraction=0.25)
    # sqrt(0.25) * 5 km = 2.5 km due east
    expected_d_lon = (2.5 / (EARTH_RADIUS_KM * math.cos(math.radians(40.0)))) * (180.0 / math.pi)
    assert fuzzed.longitude == pytest.approx(-73.0 + expected_d_lon, abs=1e-12)
    assert haversine_km(40.0, -73.0, fuzzed.latitude, fuzzed.longitude) == pytest.approx(2.5, rel=1e-4)


def test_same_draws_give_same_output():
    loc = make_location(51.5, -0.12, PrivacyLevel.AREA_ONLY)
    settings = _settings(PrivacyLevel.AREA_ONLY)
    a = apply_privacy_zone(loc, settings, ScriptedRandom([0.3, 0.7]))
    b = apply_privacy_zone(loc, settings, ScriptedRandom([0.3, 0.7]))
    assert (a.latitude, a.longitude) == (b.latitude, b.longitude)


def test_fuzzing_keeps_level_timestamp_and_address():
    loc = make_location(privacy_level=PrivacyLevel.APPROXIMATE, address="1 Main St, Springfield")
    fuzzed = apply_privacy_zone(loc, _settings(PrivacyLevel.APPROXIMATE), ScriptedRandom([0.1, 0.9]))
    assert fuzzed.privacy_level is PrivacyLevel.APPROXIMATE
    assert fuzzed.captured_at == loc.captured_at
    assert fuzzed.address == loc.address


def test_fuzzing_does_not_mutate_input():
    loc = make_location(privacy_level=PrivacyLevel.HIDDEN)
    apply_privacy_zone(loc, _settings(PrivacyLevel.HIDDEN), ScriptedRandom([0.5, 0.5]))
    assert (loc.latitude, loc.longitude) == (40.0, -73.0)


@pytest.mark.parametrize("level", [
    PrivacyLevel.APPROXIMATE, PrivacyLevel.AREA_ONLY, PrivacyLevel.HIDDEN,
])
def test_displacement_never_exceeds_radius(level):
    sweep = random.Random(20261018)
    settings = _settings(level)
    for _ in range(900):
        loc = make_location(
            sweep.uniform(-90.0, 90.0), sweep.uniform(-180.0, 180.0), level,
        )
        fuzzed = apply_privacy_zone(loc, settings, sweep)
        distance = haversine_km(loc.latitude, loc.longitude, fuzzed.latitude, fuzzed.longitude)
        assert distance <= settings.fuzzing_radius_km * (1 + 1e-6)


@pytest.mark.parametrize("lat", [85.0, 89.9, 89.955, 89.99, -89.955])
def test_full_radius_near_poles_stays_within_radius(lat):
    settings = _settings(PrivacyLevel.HIDDEN)
    loc = make_location(lat, 30.0, PrivacyLevel.HIDDEN)
    for step in range(720):
        theta = 2.0 * math.pi * step / 720
        fuzzed = fuzz_with_draws(loc, settings, theta, 1.0)
        distance = haversine_km(lat, 30.0, fuzzed.latitude, fuzzed.longitude)
        assert distance <= 5.0 * (1 + 1e-6)
        assert -90.0 <= fuzzed.latitude <= 90.0
        assert -180.0 <= fuzzed.longitude < 180.0


def test_high_latitude_diagonal_lands_on_the_circle():
    # south-east from 89.9: the planar step would overshoot by about 7%
    loc = make_location(89.9, 0.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=3 * math.pi / 4, fraction=1.0)
    assert haversine_km(89.9, 0.0, fuzzed.latitude, fuzzed.longitude) == pytest.approx(5.0, rel=1e-6)


def test_full_radius_draws_land_on_the_circle():
    settings = _settings(PrivacyLevel.AREA_ONLY)
    loc = make_location(10.0, 20.0, PrivacyLevel.AREA_ONLY)
    for theta in (0.0, math.pi / 3, math.pi, 4.0, 5.5):
        fuzzed = fuzz_with_draws(loc, settings, theta, 1.0)
        assert haversine_km(10.0, 20.0, fuzzed.latitude, fuzzed.longitude) == pytest.approx(1.0, rel=1e-3)


def test_latitude_clamped_at_north_pole():
    loc = make_location(89.99, 0.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=0.0, fraction=1.0)
    assert fuzzed.latitude == 90.0


def test_latitude_clamped_at_south_pole():
    loc = make_location(-89.99, 0.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=math.pi, fraction=1.0)
    assert fuzzed.latitude == -90.0


def test_longitude_wraps_across_antimeridian():
    loc = make_location(0.0, 179.99, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=math.pi / 2, fraction=1.0)
    assert -180.0 <= fuzzed.longitude < -179.9
    assert haversine_km(0.0, 179.99, fuzzed.latitude, fuzzed.longitude) == pytest.approx(5.0, rel=1e-3)


def test_pole_input_stays_in_domain():
    loc = make_location(90.0, 45.0, PrivacyLevel.HIDDEN)
    fuzzed = fuzz_with_draws(loc, _settings(PrivacyLevel.HIDDEN), theta=1.0, fraction=0.5)
    assert -90.0 <= fuzzed.latitude <= 90.0
    assert -180.0 <= fuzzed.longitude <= 180.0
