"""Privacy Zone Policy: maps a declared PrivacyLevel to a fuzzing radius.

Invariants:
    - fuzzing_radius_km == 0 iff privacy_level is EXACT
    - Radius is non-decreasing as strictness increases
    - enabled is derived from the radius, never set independently
    - Settings are recomputed per call, never cached or persisted

Design Decisions:
    - Enum-to-policy pure function instead of a free-form config object:
      invalid level/radius pairs cannot be constructed
    - HIDDEN radius injectable (max_radius_km) so deployments can tune it from
      Settings without touching the fixed lower tiers
"""

from dataclasses import dataclass

from geoprivacy.core.domain_types import PrivacyLevel


MAX_PRIVACY_ZONE_RADIUS_KM: float = 5.0

_FIXED_RADII_KM: dict[PrivacyLevel, float] = {
    PrivacyLevel.EXACT: 0.0,
    PrivacyLevel.APPROXIMATE: 0.5,
    PrivacyLevel.AREA_ONLY: 1.0,
}


@dataclass(frozen=True, slots=True)
class PrivacyZoneSettings:
    """Fuzzing policy for one pipeline invocation."""

    privacy_level: PrivacyLevel
    fuzzing_radius_km: float

    @property
    def enabled(self) -> bool:
        return self.fuzzing_radius_km > 0.0

    @classmethod
    def from_privacy_level(
        cls,
        level: PrivacyLevel,
        max_radius_km: float = MAX_PRIVACY_ZONE_RADIUS_KM,
    ) -> "PrivacyZoneSettings":
        """Derive the policy for a privacy level."""
        floor = _FIXED_RADII_KM[PrivacyLevel.AREA_ONLY]
        if max_radius_km < floor:
            raise ValueError(
                f"max_radius_km={max_radius_km} is below the AREA_ONLY "
                f"radius ({floor} km)",
            )
        if level is PrivacyLevel.HIDDEN:
            return cls(privacy_level=level, fuzzing_radius_km=max_radius_km)
        return cls(privacy_level=level, fuzzing_radius_km=_FIXED_RADII_KM[level])
