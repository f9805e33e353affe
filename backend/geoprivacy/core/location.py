"""Location: immutable geolocation value for a listed item.

Invariants:
    - Frozen: transforms return new instances via with_coordinates()
    - Construction never validates ranges; untrusted input must go through
      geo_fuzzer.validate_location so rejection is an explicit result
    - privacy_level, captured_at and address survive every coordinate transform
    - masked() is the only transform that rewrites the address

Design Decisions:
    - dataclass over pydantic model: core stays free of serialization concerns,
      wire formats belong to the store
"""

from dataclasses import dataclass, replace
from datetime import datetime

from geoprivacy.core.domain_types import PrivacyLevel


HIDDEN_ADDRESS = "Location hidden"


@dataclass(frozen=True, slots=True)
class Location:
    """A geolocation reading plus the privacy tier its owner declared."""

    latitude: float
    longitude: float
    privacy_level: PrivacyLevel
    captured_at: datetime
    address: str | None = None

    def with_coordinates(self, latitude: float, longitude: float) -> "Location":
        """Copy with new coordinates, everything else unchanged."""
        return replace(self, latitude=latitude, longitude=longitude)

    def masked(self) -> "Location":
        """Copy whose address is replaced by display_address()."""
        shown = self.display_address()
        if shown == self.address:
            return self
        return replace(self, address=shown)

    def display_address(self) -> str | None:
        """Address masked according to privacy_level."""
        if self.address is None:
            return None
        if self.privacy_level is PrivacyLevel.HIDDEN:
            return HIDDEN_ADDRESS
        if self.privacy_level is PrivacyLevel.EXACT:
            return self.address

        parts = [p.strip() for p in self.address.split(",") if p.strip()]
        if not parts:
            return ""
        if self.privacy_level is PrivacyLevel.APPROXIMATE:
            # drop the street line, keep area and beyond
            return ", ".join(parts[1:]) if len(parts) > 1 else parts[0]
        return parts[-1]
