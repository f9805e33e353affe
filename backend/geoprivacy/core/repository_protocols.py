"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from services/ or infrastructure/, dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell at construction time

Design Decisions:
    - Protocol over ABC: structural subtyping, random.Random satisfies RandomSource as-is
    - Async in Protocol: store methods are async because implementations do IO,
      but core functions that consume their results are never async themselves,
      the shell orchestrates the awaits around the pure logic
"""

from typing import Protocol

from geoprivacy.core.domain_types import ItemId, PrivacyLevel
from geoprivacy.core.location import Location


DEFAULT_SEARCH_LIMIT: int = 100


class RandomSource(Protocol):
    """Uniform draws in [0, 1]. Must be safe for concurrent use if shared."""
    def random(self) -> float: ...


class LocationStore(Protocol):
    """Contract for location persistence or forwarding, implemented by the shell.

    Failures are raised; StoreError is propagated as-is by the pipeline,
    anything else is wrapped into a StoreError.
    """
    async def update_location(
        self, item_id: ItemId, location: Location,
    ) -> Location: ...
    async def get_location(self, item_id: ItemId) -> Location | None: ...
    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_SEARCH_LIMIT,
        privacy_level: PrivacyLevel | None = None,
    ) -> list[Location]:
        """At most `limit` locations within radius_km, nearest first,
        optionally only those declared at `privacy_level`."""
        ...
