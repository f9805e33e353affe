"""Reference Location Stores: in-memory store and timeout decorator.

Invariants:
    - InMemoryLocationStore returns exactly what it stored (no server-side transform)
    - All dict access happens under one asyncio.Lock per store
    - TimeoutLocationStore maps a timed-out call to StoreError("timeout");
      cancellation of the caller still propagates untouched
    - search_nearby results sorted nearest first, truncated to `limit` after
      the distance filter

Design Decisions:
    - In-memory only: durable storage is a deployment concern behind the
      LocationStore protocol
    - Bounding-box prefilter before haversine, same shape as an indexed geo query
"""

import asyncio
import logging

from geoprivacy.core.domain_types import ItemId, PrivacyLevel
from geoprivacy.core.errors import StoreError
from geoprivacy.core.geo_math import bounding_box, haversine_km
from geoprivacy.core.location import Location
from geoprivacy.core.repository_protocols import DEFAULT_SEARCH_LIMIT, LocationStore

logger = logging.getLogger(__name__)


class InMemoryLocationStore:
    """Dict-backed LocationStore, one location per item."""

    def __init__(self):
        self._locations: dict[ItemId, Location] = {}
        self._lock = asyncio.Lock()

    async def update_location(self, item_id: ItemId, location: Location) -> Location:
        async with self._lock:
            self._locations[item_id] = location
        return location

    async def get_location(self, item_id: ItemId) -> Location | None:
        async with self._lock:
            return self._locations.get(item_id)

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_SEARCH_LIMIT,
        privacy_level: PrivacyLevel | None = None,
    ) -> list[Location]:
        box = bounding_box(latitude, longitude, radius_km)
        async with self._lock:
            candidates = [
                loc for loc in self._locations.values()
                if box.contains(loc.latitude, loc.longitude)
                and (privacy_level is None or loc.privacy_level is privacy_level)
            ]
        scored = [
            (haversine_km(latitude, longitude, loc.latitude, loc.longitude), loc)
            for loc in candidates
        ]
        within = [loc for dist, loc in sorted(scored, key=lambda s: s[0]) if dist <= radius_km]
        return within[:limit]

    def __len__(self) -> int:
        return len(self._locations)


class TimeoutLocationStore:
    """Wraps another store, bounding each call by a timeout."""

    def __init__(self, inner: LocationStore, timeout_seconds: float):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._inner = inner
        self._timeout = timeout_seconds

    async def _bounded(self, operation: str, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Location store {operation} timed out after {self._timeout}s",
                extra={"error_code": "STORE_ERROR"},
            )
            raise StoreError("timeout", cause=e) from e

    async def update_location(self, item_id: ItemId, location: Location) -> Location:
        return await self._bounded(
            "update_location", self._inner.update_location(item_id, location),
        )

    async def get_location(self, item_id: ItemId) -> Location | None:
        return await self._bounded("get_location", self._inner.get_location(item_id))

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_SEARCH_LIMIT,
        privacy_level: PrivacyLevel | None = None,
    ) -> list[Location]:
        return await self._bounded(
            "search_nearby",
            self._inner.search_nearby(
                latitude, longitude, radius_km, limit, privacy_level,
            ),
        )
