"""Location Update Pipeline: validate, fuzz, delegate to the store, re-fuzz, emit.

Invariants:
    - Every call returns exactly one Success or Failure; nothing else escapes
      except asyncio.CancelledError, which is logged and re-raised
    - Validation failure returns before the store is touched (fail fast)
    - The store call is the only await in each operation
    - PrivacyZoneSettings recomputed on every call from the location's own level
    - Store output is re-fuzzed with an independent draw before it is returned,
      so a store echoing the value it received cannot leak more than the radius
    - StoreError from the store propagates as the same instance, anything else
      is wrapped; no retries here
    - Every Location handed back to a caller carries its masked address; the
      store still receives the full address on update
    - search_nearby never returns more than `limit` locations

Design Decisions:
    - Follows impureim sandwich: pure validate/fuzz → await store → pure fuzz
    - SystemRandom default: no Python-level state, safe to share across tasks
      and threads
    - Clock injectable so freshness is testable without patching datetime
"""

import asyncio
import logging
import math
import random
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from geoprivacy.core.domain_types import ItemId, PrivacyLevel
from geoprivacy.core.errors import (
    ErrorContext,
    InvalidLocationError,
    InvalidSearchError,
    LocationNotFoundError,
    StoreError,
)
from geoprivacy.core.geo_fuzzer import (
    MAX_LATITUDE,
    MAX_LOCATION_AGE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    apply_privacy_zone,
    validate_location,
)
from geoprivacy.core.location import Location
from geoprivacy.core.privacy_zone import MAX_PRIVACY_ZONE_RADIUS_KM, PrivacyZoneSettings
from geoprivacy.core.repository_protocols import (
    DEFAULT_SEARCH_LIMIT,
    LocationStore,
    RandomSource,
)
from geoprivacy.core.result import Failure, Result, Success

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LocationUpdatePipeline:
    """Privacy-preserving front door to a LocationStore."""

    def __init__(
        self,
        store: LocationStore,
        rng: RandomSource | None = None,
        max_age: timedelta = MAX_LOCATION_AGE,
        max_radius_km: float = MAX_PRIVACY_ZONE_RADIUS_KM,
        clock: Callable[[], datetime] = _utc_now,
    ):
        # reject a bad HIDDEN radius here, not on the first HIDDEN update
        PrivacyZoneSettings.from_privacy_level(PrivacyLevel.HIDDEN, max_radius_km)
        self._store = store
        self._rng = rng if rng is not None else random.SystemRandom()
        self._max_age = max_age
        self._max_radius_km = max_radius_km
        self._clock = clock

    def _settings_for(self, location: Location) -> PrivacyZoneSettings:
        return PrivacyZoneSettings.from_privacy_level(
            location.privacy_level, self._max_radius_km,
        )

    def _present(self, location: Location) -> Location:
        """Fuzz by the location's own level and mask its address for the caller."""
        return apply_privacy_zone(
            location, self._settings_for(location), self._rng,
        ).masked()

    async def update(self, item_id: ItemId, candidate: Location) -> Result[Location]:
        """Validate and fuzz a new location, store it, return the re-fuzzed echo."""
        log_extra = {
            "item_id": str(item_id),
            "privacy_level": candidate.privacy_level.value,
        }

        # ── PURE: validate ──
        failure = validate_location(candidate, self._clock(), self._max_age)
        if failure is not None:
            logger.warning(
                f"Rejected location update: {failure.reason.value}",
                extra={**log_extra, "reason": failure.reason.value,
                       "error_code": "INVALID_LOCATION"},
            )
            return Failure(InvalidLocationError(
                failure.reason, failure.message,
                ErrorContext(item_id=item_id, privacy_level=candidate.privacy_level),
            ))

        # ── PURE: derive policy, fuzz outbound ──
        settings = self._settings_for(candidate)
        outbound = apply_privacy_zone(candidate, settings, self._rng)

        # ── IMPURE: single await ──
        try:
            stored = await self._store.update_location(item_id, outbound)
        except asyncio.CancelledError:
            logger.info("Location update cancelled", extra=log_extra)
            raise
        except StoreError as e:
            return self._store_failure(e, log_extra)
        except Exception as e:
            return self._store_failure(StoreError.wrap(e), log_extra)

        # ── PURE: fuzz inbound with a fresh draw, same settings ──
        inbound = apply_privacy_zone(stored, settings, self._rng)
        logger.debug(
            "Location updated",
            extra={**log_extra, "radius_km": settings.fuzzing_radius_km},
        )
        return Success(inbound.masked())

    async def fetch(self, item_id: ItemId) -> Result[Location]:
        """Read an item's stored location, fuzzed by its own privacy level."""
        log_extra = {"item_id": str(item_id)}
        try:
            stored = await self._store.get_location(item_id)
        except StoreError as e:
            return self._store_failure(e, log_extra)
        except Exception as e:
            return self._store_failure(StoreError.wrap(e), log_extra)

        if stored is None:
            logger.info("No stored location", extra=log_extra)
            return Failure(LocationNotFoundError(item_id))
        return Success(self._present(stored))

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_SEARCH_LIMIT,
        privacy_level: PrivacyLevel | None = None,
    ) -> Result[list[Location]]:
        """Up to `limit` locations within radius_km of a centre point, nearest first.

        privacy_level, when given, keeps only locations declared at that level.
        Each result is fuzzed by its own level and its address masked.
        """
        error = _check_search_params(latitude, longitude, radius_km, limit)
        if error is not None:
            logger.warning(
                "Rejected nearby search parameters",
                extra={"error_code": "INVALID_SEARCH"},
            )
            return Failure(InvalidSearchError(error))

        try:
            found = await self._store.search_nearby(
                latitude, longitude, radius_km, limit, privacy_level,
            )
        except StoreError as e:
            return self._store_failure(e, {})
        except Exception as e:
            return self._store_failure(StoreError.wrap(e), {})

        return Success([self._present(loc) for loc in found[:limit]])

    def _store_failure(self, error: StoreError, log_extra: dict) -> Failure:
        logger.error(
            f"Location store failed: {error.message}",
            extra={**log_extra, "error_code": error.code},
        )
        return Failure(error)


def _check_search_params(
    latitude: float, longitude: float, radius_km: float, limit: int,
) -> str | None:
    if not (math.isfinite(latitude) and MIN_LATITUDE <= latitude <= MAX_LATITUDE):
        return f"Latitude must be between {MIN_LATITUDE} and {MAX_LATITUDE} degrees, got {latitude}"
    if not (math.isfinite(longitude) and MIN_LONGITUDE <= longitude <= MAX_LONGITUDE):
        return f"Longitude must be between {MIN_LONGITUDE} and {MAX_LONGITUDE} degrees, got {longitude}"
    if not (math.isfinite(radius_km) and radius_km > 0):
        return f"Search radius must be a positive number of kilometres, got {radius_km}"
    if limit <= 0:
        return f"Search limit must be a positive integer, got {limit}"
    return None
