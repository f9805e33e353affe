"""Pipeline Wiring: build a LocationUpdatePipeline from Settings.

Invariants:
    - Logging configured here, once per build, from Settings
    - Every store handed to the pipeline is wrapped in TimeoutLocationStore
    - Collaborators wired explicitly (no auto-discovery)
"""

import logging

from geoprivacy.config import Settings, get_settings
from geoprivacy.core.repository_protocols import LocationStore, RandomSource
from geoprivacy.infrastructure.location_store import (
    InMemoryLocationStore,
    TimeoutLocationStore,
)
from geoprivacy.infrastructure.observability import setup_logging
from geoprivacy.services.update_location import LocationUpdatePipeline

logger = logging.getLogger(__name__)


def build_pipeline(
    store: LocationStore | None = None,
    settings: Settings | None = None,
    rng: RandomSource | None = None,
) -> LocationUpdatePipeline:
    """Wire a pipeline. Falls back to an in-memory store when none is given."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    inner = store if store is not None else InMemoryLocationStore()
    pipeline = LocationUpdatePipeline(
        TimeoutLocationStore(inner, settings.store_timeout_seconds),
        rng=rng,
        max_age=settings.max_location_age,
        max_radius_km=settings.max_privacy_zone_radius_km,
    )
    logger.info(
        "Location pipeline ready",
        extra={"radius_km": settings.max_privacy_zone_radius_km},
    )
    return pipeline
