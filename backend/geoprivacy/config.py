"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting has a working default; GEOPRIVACY_* env vars override
    - get_settings() is cached (lru_cache): single instance per process
    - max_privacy_zone_radius_km never drops below the AREA_ONLY radius (1 km)

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Freshness threshold exposed here rather than hardcoded in core: the 24h
      default is a product decision, core takes it as a parameter
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEOPRIVACY_", env_file=".env", case_sensitive=False,
    )

    # Privacy policy
    max_location_age_hours: float = Field(24.0, gt=0)
    max_privacy_zone_radius_km: float = Field(5.0, ge=1.0)

    # Store
    store_timeout_seconds: float = Field(10.0, gt=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def max_location_age(self) -> timedelta:
        return timedelta(hours=self.max_location_age_hours)


@lru_cache
def get_settings() -> Settings:
    return Settings()
