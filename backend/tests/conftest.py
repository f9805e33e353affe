"""Root conftest: shared test configuration and fixtures."""

import os
from datetime import datetime

import pytest

from geoprivacy.config import get_settings
from tests.doubles import NOW

# Ensure a developer's shell or .env does not leak into test settings
for _key in [k for k in os.environ if k.startswith("GEOPRIVACY_")]:
    del os.environ[_key]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
