from __future__ import annotations

import os

import pytest

# Keep the module-level engine away from the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from hms_messaging.config import reset_settings_cache


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()
