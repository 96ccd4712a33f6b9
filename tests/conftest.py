"""Shared pytest fixtures.

Settings are built without reading any .env file so tests never pick up a
developer's local search cluster or credentials.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from datora_infra.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment file."""
    return Settings(_env_file=None)
