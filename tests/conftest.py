"""Shared pytest fixtures for annotator-extras tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from annotator_extras.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None]:
    """Drop the cached Settings so env changes in one test do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
