"""Shared pytest fixtures."""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.core.clock import FixedClock


@pytest.fixture(autouse=True)
def clear_cache():
    """Record ids are reused between tests, so cached records must not leak."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """API client fixture."""
    return APIClient()


@pytest.fixture
def clock():
    """A clock pinned to the current instant; advance it explicitly."""
    return FixedClock()
