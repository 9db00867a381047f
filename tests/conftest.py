"""
Test configuration and fixtures.

This module sets up test environment and provides shared fixtures for all tests.
"""

import os
from datetime import datetime

import pytest

# Pin settings BEFORE any imports of shared.config
os.environ["TIMEZONE"] = "America/Sao_Paulo"
os.environ["LOG_LEVEL"] = "DEBUG"

from agent.utils.date_parser import BRAZIL_TZ  # noqa: E402
from shared.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop the cached Settings so per-test env overrides are picked up."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def reference_date():
    """Fixed reference date for consistent testing: Thursday, Nov 20, 2025, 14:30."""
    return datetime(2025, 11, 20, 14, 30, 0, tzinfo=BRAZIL_TZ)
