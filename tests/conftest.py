"""
Pytest configuration for test suite

Markers:
- unit: Fast unit tests (pure computation)
- scenario: Hand-built price scenarios with known outcomes
"""

import pytest

from indicator_engine.core.config import Settings
from indicator_engine.services.indicators import IndicatorEngine


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Fast unit tests (no dependencies)")
    config.addinivalue_line(
        "markers", "scenario: Hand-built price scenarios with known outcomes"
    )


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings):
    return IndicatorEngine(settings=settings)
