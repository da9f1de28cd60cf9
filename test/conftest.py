"""
Test Configuration

Environment setup MUST happen before any application import: settings and
the loguru file sink read the environment at import time.
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Never talk to a real booking service from tests
    os.environ['BOOKING_API_BASE_URL'] = 'http://booking.test/api'
    os.environ.setdefault('DEBUG', 'true')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402


FIXED_NOW = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    config.addinivalue_line('markers', 'unit: pure unit tests without external dependencies')
    config.addinivalue_line('markers', 'integration: full booking flow over an in-memory HTTP transport')


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
