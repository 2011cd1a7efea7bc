"""Shared test fixtures for macrosignals tests.

This module provides pytest fixtures that can be used across all test files.
"""

from datetime import datetime, timedelta, timezone

import pytest

from macrosignals.monitoring.alerts import AlertManager, InMemoryAlertHandler
from macrosignals.production.state import InMemoryKeyValueStore
from macrosignals.types import IndicatorSample


class FakeClock:
    """Manually advanced clock for time-dependent components."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock starting at 2024-01-15 12:00 UTC."""
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    """Fresh in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def alert_handler():
    """Create in-memory alert handler."""
    return InMemoryAlertHandler()


@pytest.fixture
def alert_manager(alert_handler):
    """Create alert manager with in-memory handler."""
    return AlertManager(handlers=[alert_handler])


def make_history(values, end=datetime(2024, 3, 31, tzinfo=timezone.utc)):
    """Daily samples ending at end, one per value."""
    start = end - timedelta(days=len(values) - 1)
    return [
        IndicatorSample(timestamp=start + timedelta(days=i), value=float(v))
        for i, v in enumerate(values)
    ]


@pytest.fixture
def history_factory():
    """Build daily IndicatorSample histories from a list of values."""
    return make_history
