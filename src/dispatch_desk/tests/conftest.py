"""
Shared fixtures for the dispatch desk tests.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from dispatch_desk.config import DeskConfig
from dispatch_desk.services.desk import DispatchDesk


class FakeClock:
    """Settable clock; every call returns the current fake time."""

    def __init__(self, start: datetime = datetime(2025, 1, 15, 10, 30, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Default tunables with the background timers off."""
    return DeskConfig(simulation_enabled=False)


@pytest.fixture
def desk(config, clock):
    """Desk seeded with the standard 425 zones and 5 responders."""
    return DispatchDesk.seeded(config, clock=clock, rng=random.Random(42))
