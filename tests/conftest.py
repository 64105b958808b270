"""Shared fixtures for the shelf display tests."""

from datetime import datetime

import pytest

from shelfdisplay.core.scheduler import YieldScheduler
from shelfdisplay.providers.capabilities import CapabilityCache
from shelfdisplay.providers.mock import MockProvider
from shelfdisplay.surface.buffer import BufferSurface
from shelfdisplay.views.base import ViewContext


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def surface():
    """A 3x2 advanced monitor sized buffer."""
    return BufferSurface(39, 13, "test")


@pytest.fixture
def scheduler():
    return YieldScheduler(interval=10)


@pytest.fixture
def context(mock_provider, clock, scheduler):
    return ViewContext(
        driver=mock_provider,
        capabilities=CapabilityCache(mock_provider, ttl=2.0, clock=clock),
        scheduler=scheduler,
        clock=clock,
        wall_clock=lambda: datetime(2024, 3, 9, 14, 5, 30),
    )


@pytest.fixture
def empty_context(clock, scheduler):
    """Context with no provider attached."""
    return ViewContext(driver=None, scheduler=scheduler, clock=clock)
