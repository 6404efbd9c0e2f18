"""Shared pytest fixtures for icssim tests."""

import pytest

from icssim.devices import (
    ClimateControlSimulator,
    PulseCounterSimulator,
    TankLevelSimulator,
)
from icssim.modbus import Dispatcher


class FakeRng:
    """Test double for numpy.random.Generator: scripted draws.

    integers() returns the next scripted integer, or *low* once the script
    is exhausted. random() returns the next scripted float, or 0.5.
    """

    def __init__(self, integers: list[int] | None = None, floats: list[float] | None = None):
        """Initialize with scripted draws."""
        self._integers = list(integers or [])
        self._floats = list(floats or [])
        self.integer_calls = []

    def integers(self, low, high):
        """Record the requested range and return the next scripted value."""
        self.integer_calls.append((low, high))
        if self._integers:
            return self._integers.pop(0)
        return low

    def random(self):
        """Return the next scripted float in [0, 1)."""
        if self._floats:
            return self._floats.pop(0)
        return 0.5


@pytest.fixture
def rng():
    return FakeRng()


@pytest.fixture
def climate(rng):
    device = ClimateControlSimulator(idle_current=0.5, max_fan_speed=500, rng=rng)
    device.init()
    return device


@pytest.fixture
def pulse(rng):
    device = PulseCounterSimulator(rng=rng)
    device.init()
    return device


@pytest.fixture
def tank(rng):
    device = TankLevelSimulator(
        max_tank_capacity=1000,
        max_water_level=90,
        min_water_level=10,
        max_water_level_alarm=95,
        drain_rate=15,
        fill_rate=20,
        rng=rng,
    )
    device.init()
    return device


@pytest.fixture
def dispatcher(climate, pulse, tank):
    return Dispatcher([climate, pulse, tank])
