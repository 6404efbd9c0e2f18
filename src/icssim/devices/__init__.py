"""
Devices Package
===============

Simulated field devices served over Modbus/TCP.

Available Devices:
- ClimateControlSimulator: HVAC fan, room temperature, electrical load (unit 1)
- PulseCounterSimulator: Three gated pulse counters (unit 2)
- TankLevelSimulator: Water tank with pump, valve and level control (unit 3)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from typing import List, Optional

import numpy as np

from .base_device import DeviceSimulator
from .climate_control import (
    CLIMATE_CONTROL_UNIT_ID,
    ClimateControlSimulator,
    climate_control_register_map,
)
from .pulse_counter import (
    PULSE_COUNTER_UNIT_ID,
    PulseCounterSimulator,
    pulse_counter_register_map,
)
from .tank_level import TANK_LEVEL_UNIT_ID, TankLevelSimulator, tank_level_register_map

__all__ = [
    "DeviceSimulator",
    "ClimateControlSimulator",
    "PulseCounterSimulator",
    "TankLevelSimulator",
    "CLIMATE_CONTROL_UNIT_ID",
    "PULSE_COUNTER_UNIT_ID",
    "TANK_LEVEL_UNIT_ID",
    "climate_control_register_map",
    "pulse_counter_register_map",
    "tank_level_register_map",
    "create_device_suite",
]


def create_device_suite(
    config, rng: Optional[np.random.Generator] = None
) -> List[DeviceSimulator]:
    """
    Create the three simulated devices from configuration.

    Disabled devices are still created so that the dispatcher can answer
    requests for their unit with "illegal function".

    Args:
        config: SimulatorConfig
        rng: Shared random generator (None = one seeded generator per device)

    Returns:
        Devices in tick order: climate control, pulse counter, tank level
    """
    climate = config.climate_control
    tank = config.tank_level

    return [
        ClimateControlSimulator(
            idle_current=climate.idle_current,
            max_fan_speed=climate.max_fan_speed,
            enabled=climate.enabled,
            rng=rng,
        ),
        PulseCounterSimulator(enabled=config.pulse_counter.enabled, rng=rng),
        TankLevelSimulator(
            max_tank_capacity=tank.max_tank_capacity,
            max_water_level=tank.max_water_level,
            min_water_level=tank.min_water_level,
            max_water_level_alarm=tank.max_water_level_alarm,
            drain_rate=tank.drain_rate,
            fill_rate=tank.fill_rate,
            enabled=tank.enabled,
            rng=rng,
        ),
    ]
