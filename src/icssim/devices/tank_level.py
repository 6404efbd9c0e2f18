"""
Tank Level Module
=================

Water tank with a fill pump, a drain valve and level-based pump control.

Control logic (one step per simulated second):
1. Level percentage = level / capacity * 100
2. At or above the alarm threshold the pump is forced off in ANY mode
3. In automatic mode the pump switches off at/above the max threshold and
   on at/below the min threshold; inside the band it keeps its last state
4. The valve is only ever operated by clients
5. An open valve drains drain_rate * U[0.9, 1.1); a closed valve drains 0
6. A running pump adds fill_rate

The level is an unsigned 16-bit quantity. It is NOT clamped: draining an
almost empty tank wraps around to a high level, and an unchecked pump can
push it past capacity.

Register map (unit 3):
- Coils 0/1/2: mode (True=automatic), valve (True=open), pump (True=on)
- Input registers 100-106: level, capacity, max/min/alarm thresholds,
  last calculated drain rate, fill rate (uint16)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
from typing import Optional

import numpy as np

from ..modbus.protocols import UINT16_MAX
from ..modbus.register_map import ModbusRegisterMap, RegisterDefinition, RegisterType
from .base_device import DeviceSimulator

logger = logging.getLogger(__name__)

TANK_LEVEL_UNIT_ID = 3

# Coils
SELECTED_MODE_COIL = 0
VALVE_STATE_COIL = 1
PUMP_STATE_COIL = 2

# Input registers
WATER_LEVEL_REG = 100
MAX_TANK_CAPACITY_REG = 101
MAX_WATER_LEVEL_REG = 102
MIN_WATER_LEVEL_REG = 103
MAX_WATER_LEVEL_ALARM_REG = 104
DRAIN_RATE_REG = 105
FILL_RATE_REG = 106

DRAIN_JITTER_LOW = 0.9
DRAIN_JITTER_SPAN = 0.2


def tank_level_register_map() -> ModbusRegisterMap:
    """Address table of the tank level unit."""
    coils = [
        (SELECTED_MODE_COIL, "automatic_mode", "Operating mode (True=automatic, False=manual)"),
        (VALVE_STATE_COIL, "valve_open", "Drain valve (True=open, False=closed)"),
        (PUMP_STATE_COIL, "pump_on", "Fill pump (True=on, False=off)"),
    ]
    inputs = [
        (WATER_LEVEL_REG, "water_level", "", "Current water level"),
        (MAX_TANK_CAPACITY_REG, "max_tank_capacity", "", "Tank capacity"),
        (MAX_WATER_LEVEL_REG, "max_water_level", "%", "Pump off threshold (auto)"),
        (MIN_WATER_LEVEL_REG, "min_water_level", "%", "Pump on threshold (auto)"),
        (MAX_WATER_LEVEL_ALARM_REG, "max_water_level_alarm", "%", "Pump forced off"),
        (DRAIN_RATE_REG, "calculated_drain_rate", "/s", "Last drain amount"),
        (FILL_RATE_REG, "fill_rate", "/s", "Pump fill rate"),
    ]

    registers = [
        RegisterDefinition(
            address=address,
            name=name,
            register_type=RegisterType.COIL,
            data_type="bool",
            description=description,
        )
        for address, name, description in coils
    ]
    registers += [
        RegisterDefinition(
            address=address,
            name=name,
            register_type=RegisterType.INPUT_REGISTER,
            data_type="uint16",
            units=units,
            description=description,
        )
        for address, name, units, description in inputs
    ]

    return ModbusRegisterMap("Tank Level", registers)


class TankLevelSimulator(DeviceSimulator):
    """
    Water tank with pump/valve actuators and hysteresis pump control.

    Thresholds are percentages of max_tank_capacity.
    """

    name = "tank level"

    def __init__(
        self,
        max_tank_capacity: int,
        max_water_level: int,
        min_water_level: int,
        max_water_level_alarm: int,
        drain_rate: int,
        fill_rate: int,
        unit_id: int = TANK_LEVEL_UNIT_ID,
        enabled: bool = True,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize water tank.

        Args:
            max_tank_capacity: Level that counts as 100% (must be > 0)
            max_water_level: Automatic mode pump-off threshold [%]
            min_water_level: Automatic mode pump-on threshold [%]
            max_water_level_alarm: Unconditional pump-off threshold [%]
            drain_rate: Nominal drain per tick with the valve open
            fill_rate: Fill per tick with the pump on
        """
        for key, value in (
            ("max_tank_capacity", max_tank_capacity),
            ("max_water_level", max_water_level),
            ("min_water_level", min_water_level),
            ("max_water_level_alarm", max_water_level_alarm),
            ("drain_rate", drain_rate),
            ("fill_rate", fill_rate),
        ):
            if not 0 <= value <= UINT16_MAX:
                raise ValueError(f"{key} must be in [0, {UINT16_MAX}], got {value}")
        if max_tank_capacity == 0:
            raise ValueError("max_tank_capacity must be positive")

        super().__init__(unit_id, tank_level_register_map(), enabled, rng)

        self.max_tank_capacity = max_tank_capacity
        self.max_water_level = max_water_level
        self.min_water_level = min_water_level
        self.max_water_level_alarm = max_water_level_alarm
        self.drain_rate = drain_rate
        self.fill_rate = fill_rate

        self.water_level = 0
        self.calculated_drain_rate = 0

    def init(self):
        with self._lock:
            self.water_level = 0
            self.calculated_drain_rate = 0
            self.coils[SELECTED_MODE_COIL] = True
            self.coils[VALVE_STATE_COIL] = False
            self.coils[PUMP_STATE_COIL] = False

    @property
    def level_percent(self) -> float:
        return self.water_level / self.max_tank_capacity * 100

    def update(self):
        with self._lock:
            level_percent = self.level_percent
            logger.debug(f"Water Level: {self.water_level} ({level_percent:.1f}%)")

            # Safety override, independent of the selected mode
            if level_percent >= self.max_water_level_alarm:
                logger.debug(f"Water Level Alarm Reached: {self.max_water_level_alarm}")
                self.coils[PUMP_STATE_COIL] = False

            if self.coils[SELECTED_MODE_COIL]:
                if level_percent >= self.max_water_level:
                    self.coils[PUMP_STATE_COIL] = False

                if level_percent <= self.min_water_level:
                    self.coils[PUMP_STATE_COIL] = True

            logger.debug(f"Valve State: {self.coils[VALVE_STATE_COIL]}")
            if self.coils[VALVE_STATE_COIL]:
                factor = DRAIN_JITTER_LOW + DRAIN_JITTER_SPAN * self._rng.random()
                self.calculated_drain_rate = int(self.drain_rate * factor) & UINT16_MAX
                logger.debug(f"Calculated Drain Rate: {self.calculated_drain_rate}")
                self.water_level = (self.water_level - self.calculated_drain_rate) & UINT16_MAX
            else:
                self.calculated_drain_rate = 0

            logger.debug(f"Pump State: {self.coils[PUMP_STATE_COIL]}")
            if self.coils[PUMP_STATE_COIL]:
                self.water_level = (self.water_level + self.fill_rate) & UINT16_MAX

    def _input_register_value(self, name: str):
        return getattr(self, name)
