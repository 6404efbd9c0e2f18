"""
Climate Control Module
======================

HVAC unit with a fan, tracking room temperature and electrical load.

Physical model (one step per simulated second):
- Fan runs only while the fan-on coil is set; otherwise speed is forced to 0
- Target room temperature = ambient - fan_speed * 0.02
- Room temperature approaches the target by a fixed 0.1 °C per tick
- Supply voltage jitters around 220 V (220 + integer in [-5, 5))
- Current = fan_speed / 1000 + idle current, power = voltage * current

All analog quantities are IEEE 754 float32, the precision clients see on
the wire.

Register map (unit 1):
- Coil 1: fan on
- Holding register 100: fan speed [RPM], writes bounded to [0, max_fan_speed]
- Input registers 100-111: temperature, humidity, room temperature,
  voltage, current, power (float32); 200-201: uptime (uint32)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..modbus.errors import IllegalDataAddressError, IllegalDataValueError
from ..modbus.protocols import UINT32_MAX
from ..modbus.register_map import ModbusRegisterMap, RegisterDefinition, RegisterType
from .base_device import DeviceSimulator

logger = logging.getLogger(__name__)

CLIMATE_CONTROL_UNIT_ID = 1

# Coils
FAN_STATE_COIL = 1

# Holding registers
FAN_SPEED_REG = 100

# Input registers
TEMPERATURE_REG = 100
HUMIDITY_REG = 102
ROOM_TEMPERATURE_REG = 104
VOLTAGE_REG = 106
CURRENT_REG = 108
POWER_REG = 110
UPTIME_REG = 200

INITIAL_TEMPERATURE = 25.0  # [°C]
INITIAL_HUMIDITY = 50.0  # [%]
INITIAL_FAN_SPEED = 400  # [RPM]
NOMINAL_VOLTAGE = 220  # [V]
FAN_COOLING_FACTOR = np.float32(0.02)  # [°C/RPM]
ROOM_TEMPERATURE_STEP = np.float32(0.1)  # [°C/tick]


def _input(address, name, data_type, units, description):
    return RegisterDefinition(
        address=address,
        name=name,
        register_type=RegisterType.INPUT_REGISTER,
        data_type=data_type,
        units=units,
        description=description,
    )


def climate_control_register_map() -> ModbusRegisterMap:
    """Address table of the climate control unit."""
    return ModbusRegisterMap(
        "Climate Control",
        [
            RegisterDefinition(
                address=FAN_STATE_COIL,
                name="fan_on",
                register_type=RegisterType.COIL,
                data_type="bool",
                description="Fan enable (True=ON, False=OFF)",
            ),
            RegisterDefinition(
                address=FAN_SPEED_REG,
                name="fan_speed",
                register_type=RegisterType.HOLDING_REGISTER,
                data_type="uint16",
                units="RPM",
                description="Fan speed setpoint",
            ),
            _input(TEMPERATURE_REG, "temperature", "float32", "°C", "Ambient temperature"),
            _input(HUMIDITY_REG, "humidity", "float32", "%", "Ambient humidity"),
            _input(ROOM_TEMPERATURE_REG, "room_temperature", "float32", "°C", "Room temperature"),
            _input(VOLTAGE_REG, "voltage", "float32", "V", "Supply voltage"),
            _input(CURRENT_REG, "current", "float32", "A", "Load current"),
            _input(POWER_REG, "power", "float32", "W", "Power consumption"),
            _input(UPTIME_REG, "uptime", "uint32", "s", "Ticks since init"),
        ],
    )


class ClimateControlSimulator(DeviceSimulator):
    """
    Climate control (HVAC) unit.

    Typical Use:
    >>> hvac = ClimateControlSimulator(idle_current=0.5, max_fan_speed=500)
    >>> hvac.init()
    >>> hvac.handle_coils(FAN_STATE_COIL, 1, [True])
    [True]
    >>> hvac.update()
    """

    name = "climate control"

    def __init__(
        self,
        idle_current: float,
        max_fan_speed: int,
        unit_id: int = CLIMATE_CONTROL_UNIT_ID,
        enabled: bool = True,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize climate control unit.

        Args:
            idle_current: Current drawn with the fan stopped [A]
            max_fan_speed: Highest accepted fan speed setpoint [RPM]
        """
        if not 0 <= max_fan_speed <= 65535:
            raise ValueError(f"max_fan_speed must be in [0, 65535], got {max_fan_speed}")

        super().__init__(unit_id, climate_control_register_map(), enabled, rng)

        self.idle_current = np.float32(idle_current)
        self.max_fan_speed = int(max_fan_speed)

        self.uptime = 0
        self.fan_speed = 0
        self.fan_state = False
        self.temperature = np.float32(0.0)
        self.humidity = np.float32(0.0)
        self.room_temperature = np.float32(0.0)
        self.voltage = np.float32(0.0)
        self.current = np.float32(0.0)
        self.power = np.float32(0.0)

    def init(self):
        with self._lock:
            self.uptime = 0
            self.temperature = np.float32(INITIAL_TEMPERATURE)
            self.humidity = np.float32(INITIAL_HUMIDITY)
            self.room_temperature = self.temperature
            self.fan_speed = INITIAL_FAN_SPEED
            self.voltage = np.float32(NOMINAL_VOLTAGE)
            self.current = self.idle_current
            self.power = self.voltage * self.current
            self.coils[FAN_STATE_COIL] = False

    def set_temperature(self, temperature: float):
        """Set ambient temperature (thread-safe)."""
        with self._lock:
            self.temperature = np.float32(temperature)

    def set_humidity(self, humidity: float):
        """Set ambient humidity (thread-safe)."""
        with self._lock:
            self.humidity = np.float32(humidity)

    def update(self):
        """
        Advance the unit by one second.

        Steps:
        1. Count uptime
        2. Latch fan state from the coil, stop the fan if it is off
        3. Move room temperature 0.1 °C toward the fan-dependent target
        4. Recompute voltage jitter, current and power
        """
        with self._lock:
            self.uptime = (self.uptime + 1) & UINT32_MAX

            self.fan_state = self.coils[FAN_STATE_COIL]
            logger.debug(f"Fan State: {self.fan_state}")

            if not self.fan_state:
                self.fan_speed = 0
            logger.debug(f"Fan Speed: {self.fan_speed}")

            target_temp = self.temperature - np.float32(self.fan_speed) * FAN_COOLING_FACTOR
            logger.debug(f"Outside Temp: {self.temperature}, Target Temp: {target_temp}")

            # Fixed-step approach, not a proportional filter
            if self.room_temperature < target_temp:
                self.room_temperature = self.room_temperature + ROOM_TEMPERATURE_STEP
            elif self.room_temperature > target_temp:
                self.room_temperature = self.room_temperature - ROOM_TEMPERATURE_STEP
            logger.debug(f"Room Temp: {self.room_temperature}")

            jitter = int(self._rng.integers(-5, 5))
            self.voltage = np.float32(NOMINAL_VOLTAGE + jitter)

            self.current = np.float32(self.fan_speed) / np.float32(1000) + self.idle_current
            logger.debug(f"Current: {self.current}")

            self.power = self.voltage * self.current
            logger.debug(f"Power: {self.power}")

    def handle_holding_registers(
        self, address: int, quantity: int, values: Optional[Sequence[int]] = None
    ) -> List[int]:
        """
        Read or write the fan speed setpoint.

        Writes are validated in full before any state changes.

        Raises:
            IllegalDataAddressError: Address other than the fan speed register
            IllegalDataValueError: Fan speed outside [0, max_fan_speed]
        """
        if quantity < 1:
            raise IllegalDataAddressError(f"Invalid quantity {quantity}")

        for reg_addr in range(address, address + quantity):
            if reg_addr != FAN_SPEED_REG:
                logger.warning(f"{self.name}: illegal data address: {reg_addr}")
                raise IllegalDataAddressError(
                    f"{self.name} has no holding register {reg_addr}"
                )

        if values is not None:
            for value in values:
                if not 0 <= value <= self.max_fan_speed:
                    logger.warning(f"{self.name}: illegal data value: {value}")
                    raise IllegalDataValueError(
                        f"Fan speed {value} outside [0, {self.max_fan_speed}]"
                    )

        # Only one holding register exists, so quantity is 1 here
        with self._lock:
            if values:
                self.fan_speed = int(values[0])
            result = [self.fan_speed]

        logger.debug(f"{self.name} holding registers: {result}")
        return result

    def _input_register_value(self, name: str):
        return getattr(self, name)
