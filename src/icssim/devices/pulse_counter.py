"""
Pulse Counter Module
====================

Three-channel pulse counter (e.g. flow meter or energy meter pulses).

Each channel accumulates a random number of pulses per tick while its
enable coil is set:
- Channel 1: [0, 10)
- Channel 2: [40, 70)
- Channel 3: [100, 150)

Counters are 32-bit unsigned and wrap at 2**32.

Register map (unit 2):
- Coils 0/1/2: channel 1/2/3 enable
- Input registers 100/102/104: channel 1/2/3 counts (uint32, high word first)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
from typing import List, Optional

import numpy as np

from ..modbus.protocols import UINT32_MAX
from ..modbus.register_map import ModbusRegisterMap, RegisterDefinition, RegisterType
from .base_device import DeviceSimulator

logger = logging.getLogger(__name__)

PULSE_COUNTER_UNIT_ID = 2

# Coils
PULSE1_STATE_COIL = 0
PULSE2_STATE_COIL = 1
PULSE3_STATE_COIL = 2

# Input registers
PULSE1_REG = 100
PULSE2_REG = 102
PULSE3_REG = 104

# Per-channel increment ranges [low, high)
PULSE_INCREMENTS = ((0, 10), (40, 70), (100, 150))


def pulse_counter_register_map() -> ModbusRegisterMap:
    """Address table of the pulse counter unit."""
    registers = []
    for channel, (coil, reg) in enumerate(
        zip(
            (PULSE1_STATE_COIL, PULSE2_STATE_COIL, PULSE3_STATE_COIL),
            (PULSE1_REG, PULSE2_REG, PULSE3_REG),
        ),
        start=1,
    ):
        registers.append(
            RegisterDefinition(
                address=coil,
                name=f"pulse{channel}_enable",
                register_type=RegisterType.COIL,
                data_type="bool",
                description=f"Channel {channel} counting enable",
            )
        )
        registers.append(
            RegisterDefinition(
                address=reg,
                name=f"pulse{channel}",
                register_type=RegisterType.INPUT_REGISTER,
                data_type="uint32",
                units="pulse",
                description=f"Channel {channel} pulse count",
            )
        )

    return ModbusRegisterMap("Pulse Counter", registers)


class PulseCounterSimulator(DeviceSimulator):
    """Three independent pulse counters gated by enable coils."""

    name = "pulse counter"

    def __init__(
        self,
        unit_id: int = PULSE_COUNTER_UNIT_ID,
        enabled: bool = True,
        rng: Optional[np.random.Generator] = None,
    ):
        super().__init__(unit_id, pulse_counter_register_map(), enabled, rng)
        self.pulses: List[int] = [0, 0, 0]

    def init(self):
        with self._lock:
            self.pulses = [0, 0, 0]
            for coil in (PULSE1_STATE_COIL, PULSE2_STATE_COIL, PULSE3_STATE_COIL):
                self.coils[coil] = True

    def update(self):
        with self._lock:
            for channel, (low, high) in enumerate(PULSE_INCREMENTS):
                enabled = self.coils[PULSE1_STATE_COIL + channel]
                logger.debug(f"Pulse {channel + 1} State: {enabled}")

                if enabled:
                    increment = int(self._rng.integers(low, high))
                    self.pulses[channel] = (self.pulses[channel] + increment) & UINT32_MAX

            logger.debug(f"Pulses: {self.pulses}")

    def _input_register_value(self, name: str):
        # "pulse1" -> channel index 0
        return self.pulses[int(name[len("pulse") :]) - 1]
