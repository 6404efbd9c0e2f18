"""
Base Device Module
==================

Abstract base class for all simulated field devices.

Provides common functionality:
- One exclusive lock guarding coils and physical state
- Injected random number generator (deterministic in tests)
- Bounds-checked coil read/write over a fixed 10-coil array
- Table-driven input register reads through the device register map
- Default "illegal function" answers for unsupported operation kinds

Concurrency:
- update() runs on the tick driver thread
- handle_*() run on the Modbus server thread, one task per client
- Every method touching state holds self._lock for its whole critical
  section, so multi-word values never tear between high and low words
- Devices never lock each other

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..modbus.errors import IllegalDataAddressError, IllegalFunctionError
from ..modbus.protocols import (
    ModbusEncoder,
    access_coils,
    check_coil_range,
    encode_float32,
    encode_uint32,
)
from ..modbus.register_map import ModbusRegisterMap, RegisterDefinition, RegisterType

logger = logging.getLogger(__name__)


class DeviceSimulator(ABC):
    """
    Abstract base class for simulated devices.

    Subclasses implement init(), update() and _input_register_value(),
    and override handle_holding_registers() when they expose setpoints.
    """

    COIL_COUNT = 10
    name = "device"

    def __init__(
        self,
        unit_id: int,
        register_map: ModbusRegisterMap,
        enabled: bool = True,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize base device.

        Args:
            unit_id: Modbus unit identifier (1-247)
            register_map: Fixed address table of the device
            enabled: Whether the dispatcher and tick driver serve this device
            rng: Random generator (None = cryptographically seeded default_rng)
        """
        if not 1 <= unit_id <= 247:
            raise ValueError(f"Unit id must be in [1, 247], got {unit_id}")

        self.unit_id = unit_id
        self.enabled = enabled
        self.register_map = register_map

        self.coils: List[bool] = [False] * self.COIL_COUNT

        if rng is None:
            rng = np.random.default_rng(seed=secrets.randbits(128))
        self._rng = rng

        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"<{type(self).__name__} unit={self.unit_id} {state}>"

    @abstractmethod
    def init(self):
        """Set starting physical values. Called once before serving."""

    @abstractmethod
    def update(self):
        """Advance the physical state by one tick."""

    @abstractmethod
    def _input_register_value(self, name: str):
        """
        Current value of the quantity behind an input register.

        Called with self._lock held.
        """

    # ------------------------------------------------------------------
    # Protocol handlers
    # ------------------------------------------------------------------

    def handle_coils(
        self, address: int, quantity: int, values: Optional[Sequence[bool]] = None
    ) -> List[bool]:
        """Read or write coils; values=None means read."""
        try:
            check_coil_range(address, quantity, self.COIL_COUNT)
        except IllegalDataAddressError:
            logger.warning(f"{self.name}: illegal coil address {address}+{quantity}")
            raise

        with self._lock:
            result = access_coils(self.coils, address, quantity, values)

        logger.debug(f"{self.name} coils: {result}")
        return result

    def handle_discrete_inputs(self, address: int, quantity: int) -> List[bool]:
        logger.warning(f"{self.name}: illegal function: discrete inputs")
        raise IllegalFunctionError(f"{self.name} does not offer discrete inputs")

    def handle_holding_registers(
        self, address: int, quantity: int, values: Optional[Sequence[int]] = None
    ) -> List[int]:
        logger.warning(f"{self.name}: illegal function: holding registers")
        raise IllegalFunctionError(f"{self.name} does not offer holding registers")

    def handle_input_registers(self, address: int, quantity: int) -> List[int]:
        """
        Read input registers.

        Every requested word is encoded under a single lock acquisition.

        Raises:
            IllegalDataAddressError: If any address in the range is undefined
        """
        if quantity < 1:
            raise IllegalDataAddressError(f"Invalid quantity {quantity}")

        registers = []
        encoded: Dict[str, Tuple[int, ...]] = {}

        with self._lock:
            for reg_addr in range(address, address + quantity):
                reg = self.register_map.get_register_by_address(
                    reg_addr, RegisterType.INPUT_REGISTER
                )
                if reg is None:
                    logger.warning(f"{self.name}: illegal data address: {reg_addr}")
                    raise IllegalDataAddressError(
                        f"{self.name} has no input register {reg_addr}"
                    )

                if reg.name not in encoded:
                    encoded[reg.name] = self._encode(
                        reg, self._input_register_value(reg.name)
                    )
                registers.append(encoded[reg.name][reg_addr - reg.address])

        logger.debug(f"{self.name} input registers: {registers}")
        return registers

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def coil(self, address: int) -> bool:
        """Read a single coil (thread-safe)."""
        with self._lock:
            return self.coils[address]

    def set_coil(self, address: int, value: bool):
        """Write a single coil (thread-safe)."""
        self.handle_coils(address, 1, [value])

    @staticmethod
    def _encode(reg: RegisterDefinition, value) -> Tuple[int, ...]:
        if reg.data_type == "float32":
            return encode_float32(value)
        elif reg.data_type == "uint32":
            return encode_uint32(value)
        elif reg.data_type == "uint16":
            return (ModbusEncoder.uint16_to_register(value),)
        else:
            raise ValueError(f"Cannot encode {reg.data_type} register {reg.name}")
