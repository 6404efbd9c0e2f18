"""
Modbus Register Map
===================

Defines the fixed address tables of each simulated device.

This module contains ONLY the register layout - it does not:
- Hold device state
- Encode values
- Enforce write bounds

Register Types:
- Coils (FC 01/05/15): Read/write actuator and mode bits
- Discrete Inputs (FC 02): Read-only bits
- Input Registers (FC 04): Read-only values derived from device state
- Holding Registers (FC 03/06/16): Read/write setpoints

Register Encoding:
- float32 and uint32 values occupy 2 consecutive 16-bit registers
- High word first (even address = high word)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from enum import IntEnum


class RegisterType(IntEnum):
    """Modbus register types."""

    COIL = 0  # Discrete output (read/write)
    DISCRETE_INPUT = 1  # Discrete input (read-only)
    INPUT_REGISTER = 3  # Analog input (read-only)
    HOLDING_REGISTER = 4  # Analog output (read/write)


DATA_TYPES = ("float32", "uint32", "uint16", "bool")


@dataclass(frozen=True)
class RegisterDefinition:
    """
    Definition of a single Modbus register (or register pair for 32-bit values).

    Attributes:
        address: Starting register address (0-based)
        name: Identifier of the device quantity behind the register
        register_type: Coil, discrete input, input register, or holding register
        data_type: 'float32', 'uint32', 'uint16' or 'bool'
        units: Physical units (e.g., '°C', 'V', 'RPM')
        description: What this register represents
    """

    address: int
    name: str
    register_type: RegisterType
    data_type: str
    units: str = ""
    description: str = ""

    def validate(self):
        """Validate register definition."""
        if self.address < 0 or self.address + self.size_words - 1 > 65535:
            raise ValueError(f"Register address {self.address} out of range [0, 65535]")

        if self.data_type not in DATA_TYPES:
            raise ValueError(f"Unknown data type: {self.data_type}")

        is_bit = self.register_type in (RegisterType.COIL, RegisterType.DISCRETE_INPUT)
        if is_bit != (self.data_type == "bool"):
            raise ValueError(
                f"Register {self.name}: data type {self.data_type} does not match "
                f"{self.register_type.name}"
            )

    @property
    def size_words(self) -> int:
        """Number of 16-bit words (or bits) this register occupies."""
        if self.data_type in ("float32", "uint32"):
            return 2
        return 1

    @property
    def read_only(self) -> bool:
        return self.register_type in (
            RegisterType.DISCRETE_INPUT,
            RegisterType.INPUT_REGISTER,
        )


class ModbusRegisterMap:
    """
    Register map of one simulated device.

    The map only defines WHERE device quantities live in the Modbus
    address space. The device simulator owns the values.
    """

    def __init__(self, device_name: str, registers: Iterable[RegisterDefinition]):
        self.device_name = device_name
        self.input_registers: List[RegisterDefinition] = []
        self.holding_registers: List[RegisterDefinition] = []
        self.coils: List[RegisterDefinition] = []
        self.discrete_inputs: List[RegisterDefinition] = []

        tables = {
            RegisterType.INPUT_REGISTER: self.input_registers,
            RegisterType.HOLDING_REGISTER: self.holding_registers,
            RegisterType.COIL: self.coils,
            RegisterType.DISCRETE_INPUT: self.discrete_inputs,
        }
        for reg in registers:
            tables[reg.register_type].append(reg)

        self._validate_all()

    def _validate_all(self):
        """Validate all register definitions and check for conflicts."""
        for reg in self.all_registers:
            reg.validate()

        self._check_address_conflicts(self.input_registers, "Input registers")
        self._check_address_conflicts(self.holding_registers, "Holding registers")
        self._check_address_conflicts(self.coils, "Coils")
        self._check_address_conflicts(self.discrete_inputs, "Discrete inputs")

    def _check_address_conflicts(
        self, registers: List[RegisterDefinition], type_name: str
    ):
        """Check for overlapping register addresses."""
        address_ranges = sorted(
            (reg.address, reg.address + reg.size_words - 1, reg.name)
            for reg in registers
        )

        for (curr_start, curr_end, curr_name), (next_start, next_end, next_name) in zip(
            address_ranges, address_ranges[1:]
        ):
            if curr_end >= next_start:
                raise ValueError(
                    f"{self.device_name} {type_name} address conflict: {curr_name} "
                    f"[{curr_start}-{curr_end}] overlaps with {next_name} "
                    f"[{next_start}-{next_end}]"
                )

    @property
    def all_registers(self) -> List[RegisterDefinition]:
        return (
            self.input_registers
            + self.holding_registers
            + self.coils
            + self.discrete_inputs
        )

    def get_register_by_name(self, name: str) -> Optional[RegisterDefinition]:
        """
        Find register definition by name.

        Returns:
            RegisterDefinition if found, None otherwise
        """
        for reg in self.all_registers:
            if reg.name == name:
                return reg

        return None

    def get_register_by_address(
        self, address: int, register_type: RegisterType
    ) -> Optional[RegisterDefinition]:
        """
        Find the register definition covering an address.

        The second word of a 32-bit register resolves to the same definition
        as its first word.

        Returns:
            RegisterDefinition if found, None otherwise
        """
        if register_type == RegisterType.INPUT_REGISTER:
            registers = self.input_registers
        elif register_type == RegisterType.HOLDING_REGISTER:
            registers = self.holding_registers
        elif register_type == RegisterType.COIL:
            registers = self.coils
        elif register_type == RegisterType.DISCRETE_INPUT:
            registers = self.discrete_inputs
        else:
            return None

        for reg in registers:
            if reg.address <= address < reg.address + reg.size_words:
                return reg

        return None

    def print_register_map(self, unit_id: Optional[int] = None):
        """Print complete register map for documentation."""
        title = self.device_name.upper()
        if unit_id is not None:
            title += f" (unit {unit_id})"

        print("=" * 80)
        print(title)
        print("=" * 80)

        sections = [
            ("COILS (Read/Write)", self.coils),
            ("DISCRETE INPUTS (Read-Only)", self.discrete_inputs),
            ("HOLDING REGISTERS (Read/Write)", self.holding_registers),
            ("INPUT REGISTERS (Read-Only)", self.input_registers),
        ]
        for heading, registers in sections:
            print(f"\n{heading}")
            print("-" * 80)
            if not registers:
                print("  not supported (illegal function)")
                continue

            print(
                f"{'Address':<10} {'Name':<22} {'Type':<8} {'Units':<6} {'Description':<30}"
            )
            for reg in registers:
                if reg.size_words == 2:
                    addr_str = f"{reg.address}-{reg.address + 1}"
                else:
                    addr_str = str(reg.address)
                print(
                    f"{addr_str:<10} {reg.name:<22} {reg.data_type:<8} {reg.units:<6} {reg.description:<30}"
                )

        print()
