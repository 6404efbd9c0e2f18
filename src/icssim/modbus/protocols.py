"""
Modbus Protocol Encoding/Decoding
==================================

Data conversion utilities for Modbus register encoding.

This module handles ONLY data format conversion and coil bounds checks:
- Python floats ↔ Modbus register pairs (IEEE 754 single precision)
- 32-bit unsigned ints ↔ Modbus register pairs
- Coil array access with address range validation

Multi-word values are stored high word first (even address = high word),
matching the big-endian Modbus convention.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import struct
from typing import List, Optional, Sequence, Tuple

from .errors import IllegalDataAddressError

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF


class ModbusEncoder:
    """
    Encoder for converting Python values to Modbus register format.

    Modbus uses 16-bit registers. Multi-word values (float32, uint32)
    are stored in consecutive registers.

    Byte Order: Big-endian (network byte order) - Modbus standard
    """

    @staticmethod
    def float32_to_registers(value: float) -> Tuple[int, int]:
        """
        Convert Python float to two 16-bit Modbus registers.

        Uses IEEE 754 single-precision (32-bit) format. Values that are not
        exactly representable in float32 are rounded by the packing step.

        Args:
            value: Python float or numpy.float32

        Returns:
            Tuple of two 16-bit register values (high word, low word)

        Example:
            >>> high, low = ModbusEncoder.float32_to_registers(0.5)
            >>> (high, low)
            (16128, 0)
        """
        packed = struct.pack(">f", value)
        high, low = struct.unpack(">HH", packed)
        return high, low

    @staticmethod
    def uint32_to_registers(value: int) -> Tuple[int, int]:
        """
        Convert a 32-bit unsigned integer to two 16-bit Modbus registers.

        Raises:
            ValueError: If value out of range [0, 2**32 - 1]
        """
        value = int(value)
        if not 0 <= value <= UINT32_MAX:
            raise ValueError(f"uint32 value {value} out of range [0, {UINT32_MAX}]")

        return (value >> 16) & UINT16_MAX, value & UINT16_MAX

    @staticmethod
    def uint16_to_register(value: int) -> int:
        """
        Convert Python unsigned int to 16-bit Modbus register.

        Raises:
            ValueError: If value out of range [0, 65535]
        """
        value = int(value)
        if not 0 <= value <= UINT16_MAX:
            raise ValueError(f"uint16 value {value} out of range [0, {UINT16_MAX}]")

        return value


class ModbusDecoder:
    """
    Decoder for converting Modbus register format to Python values.

    Performs the inverse operations of ModbusEncoder.
    """

    @staticmethod
    def registers_to_float32(high: int, low: int) -> float:
        """
        Convert two 16-bit Modbus registers to Python float.

        Args:
            high: High 16-bit register
            low: Low 16-bit register

        Returns:
            Python float holding the exact float32 value

        Raises:
            ValueError: If either word is outside [0, 65535]
        """
        _check_word(high)
        _check_word(low)

        packed = struct.pack(">HH", high, low)
        (result,) = struct.unpack(">f", packed)

        return result

    @staticmethod
    def registers_to_uint32(high: int, low: int) -> int:
        """Convert two 16-bit Modbus registers to a 32-bit unsigned int."""
        _check_word(high)
        _check_word(low)

        return (high << 16) | low


def _check_word(word: int):
    if not 0 <= word <= UINT16_MAX:
        raise ValueError(f"Register word {word} out of range [0, {UINT16_MAX}]")


# Module-level aliases used by the device simulators
encode_float32 = ModbusEncoder.float32_to_registers
decode_float32 = ModbusDecoder.registers_to_float32
encode_uint32 = ModbusEncoder.uint32_to_registers
decode_uint32 = ModbusDecoder.registers_to_uint32


def check_coil_range(address: int, quantity: int, length: int):
    """
    Validate a coil request against a fixed-size coil array.

    Raises:
        IllegalDataAddressError: If the range [address, address + quantity)
            does not fit inside the array
    """
    if address < 0 or quantity < 1 or address + quantity > length:
        raise IllegalDataAddressError(
            f"Coil range {address}+{quantity} outside [0, {length})"
        )


def access_coils(
    coils: List[bool],
    address: int,
    quantity: int,
    values: Optional[Sequence[bool]] = None,
) -> List[bool]:
    """
    Read, or write then read back, a range of coils.

    Writes are applied in order starting at ``address``. Only the values
    provided are written, so a short ``values`` sequence leaves the tail of
    the range untouched.

    Args:
        coils: Coil array (mutated in place on write)
        address: First coil address
        quantity: Number of coils
        values: Values to write, or None for a read

    Returns:
        Coil values over the requested range after any write

    Raises:
        IllegalDataAddressError: If the range exceeds the array length
    """
    check_coil_range(address, quantity, len(coils))

    if values is not None:
        for offset, value in enumerate(values[:quantity]):
            coils[address + offset] = bool(value)

    return coils[address : address + quantity]
