"""
Modbus Device Errors
====================

Client-visible failures raised by the device simulators and the dispatcher.

Each error carries the Modbus exception code that the transport adapter
returns to the client. None of them is fatal: the device keeps serving
requests after rejecting one.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from enum import IntEnum


class ExceptionCode(IntEnum):
    """Modbus exception codes surfaced to clients."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03


class ModbusDeviceError(Exception):
    """Base class for protocol-level request rejections."""

    exception_code: ExceptionCode


class IllegalFunctionError(ModbusDeviceError):
    """Unknown or disabled unit, or operation not offered by the device."""

    exception_code = ExceptionCode.ILLEGAL_FUNCTION


class IllegalDataAddressError(ModbusDeviceError):
    """Address or address range outside the device's register table."""

    exception_code = ExceptionCode.ILLEGAL_DATA_ADDRESS


class IllegalDataValueError(ModbusDeviceError):
    """Write value outside the allowed bounds."""

    exception_code = ExceptionCode.ILLEGAL_DATA_VALUE
