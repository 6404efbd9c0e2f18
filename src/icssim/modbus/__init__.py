"""
Modbus Interface Package
=========================

Modbus/TCP protocol layer for the simulated field devices.

Components:
- errors.py: Client-visible failures and their exception codes
- protocols.py: Register codec (float32/uint32 words, coil bounds)
- register_map.py: Per-device address tables
- dispatcher.py: Unit id -> device routing
- slave.py: pymodbus TCP server backed by the dispatcher

Architecture:

┌─────────────────┐
│   PLC / SCADA   │  External clients
└────────┬────────┘
         │ Modbus/TCP
┌────────▼────────┐
│  ModbusSlave    │  pymodbus server (one task per client)
└────────┬────────┘
         │
┌────────▼────────┐
│   Dispatcher    │  Routing by unit id
└────────┬────────┘
         │
┌────────▼────────┐
│    Devices      │  Climate control, pulse counter, tank level
└─────────────────┘

Dependencies:
- pymodbus: Python Modbus library
  Install: pip install pymodbus

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from .errors import (
    ExceptionCode,
    ModbusDeviceError,
    IllegalFunctionError,
    IllegalDataAddressError,
    IllegalDataValueError,
)

from .register_map import ModbusRegisterMap, RegisterDefinition, RegisterType

from .protocols import ModbusEncoder, ModbusDecoder

from .dispatcher import Dispatcher

from .slave import ModbusSlave, ModbusServerConfig

__all__ = [
    # Errors
    "ExceptionCode",
    "ModbusDeviceError",
    "IllegalFunctionError",
    "IllegalDataAddressError",
    "IllegalDataValueError",
    # Register mapping
    "ModbusRegisterMap",
    "RegisterDefinition",
    "RegisterType",
    # Encoding/decoding
    "ModbusEncoder",
    "ModbusDecoder",
    # Routing and server
    "Dispatcher",
    "ModbusSlave",
    "ModbusServerConfig",
]
