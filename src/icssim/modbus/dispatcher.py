"""
Modbus Request Dispatcher
=========================

Routes protocol operations to simulated devices by unit id.

The dispatcher holds references to every device but never touches their
state: each call is a pure delegation to the device's handler. Requests
for an unknown unit and for a disabled device are both rejected with
"illegal function".

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from .errors import IllegalFunctionError

if TYPE_CHECKING:
    from ..devices.base_device import DeviceSimulator

logger = logging.getLogger(__name__)


class Dispatcher:
    """Unit id -> device router."""

    def __init__(self, devices: Iterable["DeviceSimulator"]):
        """
        Register devices; their order is the tick order.

        Raises:
            ValueError: If two devices share a unit id
        """
        self._devices: Dict[int, "DeviceSimulator"] = {}

        for device in devices:
            if device.unit_id in self._devices:
                raise ValueError(f"Duplicate unit id {device.unit_id}")
            self._devices[device.unit_id] = device

    def devices(self) -> List["DeviceSimulator"]:
        return list(self._devices.values())

    def enabled_devices(self) -> List["DeviceSimulator"]:
        return [device for device in self._devices.values() if device.enabled]

    def get_device(self, unit_id: int) -> "DeviceSimulator":
        """
        Find the enabled device serving a unit id.

        Raises:
            IllegalFunctionError: Unknown unit id or disabled device
        """
        device = self._devices.get(unit_id)
        if device is None or not device.enabled:
            logger.warning(f"Illegal unit id: {unit_id}")
            raise IllegalFunctionError(f"No enabled device at unit id {unit_id}")
        return device

    def init_devices(self):
        """Initialize every enabled device, in tick order."""
        for device in self.enabled_devices():
            logger.info(f"Booting {device.name} (unit {device.unit_id})")
            device.init()

    def handle_coils(
        self,
        unit_id: int,
        address: int,
        quantity: int,
        values: Optional[Sequence[bool]] = None,
    ) -> List[bool]:
        return self.get_device(unit_id).handle_coils(address, quantity, values)

    def handle_discrete_inputs(
        self, unit_id: int, address: int, quantity: int
    ) -> List[bool]:
        return self.get_device(unit_id).handle_discrete_inputs(address, quantity)

    def handle_holding_registers(
        self,
        unit_id: int,
        address: int,
        quantity: int,
        values: Optional[Sequence[int]] = None,
    ) -> List[int]:
        return self.get_device(unit_id).handle_holding_registers(
            address, quantity, values
        )

    def handle_input_registers(
        self, unit_id: int, address: int, quantity: int
    ) -> List[int]:
        return self.get_device(unit_id).handle_input_registers(address, quantity)
