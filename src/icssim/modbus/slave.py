"""
Modbus TCP Slave Server
=======================

pymodbus Modbus/TCP server whose datastore is the device dispatcher.

pymodbus owns the transport: connection acceptance, framing and one asyncio
task per client. Every datastore access is forwarded to the Dispatcher,
and device errors come back to the client as Modbus exception responses.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import asyncio
import logging
import threading
from contextlib import suppress
from dataclasses import dataclass
from typing import Dict, Optional

from pymodbus import ModbusDeviceIdentification
from pymodbus.constants import ExcCodes
from pymodbus.datastore import ModbusDeviceContext, ModbusServerContext
from pymodbus.server import ModbusTcpServer

from .dispatcher import Dispatcher
from .errors import ModbusDeviceError

logger = logging.getLogger(__name__)

# Function code -> register table
COILS = "c"
DISCRETE_INPUTS = "d"
HOLDING_REGISTERS = "h"
INPUT_REGISTERS = "i"

FUNCTION_CODE_TABLES = {
    1: COILS,
    5: COILS,
    15: COILS,
    2: DISCRETE_INPUTS,
    3: HOLDING_REGISTERS,
    6: HOLDING_REGISTERS,
    16: HOLDING_REGISTERS,
    22: HOLDING_REGISTERS,
    23: HOLDING_REGISTERS,
    4: INPUT_REGISTERS,
}


@dataclass
class ModbusServerConfig:
    """Configuration for Modbus TCP server."""

    host: str = "0.0.0.0"
    port: int = 5020

    # Server identification
    vendor_name: str = "ICS Simulation Suite"
    product_code: str = "ICSSIM"
    product_name: str = "Field Device Simulator"
    model_name: str = "Virtual Field Bus v1.0"
    version: str = "1.0.0"

    # Timeouts
    startup_timeout_sec: float = 5.0
    shutdown_timeout_sec: float = 3.0


class UnitContext(ModbusDeviceContext):
    """
    pymodbus device context bound to one unit id.

    Holds no data: reads and writes go through the dispatcher. A
    ModbusDeviceError is returned as its exception code, which pymodbus
    turns into an exception response.
    """

    def __init__(self, dispatcher: Dispatcher, unit_id: int):
        super().__init__()
        self.dispatcher = dispatcher
        self.unit_id = unit_id

    def validate(self, func_code, address, count=1):
        # Address checks belong to the device simulators
        return True

    def getValues(self, func_code, address, count=1):
        try:
            table = FUNCTION_CODE_TABLES.get(func_code)
            if table == COILS:
                return self.dispatcher.handle_coils(self.unit_id, address, count)
            elif table == DISCRETE_INPUTS:
                return self.dispatcher.handle_discrete_inputs(
                    self.unit_id, address, count
                )
            elif table == HOLDING_REGISTERS:
                return self.dispatcher.handle_holding_registers(
                    self.unit_id, address, count
                )
            elif table == INPUT_REGISTERS:
                return self.dispatcher.handle_input_registers(
                    self.unit_id, address, count
                )
            return ExcCodes.ILLEGAL_FUNCTION

        except ModbusDeviceError as e:
            return ExcCodes(e.exception_code)

    def setValues(self, func_code, address, values):
        values = list(values)
        try:
            table = FUNCTION_CODE_TABLES.get(func_code)
            if table == COILS:
                self.dispatcher.handle_coils(
                    self.unit_id, address, len(values), values
                )
            elif table == HOLDING_REGISTERS:
                self.dispatcher.handle_holding_registers(
                    self.unit_id, address, len(values), values
                )
            else:
                return ExcCodes.ILLEGAL_FUNCTION
            return None

        except ModbusDeviceError as e:
            return ExcCodes(e.exception_code)


class DispatchingServerContext(ModbusServerContext):
    """
    Server context answering for every unit id.

    Unknown unit ids get a UnitContext too, so the dispatcher (not pymodbus)
    decides that they are illegal.
    """

    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher
        self._lock = threading.Lock()
        self._unit_contexts: Dict[int, UnitContext] = {}

        super().__init__(
            devices={
                device.unit_id: self._unit_context(device.unit_id)
                for device in dispatcher.devices()
            },
            single=False,
        )

    def _unit_context(self, unit_id: int) -> UnitContext:
        with self._lock:
            context = self._unit_contexts.get(unit_id)
            if context is None:
                context = UnitContext(self.dispatcher, unit_id)
                self._unit_contexts[unit_id] = context
            return context

    def __contains__(self, device_id):
        return True

    def __getitem__(self, device_id):
        return self._unit_context(device_id)


class ModbusSlave:
    """
    Modbus TCP slave server running in a background thread.

    The server is created inside its own event loop. start() returns once
    the listening socket is bound; stop() shuts the server down from the
    calling thread.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        config: Optional[ModbusServerConfig] = None,
    ):
        """Initialize Modbus slave server."""

        self.dispatcher = dispatcher
        self.config = config or ModbusServerConfig()

        self.context = DispatchingServerContext(dispatcher)

        self.identity = ModbusDeviceIdentification()
        self.identity.VendorName = self.config.vendor_name
        self.identity.ProductCode = self.config.product_code
        self.identity.ProductName = self.config.product_name
        self.identity.ModelName = self.config.model_name
        self.identity.MajorMinorRevision = self.config.version

        # Lifecycle management
        self.server_thread: Optional[threading.Thread] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None
        self._server: Optional[ModbusTcpServer] = None

        # Synchronization
        self._running = threading.Event()
        self._server_ready = threading.Event()

        logger.info(
            f"Modbus slave initialized: {self.config.host}:{self.config.port}, "
            f"units={[d.unit_id for d in dispatcher.enabled_devices()]}"
        )

    def start(self, blocking: bool = True):
        """
        Start Modbus server.

        Args:
            blocking: If True, block until server stops
                     If False, run in background thread
        """
        if self._running.is_set():
            logger.warning("Modbus server already running")
            return

        self._running.set()
        self._server_ready.clear()

        if blocking:
            self._run_server()
            return

        self.server_thread = threading.Thread(
            target=self._run_server, daemon=True, name="ModbusTCPServer"
        )
        self.server_thread.start()

        if not self._server_ready.wait(timeout=self.config.startup_timeout_sec):
            self._running.clear()
            raise RuntimeError("Server startup timeout")

        if not self._running.is_set():
            raise RuntimeError("Server failed to start")

        logger.info(f"Modbus server started on {self.config.host}:{self.config.port}")

    def _run_server(self):
        """Run the server in a dedicated event loop until it stops."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._event_loop = loop

        try:
            loop.run_until_complete(self._async_run_server())

        except Exception as e:
            logger.error(f"Modbus server error: {type(e).__name__}: {e}")

        finally:
            self._running.clear()
            # Unblock start() even on error
            self._server_ready.set()

            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))

            loop.close()
            self._event_loop = None
            self._server = None

    async def _async_run_server(self):
        self._server = ModbusTcpServer(
            self.context,
            identity=self.identity,
            address=(self.config.host, self.config.port),
        )

        # Bind first, then report ready
        await self._server.serve_forever(background=True)
        self._server_ready.set()

        await self._server.serving

    def stop(self):
        """Stop Modbus server (graceful shutdown)."""
        if not self._running.is_set():
            return

        loop = self._event_loop
        server = self._server
        if loop and server and not loop.is_closed():
            try:
                future = asyncio.run_coroutine_threadsafe(server.shutdown(), loop)
                future.result(timeout=self.config.shutdown_timeout_sec)
            except Exception as e:
                logger.warning(f"Server shutdown error: {type(e).__name__}")

        if self.server_thread and self.server_thread.is_alive():
            self.server_thread.join(timeout=self.config.shutdown_timeout_sec)

            if self.server_thread.is_alive():
                logger.warning("Server thread did not terminate cleanly")

        self._running.clear()
        logger.info("Modbus server stopped")

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running.is_set()
