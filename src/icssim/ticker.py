"""
Tick Driver
===========

Advances every enabled device once per simulated second.

One tick updates the devices in dispatcher order (climate control, pulse
counter, tank level). Right after the climate control update, on the first
tick and then every ``refresh_interval`` ticks, the ambient temperature and
humidity are refreshed from the weather client. A failed refresh is logged
and the previous ambient values stay in place.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
import threading
import time
from typing import Optional

from .devices.climate_control import ClimateControlSimulator
from .modbus.dispatcher import Dispatcher
from .weather import WeatherClient, WeatherError

logger = logging.getLogger(__name__)


class TickDriver:
    """Periodic driver; ticks never overlap."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        weather: Optional[WeatherClient] = None,
        refresh_interval: int = 120,
        interval: float = 1.0,
    ):
        """
        Args:
            dispatcher: Source of the devices to update
            weather: Ambient reading provider (None = no refresh)
            refresh_interval: Ticks between ambient refreshes
            interval: Wall-clock seconds per tick
        """
        if refresh_interval < 1:
            raise ValueError(f"refresh_interval must be positive, got {refresh_interval}")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self.dispatcher = dispatcher
        self.weather = weather
        self.refresh_interval = refresh_interval
        self.interval = interval

        self.tick_count = 0

        self._stop_requested = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self):
        """
        Run one simulated second synchronously.

        A device whose update fails is logged and skipped for this tick;
        the other devices still advance.
        """
        refresh_due = self.tick_count % self.refresh_interval == 0
        self.tick_count += 1

        for device in self.dispatcher.enabled_devices():
            try:
                device.update()

                if refresh_due and isinstance(device, ClimateControlSimulator):
                    self.refresh_ambient(device)

            except Exception:
                logger.exception(f"Tick {self.tick_count}: {device.name} update failed")

    def refresh_ambient(self, climate: ClimateControlSimulator) -> bool:
        """
        Copy the current weather into the climate control unit.

        Returns:
            True if the ambient values were updated
        """
        if self.weather is None:
            return False

        try:
            reading = self.weather.get_current_weather()
        except WeatherError as e:
            logger.error(f"Weather refresh failed, keeping previous values: {e}")
            return False

        climate.set_temperature(reading.temperature)
        climate.set_humidity(reading.humidity)
        return True

    def run(self):
        """Tick until stop() is called. Blocks the calling thread."""
        self._stop_requested.clear()
        logger.info(f"Tick driver started ({self.interval}s per tick)")

        while not self._stop_requested.is_set():
            tick_start = time.monotonic()

            self.tick()

            # Real-time pacing
            elapsed = time.monotonic() - tick_start
            self._stop_requested.wait(max(0.0, self.interval - elapsed))

        logger.info("Tick driver stopped")

    def start(self):
        """Run the driver in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Tick driver already running")
            return

        self._thread = threading.Thread(target=self.run, daemon=True, name="TickDriver")
        self._thread.start()

    def stop(self, timeout: float = 3.0):
        self._stop_requested.set()

        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Tick driver thread did not terminate cleanly")
