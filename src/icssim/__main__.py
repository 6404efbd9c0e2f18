"""
Main Simulation Orchestrator
============================

Entry point for the Modbus/TCP field device simulator.

Usage:
    python -m icssim config.toml [--print-map] [--log-level LEVEL]

Author: Guilherme F. G. Santos
Date: October 2026
"""

import argparse
import logging
import signal
import sys
from contextlib import suppress

from .config import load_config, log_level_value
from .devices import create_device_suite
from .modbus import Dispatcher, ModbusServerConfig, ModbusSlave
from .ticker import TickDriver
from .weather import WeatherClient

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    """Process-wide logging; the level name comes from the config file."""
    logging.basicConfig(
        level=log_level_value(level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_register_maps(dispatcher: Dispatcher):
    for device in dispatcher.devices():
        device.register_map.print_register_map(unit_id=device.unit_id)


def main():
    parser = argparse.ArgumentParser(description="Modbus/TCP Field Device Simulator")
    parser.add_argument("config", help="Path to the TOML configuration file")
    parser.add_argument(
        "--print-map",
        action="store_true",
        help="Print every device's register map and exit",
    )
    parser.add_argument(
        "--log-level", type=str, default=None, help="Override the configured log level"
    )
    args = parser.parse_args()

    # ========================================================================
    # PHASE 1: Configuration
    # ========================================================================
    try:
        config = load_config(args.config)
        if args.log_level:
            log_level_value(args.log_level)
            config.log_level = args.log_level
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)

    # ========================================================================
    # PHASE 2: Devices
    # ========================================================================
    dispatcher = Dispatcher(create_device_suite(config))

    if args.print_map:
        print_register_maps(dispatcher)
        return

    dispatcher.init_devices()

    # ========================================================================
    # PHASE 3: Modbus server
    # ========================================================================
    slave = ModbusSlave(
        dispatcher, ModbusServerConfig(host=config.host, port=config.port)
    )

    try:
        slave.start(blocking=False)
    except RuntimeError as e:
        logger.error(f"Modbus server startup failed: {e}")
        sys.exit(1)

    # ========================================================================
    # PHASE 4: Tick loop
    # ========================================================================
    weather = None
    if config.weather.api_key:
        weather = WeatherClient(
            api_key=config.weather.api_key,
            city=config.weather.city,
            timeout=config.weather.timeout,
        )
    else:
        logger.warning("No weather API key configured, ambient values stay fixed")

    driver = TickDriver(
        dispatcher,
        weather=weather,
        refresh_interval=config.weather.refresh_interval,
    )

    def signal_handler(sig, frame):
        logger.info("Shutdown signal received. Stopping simulation...")
        driver.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Press Ctrl+C to stop gracefully")

    try:
        driver.run()

    finally:
        logger.info("Shutting down...")

        with suppress(Exception):
            slave.stop()
        if weather:
            weather.close()

        logger.info("Simulation stopped cleanly")


if __name__ == "__main__":
    main()
