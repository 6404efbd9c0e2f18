"""
Configuration
=============

Settings are read once at startup from a TOML file. Every section is
optional; missing keys keep the dataclass defaults.

Example:
    >>> from icssim.config import load_config
    >>> cfg = load_config("config.toml")
    >>> cfg.tank_level.fill_rate
    20

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
import tomllib
from dataclasses import dataclass, field, fields

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


@dataclass
class WeatherConfig:
    """OpenWeatherMap settings; an empty api_key disables the refresh."""

    api_key: str = ""
    city: str = "Berlin"
    refresh_interval: int = 120  # [ticks]
    timeout: float = 5.0  # [s]


@dataclass
class ClimateControlConfig:
    enabled: bool = True
    idle_current: float = 0.5  # [A]
    max_fan_speed: int = 500  # [RPM]


@dataclass
class PulseCounterConfig:
    enabled: bool = True


@dataclass
class TankLevelConfig:
    enabled: bool = True
    max_tank_capacity: int = 1000
    max_water_level: int = 90  # [%]
    min_water_level: int = 10  # [%]
    max_water_level_alarm: int = 95  # [%]
    drain_rate: int = 15
    fill_rate: int = 20


@dataclass
class SimulatorConfig:
    host: str = "0.0.0.0"
    port: int = 5020
    log_level: str = "info"

    weather: WeatherConfig = field(default_factory=WeatherConfig)
    climate_control: ClimateControlConfig = field(default_factory=ClimateControlConfig)
    pulse_counter: PulseCounterConfig = field(default_factory=PulseCounterConfig)
    tank_level: TankLevelConfig = field(default_factory=TankLevelConfig)


_SECTIONS = {
    "weather": WeatherConfig,
    "climate_control": ClimateControlConfig,
    "pulse_counter": PulseCounterConfig,
    "tank_level": TankLevelConfig,
}


def load_config(path: str) -> SimulatorConfig:
    """Read a TOML config file and validate it.

    Raises:
        ValueError: If a key has the wrong type or an out-of-range value.
        OSError: If the file cannot be read.
    """
    with open(path, "rb") as f:
        raw = tomllib.load(f)

    return parse_config(raw)


def parse_config(raw: dict) -> SimulatorConfig:
    """Build a SimulatorConfig from an already-parsed TOML document."""
    top_level = {k: v for k, v in raw.items() if k not in _SECTIONS}
    config = _build(SimulatorConfig, top_level, "")

    for name, section_type in _SECTIONS.items():
        section = raw.get(name, {})
        if not isinstance(section, dict):
            raise ValueError(f"[{name}] must be a table")
        setattr(config, name, _build(section_type, section, name + "."))

    _validate(config)
    return config


def log_level_value(name: str) -> int:
    """Map a log level name to a logging level.

    Raises:
        ValueError: If *name* is not a known level.
    """
    try:
        return LOG_LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown log_level '{name}'") from None


def _build(section_type, raw: dict, prefix: str):
    """Instantiate *section_type* from *raw*, checking each value's type."""
    known = {f.name: f for f in fields(section_type) if f.name not in _SECTIONS}
    kwargs = {}

    for key, value in raw.items():
        if key not in known:
            raise ValueError(f"unknown key: {prefix}{key}")

        expected = known[key].type
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if expected is int and isinstance(value, bool):
            raise ValueError(f"{prefix}{key} must be int, got bool")
        if not isinstance(value, expected):
            raise ValueError(
                f"{prefix}{key} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        kwargs[key] = value

    return section_type(**kwargs)


def _validate(config: SimulatorConfig) -> None:
    """Check value ranges that TOML types alone cannot express."""
    if not 1 <= config.port <= 65535:
        raise ValueError(f"port must be in [1, 65535], got {config.port}")

    log_level_value(config.log_level)

    if config.weather.refresh_interval < 1:
        raise ValueError("weather.refresh_interval must be positive")
    if config.weather.timeout <= 0:
        raise ValueError("weather.timeout must be positive")

    if not 0 <= config.climate_control.max_fan_speed <= 65535:
        raise ValueError("climate_control.max_fan_speed must be in [0, 65535]")
    if config.climate_control.idle_current < 0:
        raise ValueError("climate_control.idle_current must not be negative")

    tank = config.tank_level
    if tank.max_tank_capacity < 1:
        raise ValueError("tank_level.max_tank_capacity must be positive")
    for f in fields(TankLevelConfig):
        value = getattr(tank, f.name)
        if f.type is int and not 0 <= value <= 65535:
            raise ValueError(f"tank_level.{f.name} must be in [0, 65535]")
