"""Tests for icssim.config."""

import logging

import pytest

from icssim.config import load_config, log_level_value, parse_config


def write_config(tmp_path, text):
    path = tmp_path / "config.toml"
    path.write_text(text)
    return str(path)


class TestLoadConfig:
    def test_empty_file_gives_defaults(self, tmp_path):
        config = load_config(write_config(tmp_path, ""))
        assert config.port == 5020
        assert config.log_level == "info"
        assert config.weather.api_key == ""
        assert config.weather.city == "Berlin"
        assert config.weather.refresh_interval == 120
        assert config.climate_control.idle_current == 0.5
        assert config.climate_control.max_fan_speed == 500
        assert config.tank_level.max_tank_capacity == 1000
        assert config.tank_level.fill_rate == 20

    def test_full_file(self, tmp_path):
        config = load_config(write_config(tmp_path, """
host = "127.0.0.1"
port = 1502
log_level = "debug"

[weather]
api_key = "secret"
city = "Lisbon"
refresh_interval = 60

[climate_control]
idle_current = 1
max_fan_speed = 800

[pulse_counter]
enabled = false

[tank_level]
max_tank_capacity = 500
drain_rate = 5
"""))
        assert config.host == "127.0.0.1"
        assert config.port == 1502
        assert config.weather.city == "Lisbon"
        assert config.weather.refresh_interval == 60
        assert config.climate_control.idle_current == 1.0
        assert isinstance(config.climate_control.idle_current, float)
        assert config.pulse_counter.enabled is False
        assert config.tank_level.max_tank_capacity == 500
        assert config.tank_level.drain_rate == 5
        assert config.tank_level.fill_rate == 20

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(str(tmp_path / "missing.toml"))


class TestValidation:
    def test_unknown_key(self):
        with pytest.raises(ValueError, match="unknown key: tank_level.volume"):
            parse_config({"tank_level": {"volume": 3}})

    def test_wrong_type(self):
        with pytest.raises(ValueError, match="port must be int"):
            parse_config({"port": "5020"})

    def test_bool_is_not_int(self):
        with pytest.raises(ValueError):
            parse_config({"climate_control": {"max_fan_speed": True}})

    def test_section_must_be_table(self):
        with pytest.raises(ValueError):
            parse_config({"weather": "Berlin"})

    @pytest.mark.parametrize(
        "raw",
        [
            {"port": 0},
            {"port": 70000},
            {"log_level": "verbose"},
            {"weather": {"refresh_interval": 0}},
            {"weather": {"timeout": 0.0}},
            {"climate_control": {"max_fan_speed": -1}},
            {"climate_control": {"idle_current": -0.1}},
            {"tank_level": {"max_tank_capacity": 0}},
            {"tank_level": {"fill_rate": 65536}},
        ],
    )
    def test_out_of_range(self, raw):
        with pytest.raises(ValueError):
            parse_config(raw)


class TestLogLevels:
    @pytest.mark.parametrize(
        "name, level",
        [
            ("trace", logging.DEBUG),
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("panic", logging.CRITICAL),
        ],
    )
    def test_mapping(self, name, level):
        assert log_level_value(name) == level

    def test_unknown(self):
        with pytest.raises(ValueError):
            log_level_value("loud")
