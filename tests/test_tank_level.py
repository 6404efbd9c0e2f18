"""Tests for icssim.devices.tank_level."""

import pytest

from icssim.devices import TankLevelSimulator
from icssim.devices.tank_level import (
    PUMP_STATE_COIL,
    SELECTED_MODE_COIL,
    VALVE_STATE_COIL,
)
from icssim.modbus.errors import IllegalDataAddressError, IllegalFunctionError

from conftest import FakeRng


def set_manual(tank):
    tank.handle_coils(SELECTED_MODE_COIL, 1, [False])


class TestInit:
    def test_coils(self, tank):
        assert tank.handle_coils(0, 3) == [True, False, False]

    def test_input_registers(self, tank):
        assert tank.handle_input_registers(100, 7) == [0, 1000, 90, 10, 95, 0, 20]


class TestAutomaticMode:
    def test_pump_starts_below_min(self, tank):
        """An empty tank switches the pump on and fills in the same tick."""
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is True
        assert tank.handle_input_registers(100, 1) == [20]

    def test_pump_stops_at_max(self, tank):
        tank.water_level = 900
        tank.set_coil(PUMP_STATE_COIL, True)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is False
        assert tank.water_level == 900

    def test_pump_keeps_state_inside_band(self, tank):
        tank.water_level = 500
        tank.set_coil(PUMP_STATE_COIL, True)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is True
        assert tank.water_level == 520

        tank.set_coil(PUMP_STATE_COIL, False)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is False
        assert tank.water_level == 520


class TestManualMode:
    def test_alarm_forces_pump_off(self, tank):
        set_manual(tank)
        tank.water_level = 950
        tank.set_coil(PUMP_STATE_COIL, True)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is False
        assert tank.water_level == 950

    def test_pump_runs_below_alarm(self, tank):
        set_manual(tank)
        tank.water_level = 930
        tank.set_coil(PUMP_STATE_COIL, True)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is True
        assert tank.water_level == 950

    def test_empty_tank_stays_off(self, tank):
        set_manual(tank)
        tank.update()
        assert tank.coil(PUMP_STATE_COIL) is False
        assert tank.water_level == 0


class TestValve:
    def test_drain(self, tank):
        """random() = 0.5 gives the nominal drain rate."""
        set_manual(tank)
        tank.water_level = 500
        tank.set_coil(VALVE_STATE_COIL, True)
        tank.update()
        assert tank.handle_input_registers(100, 1) == [485]
        assert tank.handle_input_registers(105, 1) == [15]

    def test_drain_jitter_truncates(self):
        tank = TankLevelSimulator(1000, 90, 10, 95, 15, 20, rng=FakeRng(floats=[0.99]))
        tank.init()
        set_manual(tank)
        tank.water_level = 500
        tank.set_coil(VALVE_STATE_COIL, True)
        tank.update()
        # 15 * (0.9 + 0.2 * 0.99) = 16.47
        assert tank.calculated_drain_rate == 16

    def test_closed_valve_resets_drain_rate(self, tank):
        set_manual(tank)
        tank.water_level = 500
        tank.set_coil(VALVE_STATE_COIL, True)
        tank.update()
        tank.set_coil(VALVE_STATE_COIL, False)
        tank.update()
        assert tank.handle_input_registers(105, 1) == [0]

    def test_level_wraps_below_zero(self, tank):
        set_manual(tank)
        tank.water_level = 5
        tank.set_coil(VALVE_STATE_COIL, True)
        tank.update()
        assert tank.water_level == 65526

    def test_drain_and_fill_same_tick(self, tank):
        tank.water_level = 500
        tank.set_coil(VALVE_STATE_COIL, True)
        tank.set_coil(PUMP_STATE_COIL, True)
        tank.update()
        assert tank.water_level == 505


class TestIllegalRequests:
    def test_unmapped_register(self, tank):
        with pytest.raises(IllegalDataAddressError):
            tank.handle_input_registers(107, 1)

    def test_range_past_end(self, tank):
        with pytest.raises(IllegalDataAddressError):
            tank.handle_input_registers(100, 8)

    def test_holding_registers(self, tank):
        with pytest.raises(IllegalFunctionError):
            tank.handle_holding_registers(100, 1)


class TestConstruction:
    def test_zero_capacity(self):
        with pytest.raises(ValueError):
            TankLevelSimulator(0, 90, 10, 95, 15, 20)

    def test_value_above_uint16(self):
        with pytest.raises(ValueError):
            TankLevelSimulator(70000, 90, 10, 95, 15, 20)

    def test_level_percent(self, tank):
        tank.water_level = 250
        assert tank.level_percent == 25.0
