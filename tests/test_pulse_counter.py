"""Tests for icssim.devices.pulse_counter."""

import numpy as np
import pytest

from icssim.devices import PulseCounterSimulator
from icssim.devices.pulse_counter import PULSE2_STATE_COIL, PULSE_INCREMENTS
from icssim.modbus.errors import IllegalDataAddressError, IllegalFunctionError

from conftest import FakeRng


def make_counter(increments):
    device = PulseCounterSimulator(rng=FakeRng(integers=increments))
    device.init()
    return device


class TestPulseCounter:
    def test_init(self, pulse):
        assert pulse.handle_coils(0, 3) == [True, True, True]
        assert pulse.handle_input_registers(100, 6) == [0] * 6

    def test_update_draw_ranges(self, pulse, rng):
        pulse.update()
        assert rng.integer_calls == [(0, 10), (40, 70), (100, 150)]

    def test_counts(self):
        device = make_counter([5, 50, 120, 3, 60, 100])
        device.update()
        device.update()
        assert device.handle_input_registers(100, 6) == [0, 8, 0, 110, 0, 220]

    def test_disabled_channel_does_not_count(self):
        device = make_counter([5, 120])
        device.handle_coils(PULSE2_STATE_COIL, 1, [False])
        device.update()
        assert device.pulses == [5, 0, 120]

    def test_wraps_at_32_bits(self):
        device = make_counter([5, 40, 100])
        device.pulses[0] = 2**32 - 3
        device.update()
        assert device.handle_input_registers(100, 2) == [0, 2]

    def test_high_word(self):
        device = make_counter([])
        device.pulses[2] = 0x00012345
        assert device.handle_input_registers(104, 2) == [0x0001, 0x2345]

    def test_low_word_alone(self):
        device = make_counter([])
        device.pulses[1] = 70000
        assert device.handle_input_registers(103, 1) == [70000 & 0xFFFF]

    def test_unmapped_register(self, pulse):
        with pytest.raises(IllegalDataAddressError):
            pulse.handle_input_registers(106, 1)

    def test_holding_registers(self, pulse):
        with pytest.raises(IllegalFunctionError):
            pulse.handle_holding_registers(100, 1)

    def test_discrete_inputs(self, pulse):
        with pytest.raises(IllegalFunctionError):
            pulse.handle_discrete_inputs(0, 1)


class TestMonotonic:
    def test_counts_never_decrease(self):
        device = PulseCounterSimulator(rng=np.random.default_rng(3))
        device.init()
        previous = list(device.pulses)

        for tick in range(300):
            if tick == 100:
                device.handle_coils(PULSE2_STATE_COIL, 1, [False])
            device.update()

            for channel, (low, high) in enumerate(PULSE_INCREMENTS):
                step = device.pulses[channel] - previous[channel]
                if channel == 1 and tick >= 100:
                    assert step == 0
                else:
                    assert low <= step < high
            previous = list(device.pulses)
