"""Tests for reads racing the tick driver: words of one value never tear."""

import threading

from icssim.devices import ClimateControlSimulator, PulseCounterSimulator
from icssim.modbus.protocols import decode_uint32

from conftest import FakeRng

UPDATES = 5000


def race(device, read):
    """Run UPDATES device updates while another thread keeps reading.

    Returns the values seen by the reader, in order.
    """
    done = threading.Event()
    seen = []

    def updater():
        for _ in range(UPDATES):
            device.update()
        done.set()

    thread = threading.Thread(target=updater)
    thread.start()
    while not done.is_set():
        seen.append(read())
    thread.join()
    seen.append(read())
    return seen


class TestNoTearing:
    def test_uptime_across_word_boundary(self):
        """Uptime crosses 0xFFFF -> 0x10000 while being read."""
        device = ClimateControlSimulator(idle_current=0.5, max_fan_speed=500, rng=FakeRng())
        device.init()
        device.uptime = 0x10000 - UPDATES // 2

        seen = race(device, lambda: decode_uint32(*device.handle_input_registers(200, 2)))

        assert seen == sorted(seen)
        assert seen[-1] == 0x10000 - UPDATES // 2 + UPDATES

    def test_pulse_counts_across_word_boundary(self):
        """Channel 3 adds 100 per tick and crosses several high words."""
        device = PulseCounterSimulator(rng=FakeRng())
        device.init()

        def read():
            words = device.handle_input_registers(100, 6)
            return [decode_uint32(words[i], words[i + 1]) for i in (0, 2, 4)]

        seen = race(device, read)

        for channel in range(3):
            counts = [sample[channel] for sample in seen]
            assert counts == sorted(counts)
        # FakeRng draws the low bound: 0, 40, 100 per tick
        assert seen[-1] == [0, 40 * UPDATES, 100 * UPDATES]
        assert all(sample[2] % 100 == 0 for sample in seen)

