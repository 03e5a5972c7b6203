"""Tests for the frame clock."""

import math
import unittest

from asciifield.clock import FrameClock, calc_step


class FakeTime:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


class TestCalcStep(unittest.TestCase):

    def test_speed_times_elapsed(self):
        self.assertEqual(calc_step(3, 0.5), 1.5)
        self.assertEqual(calc_step(3, 0.0), 0.0)


class TestFrameClock(unittest.TestCase):
    """Test tick() and wobble()."""

    def setUp(self):
        self.time = FakeTime(100.0)
        self.clock = FrameClock(3.0, now=self.time)

    def test_tick_uses_time_since_previous_frame(self):
        self.time.t = 100.5
        self.assertAlmostEqual(self.clock.tick(), 1.5)

        self.time.t = 100.6
        self.assertAlmostEqual(self.clock.tick(), 0.3)
        self.assertEqual(self.clock.previous, 100.6)

    def test_step_independent_of_frame_rate(self):
        """Many short frames cover the same distance as one long frame."""
        total = 0.0
        for i in range(1, 11):
            self.time.t = 100.0 + i * 0.1
            total += self.clock.tick()
        self.assertAlmostEqual(total, 3.0)

    def test_elapsed_since_start(self):
        self.time.t = 104.0
        self.clock.tick()
        self.assertEqual(self.clock.elapsed(), 4.0)

    def test_wobble(self):
        self.assertEqual(self.clock.wobble(3, 1.0, 1, 2.0), (0, 0))

        self.time.t = 100.0 + math.pi / 2
        self.assertEqual(self.clock.wobble(3, 1.0, 1, 2.0), (3, 0))

        self.time.t = 100.0 + 3 * math.pi / 2
        self.assertEqual(self.clock.wobble(3, 1.0, 2, 1.0), (-3, -2))


if __name__ == '__main__':
    unittest.main()
