"""Tests for the render loop."""

import threading
import unittest

import numpy as np

from asciifield.clock import FrameClock
from asciifield.config import apply_overrides, build_settings, load_config
from asciifield.starfield import Starfield


class FakeTime:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


def make_settings(**overrides):
    return build_settings(apply_overrides(load_config(), overrides))


class TestStarfieldFrame(unittest.TestCase):
    """Test render_frame() and step()."""

    def setUp(self):
        self.time = FakeTime()
        self.settings = make_settings(**{"stars.count": 0})
        self.clock = FrameClock(self.settings.stars.speed, now=self.time)
        self.field = Starfield(
            self.settings, 80, 24, rng=np.random.default_rng(7), clock=self.clock
        )

    def test_frame_shape(self):
        rows = self.field.render_frame()
        self.assertEqual(len(rows), 24)
        self.assertTrue(all(len(row) == 80 for row in rows))

    def test_star_on_axis_hits_center(self):
        """End to end: optical axis at mid depth is the center cell."""
        self.field.pool.add(0.0, 0.0, 5.5)
        rows = self.field.render_frame()
        self.assertEqual(rows[12][40], "*")

    def test_step_moves_stars_towards_camera(self):
        self.field.pool.add(0.0, 0.0, 5.5)
        self.time.t = 0.5
        self.assertAlmostEqual(self.field.step(), 1.5)
        self.assertAlmostEqual(self.field.pool.positions[0, 2], 4.0)

    def test_stars_recycled_on_next_frame(self):
        self.field.pool.add(0.0, 0.0, 1.2)
        self.time.t = 1.0
        self.field.step()
        self.field.render_frame()
        self.assertEqual(len(self.field.pool), 0)

    def test_resize(self):
        self.field.resize(40, 10)
        rows = self.field.render_frame()
        self.assertEqual(len(rows), 10)
        self.assertEqual(len(rows[0]), 40)


class TestStarfieldPopulation(unittest.TestCase):

    def test_first_frame_is_populated(self):
        settings = make_settings(**{"stars.count": 300, "stars.seed": 42})
        field = Starfield(settings, 80, 24)
        rows = field.render_frame()

        self.assertEqual(len(field.pool), 300)
        self.assertFalse(field.pool.seed_mode)
        drawn = sum(len(row.replace(" ", "")) for row in rows)
        self.assertGreater(drawn, 0)

    def test_seed_is_reproducible(self):
        settings = make_settings(**{"stars.seed": 42})
        a = Starfield(settings, 80, 24).render_frame()
        b = Starfield(settings, 80, 24).render_frame()
        self.assertEqual(a, b)

    def test_auto_aspect_follows_grid(self):
        settings = make_settings(**{"camera.aspect": "auto"})
        field = Starfield(settings, 80, 20)
        self.assertAlmostEqual(field.aspect, 2.0)
        scale = field.matrix[1, 1]
        self.assertAlmostEqual(field.matrix[0, 0], scale / 2.0)

        field.resize(40, 20)
        self.assertAlmostEqual(field.matrix[0, 0], scale)


class TestShipOverlay(unittest.TestCase):

    def test_ship_centered_and_wobbling(self):
        time = FakeTime()
        settings = make_settings(**{"stars.count": 0, "ship.enabled": True})
        field = Starfield(settings, 80, 24, clock=FrameClock(3.0, now=time))

        rows = field.render_frame()
        # 14x7 sprite centered on 80x24
        self.assertEqual(rows[8][39:41], "/\\")
        self.assertEqual(rows[8][38], " ")

        time.t = 2.24  # sin(0.7 * t) ~ 1
        rows = field.render_frame()
        self.assertEqual(rows[8 + field.clock.wobble(3, 0.7, 1, 1.9)[1]][42:44], "/\\")

    def test_ship_disabled(self):
        field = Starfield(make_settings(**{"stars.count": 0}), 80, 24)
        self.assertIsNone(field.ship)
        self.assertTrue(all(row.strip() == "" for row in field.render_frame()))


class TestRunLoop(unittest.TestCase):
    """Test run()."""

    def setUp(self):
        self.field = Starfield(make_settings(**{"stars.seed": 1}), 80, 24)
        self.exit_event = threading.Event()
        self.frames = []
        self.sleeps = []

    def test_max_frames(self):
        count = self.field.run(
            self.frames.append, self.exit_event, sleep=self.sleeps.append, max_frames=3
        )
        self.assertEqual(count, 3)
        self.assertEqual(len(self.frames), 3)
        self.assertEqual(self.sleeps, [1 / 30, 1 / 30])

    def test_exit_event_finishes_current_frame(self):
        def emit(rows):
            self.frames.append(rows)
            self.exit_event.set()

        count = self.field.run(emit, self.exit_event, sleep=self.sleeps.append)
        self.assertEqual(count, 1)
        self.assertEqual(len(self.sleeps), 1)

    def test_exit_before_start(self):
        self.exit_event.set()
        self.assertEqual(self.field.run(self.frames.append, self.exit_event), 0)
        self.assertEqual(self.frames, [])

    def test_pending_resize_applied_before_frame(self):
        resize_event = threading.Event()
        resize_event.set()

        self.field.run(
            self.frames.append,
            self.exit_event,
            sleep=self.sleeps.append,
            resize_event=resize_event,
            get_size=lambda: (40, 10),
            max_frames=1,
        )

        self.assertFalse(resize_event.is_set())
        self.assertEqual(len(self.frames[0]), 10)
        self.assertEqual(len(self.frames[0][0]), 40)


if __name__ == '__main__':
    unittest.main()
