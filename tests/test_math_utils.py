"""
Tests for vector, rect and screen mapping helpers.

Run with: python -m pytest tests/ -v
"""

import math
import unittest

from gesture_tracking.hand_gestures.math_utils import (
    ORIGIN3,
    Rect,
    angle_between_deg,
    body_to_screen_point,
    body_to_view_point,
    clamp,
    deadzone2,
    deadzone3,
    lerp3,
    offset_rect,
)


class TestRect(unittest.TestCase):

    def test_contains_is_strict(self):
        rect = Rect(0.0, 0.0, 1.0, 1.0)
        self.assertTrue(rect.contains((0.5, 0.5)))
        self.assertFalse(rect.contains((0.0, 0.5)))
        self.assertFalse(rect.contains((0.5, 1.0)))
        self.assertFalse(rect.contains((1.5, 0.5)))

    def test_offset_rect(self):
        base = Rect(0.4, 0.35, 0.2, 0.2)
        r = offset_rect(base, 0.02, 1.6)
        self.assertAlmostEqual(r.x, 0.36)
        self.assertAlmostEqual(r.y, 0.29)
        self.assertAlmostEqual(r.width, 0.32)
        self.assertAlmostEqual(r.height, 0.256)

    def test_offset_rect_unit_scale_only_shifts_and_squashes(self):
        r = offset_rect(Rect(1.0, 2.0, 4.0, 10.0), -1.0)
        self.assertEqual((r.x, r.y, r.width), (0.0, 2.0, 4.0))
        self.assertAlmostEqual(r.height, 8.0)


class TestDeadzone(unittest.TestCase):

    def test_inside_radius_holds_old_position(self):
        old = (1.0, 1.0, 1.0)
        self.assertEqual(deadzone3(old, (1.005, 1.0, 1.0), 0.01), old)

    def test_outside_radius_trails_by_radius(self):
        result = deadzone3((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 0.25)
        self.assertAlmostEqual(result[0], 0.75)
        self.assertEqual(result[1:], (0.0, 0.0))

    def test_missing_input_gives_origin(self):
        self.assertEqual(deadzone3(None, (1.0, 2.0, 3.0), 0.1), ORIGIN3)
        self.assertEqual(deadzone2((1.0, 2.0), None, 0.1), (0.0, 0.0))

    def test_deadzone2_trails(self):
        x, y = deadzone2((0.0, 0.0), (300.0, 400.0), 50.0)
        self.assertAlmostEqual(x, 270.0)
        self.assertAlmostEqual(y, 360.0)

    def test_deadzone2_zero_radius_jumps(self):
        self.assertEqual(deadzone2((0.0, 0.0), (0.4, 0.4), 0.0), (0.4, 0.4))


class TestScreenMapping(unittest.TestCase):

    def test_view_point_mirrors_x(self):
        rect = Rect(0.0, 0.0, 1.0, 1.0)
        self.assertEqual(body_to_view_point((0.25, 0.75), rect), (0.75, 0.75))

    def test_view_point_clamps(self):
        rect = Rect(0.0, 0.0, 1.0, 1.0)
        self.assertEqual(body_to_view_point((-2.0, 3.0), rect), (1.0, 1.0))
        self.assertEqual(body_to_view_point((5.0, -1.0), rect), (0.0, 0.0))

    def test_screen_point_exact(self):
        rect = Rect(0.25, 0.5, 0.5, 0.25)
        self.assertEqual(body_to_screen_point((0.5, 0.5625), rect, 1920, 1080), (960.0, 270.0))

    def test_degenerate_rect_does_not_raise(self):
        self.assertEqual(body_to_view_point((0.5, 0.5), Rect(0.5, 0.5, 0.0, 0.0)), (1.0, 0.0))


class TestMisc(unittest.TestCase):

    def test_clamp(self):
        self.assertEqual(clamp(1.5), 1.0)
        self.assertEqual(clamp(-0.5), 0.0)
        self.assertEqual(clamp(5, 0, 10), 5)

    def test_lerp3(self):
        self.assertEqual(lerp3((0.0, 0.0, 0.0), (1.0, 2.0, 4.0), 0.5), (0.5, 1.0, 2.0))

    def test_angle_between(self):
        self.assertAlmostEqual(angle_between_deg((0, 0), (1, 0), (0, 1)), 90.0)
        self.assertAlmostEqual(angle_between_deg((0, 0), (1, 0), (-1, 0)), 180.0)
        self.assertEqual(angle_between_deg((0, 0), (0, 0), (1, 1)), 0.0)
        self.assertFalse(math.isnan(angle_between_deg((0, 0), (1, 1e-12), (1, 0))))


if __name__ == "__main__":
    unittest.main()
