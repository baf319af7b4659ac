"""
Tests for hand skeleton construction and image-space features.

Run with: python -m pytest tests/ -v
"""

import math
import unittest

import numpy as np

from gesture_tracking.hand_gestures.config import Chirality, MAX_HAND_SCALE
from gesture_tracking.hand_gestures.features import (
    Finger,
    HandSkeleton,
    Joint,
    Landmark,
    extended_finger_mask,
    hand_scale,
    head_yaw,
    palm_forward,
    pinch_distance,
    stable_anchor,
)
from gesture_tracking.hand_gestures.gestures import extended_finger_count, is_pinching, is_pointing
from tests.fixtures import FIST, OPEN, POINTING, body_landmarks, hand_landmarks, hand_points


def skeleton(chirality=Chirality.RIGHT, **kwargs) -> HandSkeleton:
    return HandSkeleton.from_landmarks(hand_landmarks(chirality, **kwargs), chirality)


class TestHandSkeleton(unittest.TestCase):

    def test_anchor_extends_past_index_knuckle(self):
        points = np.array(hand_points())
        anchor = stable_anchor(points)
        # index mcp (0.55, 0.6), pinky mcp (0.45, 0.6)
        self.assertAlmostEqual(anchor[0], 0.60)
        self.assertAlmostEqual(anchor[1], 0.60)

    def test_scale_normalizes_knuckle_span(self):
        points = np.array(hand_points())
        self.assertAlmostEqual(hand_scale(points), 150.0)

    def test_joint_layout(self):
        sk = skeleton()
        self.assertEqual(sk.joints.shape, (5, 4, 3))
        # Index metacarpal is the index knuckle: (0.55 - 0.60) * 150
        x, y, z = sk.metacarpal(Finger.INDEX)
        self.assertAlmostEqual(x, -7.5)
        self.assertAlmostEqual(y, 0.0)
        self.assertEqual(z, 0.0)
        self.assertEqual(sk.distal(Finger.THUMB), sk.joint(Finger.THUMB, Joint.DISTAL))
        np.testing.assert_array_equal(sk.pinky_finger(), sk.finger(Finger.PINKY))

    def test_joints_are_read_only(self):
        sk = skeleton()
        with self.assertRaises(ValueError):
            sk.joints[0, 0, 0] = 1.0

    def test_accepts_precomputed_anchor_and_scale(self):
        sk = HandSkeleton.from_landmarks(hand_landmarks(), Chirality.RIGHT, anchor=(0.0, 0.0, 0.0), scale=1.0)
        self.assertAlmostEqual(sk.metacarpal(Finger.INDEX)[0], 0.55)

    def test_accepts_plain_tuples(self):
        sk = HandSkeleton.from_landmarks(hand_points(), Chirality.RIGHT)
        self.assertAlmostEqual(sk.scale, 150.0)

    def test_wrong_landmark_count_raises(self):
        with self.assertRaises(ValueError):
            HandSkeleton.from_landmarks(hand_points()[:20], Chirality.RIGHT)

    def test_degenerate_span_is_clamped(self):
        points = hand_points()
        points[17] = points[5]
        sk = HandSkeleton.from_landmarks(points, Chirality.RIGHT)
        self.assertEqual(sk.scale, MAX_HAND_SCALE)
        self.assertTrue(np.all(np.isfinite(sk.joints)))

    def test_is_extended_uses_given_mask(self):
        sk = skeleton(extended=POINTING)
        self.assertTrue(sk.is_extended(Finger.INDEX))
        self.assertFalse(sk.is_extended(Finger.MIDDLE))
        self.assertTrue(sk.is_extended(Finger.MIDDLE, mask=OPEN))


class TestClassifiers(unittest.TestCase):

    def test_open_hand_mask(self):
        for chirality in Chirality:
            with self.subTest(chirality=chirality):
                sk = skeleton(chirality)
                self.assertEqual(extended_finger_mask(sk), (1, 1, 1, 1, 1))
                self.assertEqual(extended_finger_count(sk), 5)
                self.assertFalse(is_pointing(sk))

    def test_pointing_mask(self):
        for chirality in Chirality:
            with self.subTest(chirality=chirality):
                sk = skeleton(chirality, extended=POINTING)
                self.assertEqual(extended_finger_mask(sk), (0, 1, 0, 0, 0))
                self.assertTrue(is_pointing(sk))

    def test_fist_mask(self):
        self.assertEqual(extended_finger_count(skeleton(extended=FIST)), 0)

    def test_thumb_direction_follows_chirality(self):
        # A right-hand layout labelled Left has its thumb pointing the wrong way
        sk = HandSkeleton.from_landmarks(hand_landmarks(Chirality.RIGHT), Chirality.LEFT)
        self.assertEqual(extended_finger_mask(sk)[0], 0)

    def test_palm_forward(self):
        self.assertTrue(palm_forward(skeleton(Chirality.RIGHT)))
        self.assertTrue(palm_forward(skeleton(Chirality.LEFT)))
        # Back of the hand: knuckle order does not match the label
        mislabelled = HandSkeleton.from_landmarks(hand_landmarks(Chirality.RIGHT), Chirality.LEFT)
        self.assertFalse(palm_forward(mislabelled))

    def test_palm_not_forward_when_tilted_in_depth(self):
        points = hand_points()
        x, y, _ = points[5]
        points[5] = (x, y, 0.5)
        self.assertFalse(palm_forward(HandSkeleton.from_landmarks(points, Chirality.RIGHT)))

    def test_pinch(self):
        sk = skeleton(pinch=True)
        self.assertAlmostEqual(pinch_distance(sk), 1.5)
        self.assertTrue(is_pinching(sk))
        self.assertFalse(is_pointing(sk))
        self.assertFalse(is_pinching(skeleton()))

    def test_scale_invariance(self):
        for k in (0.5, 2.0, 3.7):
            for kwargs in ({}, {"extended": POINTING}, {"pinch": True}, {"extended": FIST}):
                with self.subTest(k=k, **kwargs):
                    base = skeleton(**kwargs)
                    scaled = HandSkeleton.from_landmarks(hand_points(scale=k, **kwargs), Chirality.RIGHT)
                    self.assertEqual(extended_finger_mask(scaled), extended_finger_mask(base))
                    self.assertEqual(is_pinching(scaled), is_pinching(base))
                    self.assertEqual(is_pointing(scaled), is_pointing(base))
                    self.assertAlmostEqual(pinch_distance(scaled), pinch_distance(base))

    def test_translation_invariance(self):
        base = skeleton()
        moved = HandSkeleton.from_landmarks(hand_points(offset=(0.2, -0.1)), Chirality.RIGHT)
        np.testing.assert_allclose(moved.joints, base.joints, atol=1e-9)


class TestHeadYaw(unittest.TestCase):

    def test_facing_camera(self):
        self.assertAlmostEqual(head_yaw(body_landmarks(nose=(0.50, 0.55))), 0.0)

    def test_turned(self):
        self.assertAlmostEqual(head_yaw(body_landmarks(nose=(0.55, 0.55))), 45.0)

    def test_empty_input(self):
        self.assertEqual(head_yaw([]), 0.0)
        self.assertEqual(head_yaw(None), 0.0)
        self.assertEqual(head_yaw([Landmark(0.5, 0.5)]), 0.0)


if __name__ == "__main__":
    unittest.main()
