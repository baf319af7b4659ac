"""
Tests for the MediaPipe landmark source, with the detectors mocked out.

Skipped when the camera extras (opencv-python, mediapipe) are not installed.

Run with: python -m pytest tests/ -v
"""

import importlib.util
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np

from gesture_tracking.hand_gestures.config import Chirality
from gesture_tracking.hand_tracks.pipeline import PoseDutyCycle

HAS_CAMERA = all(importlib.util.find_spec(name) is not None for name in ("cv2", "mediapipe"))


def handedness(label, score=0.9):
    return SimpleNamespace(classification=[SimpleNamespace(label=label, score=score)])


def landmark_list(count=21):
    return SimpleNamespace(landmark=[SimpleNamespace(x=0.1 * (i % 10), y=0.5, z=0.0) for i in range(count)])


@unittest.skipUnless(HAS_CAMERA, "camera extras not installed")
class TestGetChirality(unittest.TestCase):

    def test_labels(self):
        from gesture_tracking.hand_tracks.landmark_source import get_chirality

        self.assertEqual(get_chirality(handedness("Left")), Chirality.LEFT)
        self.assertEqual(get_chirality(handedness("Left"), invert=True), Chirality.RIGHT)
        self.assertIsNone(get_chirality(handedness("Both")))
        self.assertIsNone(get_chirality(SimpleNamespace(classification=[])))


@unittest.skipUnless(HAS_CAMERA, "camera extras not installed")
class TestMediaPipeLandmarkSource(unittest.TestCase):

    def setUp(self):
        from gesture_tracking.hand_tracks import landmark_source

        if not hasattr(landmark_source.mp, "solutions"):
            self.skipTest("mediapipe build without the solutions API")

        self.mock_hands = MagicMock()
        self.mock_pose = MagicMock()
        self.hands_patcher = patch.object(landmark_source.mp.solutions.hands, "Hands", return_value=self.mock_hands)
        self.pose_patcher = patch.object(landmark_source.mp.solutions.pose, "Pose", return_value=self.mock_pose)
        self.hands_patcher.start()
        self.pose_patcher.start()

        self.source = landmark_source.MediaPipeLandmarkSource(duty_cycle=PoseDutyCycle(2, 1))
        self.image = np.zeros((4, 4, 3), dtype=np.uint8)

    def tearDown(self):
        self.hands_patcher.stop()
        self.pose_patcher.stop()

    def test_duty_cycle_alternates_detectors(self):
        self.mock_pose.process.return_value = SimpleNamespace(pose_landmarks=landmark_list(33))
        self.mock_hands.process.return_value = SimpleNamespace(
            multi_hand_landmarks=[landmark_list()],
            multi_handedness=[handedness("Right")],
            multi_hand_world_landmarks=None,
        )

        self.source.process(self.image)
        frame = self.source.frame(1.0)
        self.assertTrue(frame.fresh_bodies)
        self.assertFalse(frame.fresh_hands)
        self.assertEqual(len(frame.bodies[0]), 33)
        self.assertEqual(frame.hands, [])

        self.source.process(self.image)
        frame = self.source.frame(2.0)
        self.assertFalse(frame.fresh_bodies)
        self.assertTrue(frame.fresh_hands)
        (hand,) = frame.hands
        self.assertEqual(hand.chirality, Chirality.RIGHT)
        self.assertEqual(len(hand.landmarks), 21)
        self.assertEqual(hand.score, 0.9)
        self.assertEqual(frame.timestamp, 2.0)

    def test_fresh_flags_clear_after_read(self):
        self.mock_pose.process.return_value = SimpleNamespace(pose_landmarks=None)
        self.source.process(self.image)
        self.assertTrue(self.source.frame(0.0).fresh_bodies)
        frame = self.source.frame(0.1)
        self.assertFalse(frame.fresh_bodies)
        self.assertEqual(frame.bodies, [None])

    def test_unknown_handedness_is_skipped(self):
        self.source.duty_cycle = PoseDutyCycle(1, 0)
        self.mock_hands.process.return_value = SimpleNamespace(
            multi_hand_landmarks=[landmark_list()],
            multi_handedness=[handedness("Unknown")],
            multi_hand_world_landmarks=None,
        )
        self.source.process(self.image)
        self.assertEqual(self.source.frame(0.0).hands, [])

    def test_close(self):
        with self.source:
            pass
        self.mock_hands.close.assert_called_once()
        self.mock_pose.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
