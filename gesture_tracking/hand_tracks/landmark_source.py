"""MediaPipe hand and pose tracking wrapper producing LandmarkFrames."""

import logging

import cv2
import mediapipe as mp
import numpy as np
from numpy.typing import NDArray

from ..hand_gestures.config import Chirality
from ..hand_gestures.features import HandResult, Landmark
from .pipeline import LandmarkFrame, PoseDutyCycle

logger = logging.getLogger(__name__)


def _to_landmarks(landmark_list) -> list[Landmark]:
    return [
        Landmark(lm.x, lm.y, lm.z, getattr(lm, "visibility", 1.0))
        for lm in landmark_list.landmark
    ]


def get_chirality(handedness, invert: bool = False) -> Chirality | None:
    """Chirality from a MediaPipe handedness classification, optionally swapped."""
    try:
        label = handedness.classification[0].label
    except (AttributeError, IndexError):
        return None
    if invert:
        label = {"Left": "Right", "Right": "Left"}.get(label, label)
    try:
        return Chirality(label)
    except ValueError:
        return None


class MediaPipeLandmarkSource:
    """
    Runs MediaPipe Hands and Pose on camera frames and caches the latest
    results.

    Body and hand detection alternate through a PoseDutyCycle. Each call to
    `frame` hands back the cached results, flagged fresh only for the
    detector that actually ran since the previous call.
    """

    def __init__(
        self,
        max_num_hands: int = 4,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.7,
        duty_cycle: PoseDutyCycle | None = None,
        selfie_mode: bool = True,
        invert_handedness: bool = False,
    ):
        self._mp_hands = mp.solutions.hands
        self._mp_pose = mp.solutions.pose
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_num_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._pose = self._mp_pose.Pose(
            static_image_mode=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.duty_cycle = duty_cycle or PoseDutyCycle()
        self.selfie_mode = selfie_mode
        self.invert_handedness = invert_handedness

        self._hand_results: list[HandResult] = []
        self._body: list[Landmark] | None = None
        self._fresh_hands = False
        self._fresh_bodies = False

    def process(self, frame: NDArray[np.uint8]) -> None:
        """Run whichever detector the duty cycle selects on a BGR frame."""
        if self.selfie_mode:
            frame = cv2.flip(frame, 1)
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        if self.duty_cycle.next():
            results = self._pose.process(rgb)
            self._body = _to_landmarks(results.pose_landmarks) if results.pose_landmarks else None
            self._fresh_bodies = True
        else:
            results = self._hands.process(rgb)
            self._hand_results = self._convert_hands(results)
            self._fresh_hands = True

    def _convert_hands(self, results) -> list[HandResult]:
        if not results.multi_hand_landmarks:
            return []
        hands = []
        world = results.multi_hand_world_landmarks or [None] * len(results.multi_hand_landmarks)
        for landmarks, handedness, world_landmarks in zip(
            results.multi_hand_landmarks, results.multi_handedness, world
        ):
            chirality = get_chirality(handedness, self.invert_handedness)
            if chirality is None:
                logger.debug("Skipping hand with unknown handedness")
                continue
            hands.append(HandResult(
                landmarks=_to_landmarks(landmarks),
                chirality=chirality,
                score=handedness.classification[0].score,
                world_landmarks=_to_landmarks(world_landmarks) if world_landmarks else None,
            ))
        return hands

    def frame(self, timestamp: float) -> LandmarkFrame:
        """The cached results as a LandmarkFrame; clears the fresh flags."""
        out = LandmarkFrame(
            hands=list(self._hand_results),
            bodies=[self._body],
            fresh_hands=self._fresh_hands,
            fresh_bodies=self._fresh_bodies,
            timestamp=timestamp,
        )
        self._fresh_hands = False
        self._fresh_bodies = False
        return out

    def close(self) -> None:
        """Release resources."""
        self._hands.close()
        self._pose.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
