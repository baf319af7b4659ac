"""Pose classification and hold-to-confirm gesture detectors for hand tracking."""

import logging
from dataclasses import dataclass
from enum import Enum

from .config import HOLD_TOLERANCE_S, PINCH_THRESHOLD, POSE_HOLD_THRESHOLD_S
from .features import HandSkeleton, extended_finger_mask, palm_forward, pinch_distance
from .math_utils import clamp

logger = logging.getLogger(__name__)

POINTING_MASK = (0, 1, 0, 0, 0)


# =============================================================================
# POSE DETECTION
# =============================================================================

def extended_finger_count(skeleton: HandSkeleton, mask: tuple[int, ...] | None = None) -> int:
    """Number of extended fingers, thumb included."""
    if mask is None:
        mask = extended_finger_mask(skeleton)
    return sum(mask)


def is_pinching(skeleton: HandSkeleton, threshold: float = PINCH_THRESHOLD) -> bool:
    """Palm facing the camera with index and thumb tips closer than `threshold`."""
    return palm_forward(skeleton) and pinch_distance(skeleton) < threshold


def is_pointing(skeleton: HandSkeleton, mask: tuple[int, ...] | None = None) -> bool:
    """Only the index finger is extended."""
    if mask is None:
        mask = extended_finger_mask(skeleton)
    return tuple(mask) == POINTING_MASK


# =============================================================================
# HOLD-TO-CONFIRM DETECTORS
# =============================================================================

class FingerPoseState(Enum):
    NONE = "NONE"
    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    FOUR = "FOUR"
    FIVE = "FIVE"
    CONFIRM = "CONFIRM"


class GrabState(Enum):
    NONE = "NONE"
    GRABBING = "GRABBING"
    CONFIRM = "CONFIRM"


FINGER_COUNT_STATES = (
    FingerPoseState.NONE,
    FingerPoseState.ONE,
    FingerPoseState.TWO,
    FingerPoseState.THREE,
    FingerPoseState.FOUR,
    FingerPoseState.FIVE,
)


@dataclass
class HoldToConfirmDetector:
    """
    Confirms a pose once it has been held, palm forward and with an unchanged
    extended-finger count, for `hold_threshold` seconds.

    After confirming the detector stays latched until a tick that fails the
    pose, which resets duration, progress and the completed flag together.
    Subclasses supply `_matches` and `_holding_state`.
    """
    hold_threshold: float = POSE_HOLD_THRESHOLD_S
    label: str = ""
    hold_duration: float = 0.0
    last_extended_count: int = 0
    completed: bool = False
    progress: float = 0.0

    def __post_init__(self):
        self.state = self._idle_state()

    def update(self, delta: float, skeleton: HandSkeleton) -> None:
        count = extended_finger_count(skeleton)
        qualifies = (
            palm_forward(skeleton)
            and self._matches(count)
            and count == self.last_extended_count
        )

        if qualifies:
            if not self.completed:
                self.hold_duration += delta
                if self.hold_duration >= self.hold_threshold - HOLD_TOLERANCE_S:
                    self.progress = 1.0
                    self.state = self._confirm_state()
                    self.completed = True
                    logger.info(f"{self.label}: {type(self).__name__} CONFIRM")
                else:
                    self.progress = clamp(self.hold_duration / self.hold_threshold)
                    self.state = self._holding_state(count)
        else:
            self.reset()

        self.last_extended_count = count

    def reset(self) -> None:
        self.hold_duration = 0.0
        self.progress = 0.0
        self.completed = False
        self.state = self._idle_state()

    def _matches(self, count: int) -> bool:
        raise NotImplementedError

    def _holding_state(self, count: int):
        raise NotImplementedError

    def _idle_state(self):
        raise NotImplementedError

    def _confirm_state(self):
        raise NotImplementedError


class FingerPoseDetector(HoldToConfirmDetector):
    """One to five extended fingers held steady."""

    def _matches(self, count: int) -> bool:
        return count > 0

    def _holding_state(self, count: int) -> FingerPoseState:
        return FINGER_COUNT_STATES[count]

    def _idle_state(self) -> FingerPoseState:
        return FingerPoseState.NONE

    def _confirm_state(self) -> FingerPoseState:
        return FingerPoseState.CONFIRM


class GrabPoseDetector(HoldToConfirmDetector):
    """Closed fist, palm forward, held steady."""

    def _matches(self, count: int) -> bool:
        return count == 0

    def _holding_state(self, count: int) -> GrabState:
        return GrabState.GRABBING

    def _idle_state(self) -> GrabState:
        return GrabState.NONE

    def _confirm_state(self) -> GrabState:
        return GrabState.CONFIRM
