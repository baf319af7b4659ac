"""Hand skeleton construction and per-frame features from MediaPipe landmarks."""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

import numpy as np

from .config import (
    Chirality,
    CONSTANT_HAND_WIDTH, MIN_KNUCKLE_SPAN, MAX_HAND_SCALE,
)
from .math_utils import Point3, angle_between_deg

logger = logging.getLogger(__name__)


# MediaPipe landmark indices
class LM:
    WRIST = 0
    THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
    INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
    MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
    RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
    PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20


class Finger(IntEnum):
    THUMB = 0
    INDEX = 1
    MIDDLE = 2
    RING = 3
    PINKY = 4


class Joint(IntEnum):
    METACARPAL = 0
    PROXIMAL = 1
    INTERMEDIATE = 2
    DISTAL = 3


NUM_HAND_LANDMARKS = 21
FINGER_JOINTS = (
    (1, 2, 3, 4),
    (5, 6, 7, 8),
    (9, 10, 11, 12),
    (13, 14, 15, 16),
    (17, 18, 19, 20),
)
FINGERTIP_IDS = (LM.THUMB_TIP, LM.INDEX_TIP, LM.MIDDLE_TIP, LM.RING_TIP, LM.PINKY_TIP)


@dataclass(frozen=True)
class Landmark:
    """A single tracker point in normalized image space."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    @property
    def xyz(self) -> Point3:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class HandResult:
    """One detected hand as delivered by the landmark provider."""
    landmarks: Sequence[Landmark]
    chirality: Chirality
    score: float = 1.0
    world_landmarks: Sequence[Landmark] | None = None


def landmarks_to_array(landmarks: Iterable) -> np.ndarray:
    """Convert landmarks with .x/.y(/.z) attributes, or (x, y[, z]) tuples, into an (N, 3) array."""
    rows = []
    for lm in landmarks:
        if hasattr(lm, "x"):
            rows.append((lm.x, lm.y, getattr(lm, "z", 0.0)))
        else:
            rows.append((lm[0], lm[1], lm[2] if len(lm) > 2 else 0.0))
    return np.array(rows, dtype=float).reshape(-1, 3)


def stable_anchor(points: np.ndarray) -> np.ndarray:
    """
    Anchor point halfway along the index->pinky knuckle line, pushed out past
    the index knuckle.

    Knuckles barely move while pinching, so this point does not jitter with
    the fingertips the way the live thumb/index midpoint does.
    """
    index_mcp = points[LM.INDEX_MCP]
    pinky_mcp = points[LM.PINKY_MCP]
    return index_mcp + (index_mcp - pinky_mcp) / 2.0


def knuckle_span(points: np.ndarray) -> float:
    return float(np.linalg.norm(points[LM.INDEX_MCP] - points[LM.PINKY_MCP]))


def hand_scale(points: np.ndarray) -> float:
    """Scale factor that maps the index/pinky knuckle span to CONSTANT_HAND_WIDTH."""
    span = knuckle_span(points)
    if not np.isfinite(span) or span <= MIN_KNUCKLE_SPAN:
        logger.debug("Degenerate knuckle span %.3g, clamping hand scale", span)
        return MAX_HAND_SCALE
    return min(CONSTANT_HAND_WIDTH / span, MAX_HAND_SCALE)


@dataclass(frozen=True, eq=False)
class HandSkeleton:
    """
    Translation and scale invariant hand skeleton.

    `joints` has shape (5, 4, 3): finger (thumb..pinky) x joint
    (metacarpal..distal) x xyz, each expressed as (raw - anchor) * scale.
    `points` keeps the raw (21, 3) landmarks for image-space classifiers.
    """
    points: np.ndarray
    chirality: Chirality
    anchor: np.ndarray
    scale: float
    joints: np.ndarray

    @classmethod
    def from_landmarks(
        cls,
        landmarks,
        chirality: Chirality,
        anchor=None,
        scale: float | None = None,
    ) -> "HandSkeleton":
        points = landmarks if isinstance(landmarks, np.ndarray) else landmarks_to_array(landmarks)
        points = np.array(points, dtype=float).reshape(-1, 3)
        if points.shape[0] != NUM_HAND_LANDMARKS:
            raise ValueError(f"Expected {NUM_HAND_LANDMARKS} hand landmarks, got {points.shape[0]}")

        anchor = stable_anchor(points) if anchor is None else np.asarray(anchor, dtype=float)
        scale = hand_scale(points) if scale is None else float(scale)

        joints = (points[np.array(FINGER_JOINTS)] - anchor) * scale
        points.setflags(write=False)
        joints.setflags(write=False)
        return cls(points=points, chirality=chirality, anchor=anchor, scale=scale, joints=joints)

    @property
    def anchor_position(self) -> Point3:
        return (float(self.anchor[0]), float(self.anchor[1]), float(self.anchor[2]))

    def finger(self, finger: int) -> np.ndarray:
        """The four scaled joints of `finger`, shape (4, 3)."""
        return self.joints[finger]

    def joint(self, finger: int, joint: int) -> Point3:
        j = self.joints[finger, joint]
        return (float(j[0]), float(j[1]), float(j[2]))

    def metacarpal(self, finger: int) -> Point3:
        return self.joint(finger, Joint.METACARPAL)

    def proximal(self, finger: int) -> Point3:
        return self.joint(finger, Joint.PROXIMAL)

    def intermediate(self, finger: int) -> Point3:
        return self.joint(finger, Joint.INTERMEDIATE)

    def distal(self, finger: int) -> Point3:
        return self.joint(finger, Joint.DISTAL)

    def thumb(self) -> np.ndarray:
        return self.finger(Finger.THUMB)

    def index_finger(self) -> np.ndarray:
        return self.finger(Finger.INDEX)

    def middle_finger(self) -> np.ndarray:
        return self.finger(Finger.MIDDLE)

    def ring_finger(self) -> np.ndarray:
        return self.finger(Finger.RING)

    def pinky_finger(self) -> np.ndarray:
        return self.finger(Finger.PINKY)

    def is_extended(self, finger: int, mask: Sequence[int] | None = None) -> bool:
        """Whether `finger` is extended; pass a precomputed mask to avoid recomputing it."""
        if mask is None:
            mask = extended_finger_mask(self)
        return mask[finger] == 1


# =============================================================================
# IMAGE-SPACE FEATURES
# =============================================================================

def palm_forward(skeleton: HandSkeleton) -> bool:
    """
    Palm faces the camera: the wrist/index/pinky knuckle triangle is taller
    than wide, flatter in depth than wide, and the index knuckle sits on the
    side expected for the hand's chirality.
    """
    p = skeleton.points
    wrist, index_mcp, pinky_mcp = p[LM.WRIST], p[LM.INDEX_MCP], p[LM.PINKY_MCP]

    width = abs(pinky_mcp[0] - index_mcp[0])
    height = abs(wrist[1] - index_mcp[1])
    depth = max(
        abs(wrist[2] - index_mcp[2]),
        abs(wrist[2] - pinky_mcp[2]),
        abs(pinky_mcp[2] - index_mcp[2]),
    )

    vertical = height > width
    flat = depth < width
    if skeleton.chirality is Chirality.LEFT:
        forward = index_mcp[0] < pinky_mcp[0]
    else:
        forward = index_mcp[0] > pinky_mcp[0]
    return bool(vertical and flat and forward)


def extended_finger_mask(skeleton: HandSkeleton) -> tuple[int, int, int, int, int]:
    """
    Extension bit per finger, thumb to pinky.

    Thumb: tip beyond the IP joint along x, away from the palm for the hand's
    chirality. Other fingers: tip above (smaller y than) the PIP joint.
    """
    p = skeleton.points
    tip_x = p[LM.THUMB_TIP][0]
    ip_x = p[LM.THUMB_IP][0]
    if skeleton.chirality is Chirality.RIGHT:
        thumb = tip_x > ip_x
    else:
        thumb = tip_x < ip_x

    mask = [int(thumb)]
    for tip in FINGERTIP_IDS[1:]:
        mask.append(int(p[tip][1] < p[tip - 2][1]))
    return tuple(mask)


def pinch_distance(skeleton: HandSkeleton) -> float:
    """Distance between the index and thumb tips in skeleton space."""
    a = skeleton.joints[Finger.INDEX, Joint.DISTAL]
    b = skeleton.joints[Finger.THUMB, Joint.DISTAL]
    return float(np.linalg.norm(a - b))


# Body pose face landmarks
NOSE_TIP = 0
RIGHT_NOSTRIL = 2
LEFT_NOSTRIL = 5


def head_yaw(body_landmarks) -> float:
    """
    Left/right head turn in degrees from body pose face landmarks; 0 faces the camera.

    Measured at the midpoint between the nostrils, as the angle between the
    right nostril and the nose tip, less 90 degrees.
    """
    if not body_landmarks or len(body_landmarks) <= LEFT_NOSTRIL:
        logger.debug("No head landmarks, unable to determine head direction")
        return 0.0
    nose = body_landmarks[NOSE_TIP]
    left = body_landmarks[LEFT_NOSTRIL]
    right = body_landmarks[RIGHT_NOSTRIL]
    midpoint = ((left.x + right.x) / 2, (left.y + right.y) / 2)
    return angle_between_deg(midpoint, (right.x, right.y), (nose.x, nose.y)) - 90.0
