"""Body pose tracking: shoulder rect gating and wrist-driven pinch points."""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Sequence

from ..hand_gestures.config import BodyConfig
from ..hand_gestures.features import Landmark, head_yaw
from ..hand_gestures.math_utils import (
    Point2, Point3, Rect,
    body_to_screen_point, deadzone2, lerp3, offset_rect,
)

logger = logging.getLogger(__name__)


# MediaPipe pose landmark indices
class PoseLM:
    NOSE = 0
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_WRIST = 15
    RIGHT_WRIST = 16


class PoseState(IntEnum):
    """Ordered so the most advanced condition met wins."""
    MISSING = 0
    BODY_VISIBLE = 1
    HAND_VISIBLE = 2
    IN_SHOULDER_RECT = 3


class MovementState(Enum):
    STATIC = "STATIC"
    MOVING = "MOVING"


# hand_in_rect_chirality values
NO_HAND = "None"
BOTH_HANDS = "Both"


@dataclass
class ShoulderRects:
    padded: Rect | None = None
    left: Rect | None = None
    right: Rect | None = None

    def for_side(self, slot: int) -> Rect | None:
        return self.left if slot == 0 else self.right


@dataclass
class TrackedBody:
    """Persistent per-body accumulator, updated in place every tick."""
    landmarks: Sequence[Landmark] | None = None
    left_shoulder: Point2 = (0.0, 0.0)
    right_shoulder: Point2 = (0.0, 0.0)
    left_hand: Point3 | None = None
    right_hand: Point3 | None = None
    shoulder_rects: ShoulderRects = field(default_factory=ShoulderRects)
    pinch_points: list[Point2] = field(default_factory=lambda: [(0.0, 0.0), (0.0, 0.0)])
    pose_state: PoseState = PoseState.MISSING
    hands_in_rect: int = 0
    hand_in_rect_chirality: str = NO_HAND
    movement_state: MovementState = MovementState.STATIC
    head_yaw: float | None = None

    @property
    def shoulder_rect(self) -> Rect | None:
        return self.shoulder_rects.padded


class BodyPoseTracker:
    """
    Turns body pose landmarks into a shoulder-anchored interaction zone.

    A square rect hangs from the shoulders; a wrist inside its padded
    version counts as a hand in the zone, and is mapped through a per-side
    offset rect into screen pixels.
    """

    def __init__(self, config: BodyConfig | None = None, label: str = ""):
        self.config = config or BodyConfig()
        self.label = label
        self.body = TrackedBody()

    def update(self, landmarks: Sequence[Landmark] | None, screen_width: float, screen_height: float) -> TrackedBody:
        cfg = self.config
        body = self.body
        state = PoseState.MISSING

        if landmarks and len(landmarks) > PoseLM.RIGHT_WRIST:
            state = PoseState.BODY_VISIBLE
            self._update_shoulders(landmarks)

            shoulder_rect = self._shoulder_rect()
            padding = cfg.padding_ratio * shoulder_rect.width
            padded = Rect(
                x=shoulder_rect.x - padding * 1.5,
                y=shoulder_rect.y - padding,
                width=shoulder_rect.width + padding * 3,
                height=shoulder_rect.height + padding * 2,
            )

            rects = ShoulderRects(padded=padded)
            pinch_candidates: list[Point2] = [(0.0, 0.0), (0.0, 0.0)]
            hands_in_rect = 0
            in_rect_chirality = NO_HAND

            wrists = (
                ("Left", PoseLM.LEFT_WRIST, "left_hand", padding / 4),
                ("Right", PoseLM.RIGHT_WRIST, "right_hand", -padding / 4),
            )
            for slot, (side, index, attr, offset) in enumerate(wrists):
                wrist = landmarks[index]
                if wrist.visibility <= cfg.wrist_visibility_min:
                    setattr(body, attr, None)
                    continue

                state = max(state, PoseState.HAND_VISIBLE)
                raw = (wrist.x, wrist.y, wrist.z)
                previous = getattr(body, attr) or raw
                smoothed = lerp3(previous, raw, cfg.hand_lerp_speed)

                if padded.contains(smoothed):
                    state = PoseState.IN_SHOULDER_RECT
                    hands_in_rect += 1
                    in_rect_chirality = side
                    side_rect = offset_rect(shoulder_rect, offset, cfg.offset_rect_scale)
                    if slot == 0:
                        rects.left = side_rect
                    else:
                        rects.right = side_rect
                    pinch_candidates[slot] = body_to_screen_point(smoothed, side_rect, screen_width, screen_height)
                    setattr(body, attr, smoothed)

            previous_points = list(body.pinch_points)
            for slot in range(2):
                if rects.for_side(slot) is not None:
                    body.pinch_points[slot] = deadzone2(
                        body.pinch_points[slot], pinch_candidates[slot], cfg.pinch_deadzone_px
                    )

            body.landmarks = landmarks
            body.shoulder_rects = rects
            body.hands_in_rect = hands_in_rect
            body.hand_in_rect_chirality = BOTH_HANDS if hands_in_rect == 2 else in_rect_chirality
            body.movement_state = self._movement(previous_points, body.pinch_points)
        else:
            body.landmarks = None
            body.shoulder_rects = ShoulderRects()
            body.hands_in_rect = 0
            body.hand_in_rect_chirality = NO_HAND

        if landmarks and cfg.check_head_turn:
            body.head_yaw = head_yaw(landmarks)

        if state is not body.pose_state:
            logger.debug(f"{self.label}: body {body.pose_state.name} -> {state.name}")
            body.pose_state = state
        return body

    def _update_shoulders(self, landmarks: Sequence[Landmark]) -> None:
        body = self.body
        left = landmarks[PoseLM.LEFT_SHOULDER]
        right = landmarks[PoseLM.RIGHT_SHOULDER]
        radius = abs(body.right_shoulder[0] - body.left_shoulder[0]) * self.config.shoulder_deadzone_ratio
        body.left_shoulder = deadzone2(body.left_shoulder, (left.x, left.y), radius)
        body.right_shoulder = deadzone2(body.right_shoulder, (right.x, right.y), radius)

    def _shoulder_rect(self) -> Rect:
        body = self.body
        width = abs(body.right_shoulder[0] - body.left_shoulder[0])
        height = width
        return Rect(
            x=body.right_shoulder[0],
            y=body.right_shoulder[1] - height * 0.25,
            width=width,
            height=height,
        )

    def _movement(self, before: list[Point2], after: list[Point2]) -> MovementState:
        limit = self.config.pinch_deadzone_px * self.config.static_movement_ratio
        if all(abs(a[1] - b[1]) < limit for a, b in zip(after, before)):
            return MovementState.STATIC
        return MovementState.MOVING


# =============================================================================
# SCREEN SPACE
# =============================================================================

def pinches_in_screen_space(
    pinch_positions: Sequence[Point3], body: TrackedBody, width: float, height: float
) -> list[Point3]:
    """
    Map hand-space pinch positions through the body's shoulder rects into
    screen space centred on the screen, y up.

    Each side uses its own offset rect when the wrist is in the zone, and the
    padded rect otherwise. Without a padded rect every position maps to the
    screen centre.
    """
    padded = body.shoulder_rects.padded
    if padded is None:
        return [(0.0, 0.0, 0.0) for _ in pinch_positions]

    mapped = []
    for slot, position in enumerate(pinch_positions):
        rect = body.shoulder_rects.for_side(slot) or padded
        x, y = body_to_screen_point(position, rect, width, height)
        mapped.append((x - width / 2, height - y - height / 2, 0.0))
    return mapped


def client_xy(point, width: float, height: float) -> Point2:
    """Centred screen space back to top-left client coordinates."""
    return (point[0] + width / 2, height - (point[1] + height / 2))
