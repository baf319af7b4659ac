"""Synthetic landmark sets shared by the test modules."""

from gesture_tracking.hand_gestures.config import Chirality
from gesture_tracking.hand_gestures.features import HandResult, Landmark

NUM_POSE_LANDMARKS = 33

# Right hand, palm to camera, wrist at the bottom. Index knuckle at larger x.
_WRIST = (0.50, 0.80)
_FINGER_X = {1: 0.550, 2: 0.517, 3: 0.483, 4: 0.450}
_EXTENDED_Y = (0.60, 0.50, 0.45, 0.40)   # mcp, pip, dip, tip
_CURLED_Y = (0.60, 0.55, 0.60, 0.62)

_THUMB_EXTENDED = ((0.58, 0.75), (0.62, 0.70), (0.65, 0.66), (0.68, 0.62))
_THUMB_CURLED = ((0.58, 0.75), (0.60, 0.70), (0.60, 0.66), (0.57, 0.64))

# Index curled onto the thumb tip
_PINCH_INDEX = ((0.55, 0.60), (0.58, 0.58), (0.60, 0.60), (0.60, 0.62))
_PINCH_THUMB = ((0.58, 0.75), (0.60, 0.70), (0.61, 0.66), (0.61, 0.62))

OPEN = (1, 1, 1, 1, 1)
POINTING = (0, 1, 0, 0, 0)
FIST = (0, 0, 0, 0, 0)


def hand_points(
    chirality: Chirality = Chirality.RIGHT,
    extended=OPEN,
    pinch: bool = False,
    scale: float = 1.0,
    offset=(0.0, 0.0),
) -> list[tuple[float, float, float]]:
    """21 (x, y, z) points; Left hands mirror the Right layout about x = 0.5."""
    pts = [None] * 21
    pts[0] = _WRIST

    thumb = _THUMB_EXTENDED if extended[0] else _THUMB_CURLED
    if pinch:
        thumb = _PINCH_THUMB
    for j, p in enumerate(thumb):
        pts[1 + j] = p

    for finger in range(1, 5):
        x = _FINGER_X[finger]
        ys = _EXTENDED_Y if extended[finger] else _CURLED_Y
        for j, y in enumerate(ys):
            pts[1 + finger * 4 + j] = (x, y)

    if pinch:
        for j, p in enumerate(_PINCH_INDEX):
            pts[5 + j] = p

    out = []
    for x, y in pts:
        if chirality is Chirality.LEFT:
            x = 1.0 - x
        out.append(((x + offset[0]) * scale, (y + offset[1]) * scale, 0.0))
    return out


def hand_landmarks(*args, **kwargs) -> list[Landmark]:
    return [Landmark(x, y, z) for x, y, z in hand_points(*args, **kwargs)]


def hand_result(chirality: Chirality = Chirality.RIGHT, **kwargs) -> HandResult:
    return HandResult(landmarks=hand_landmarks(chirality, **kwargs), chirality=chirality)


def body_landmarks(
    left_wrist=(0.55, 0.50),
    right_wrist=(0.45, 0.50),
    wrist_visibility: float = 0.95,
    shoulder_shift: float = 0.0,
    nose=(0.50, 0.55),
) -> list[Landmark]:
    """
    Pose landmarks for someone facing the camera.

    Shoulders at x 0.6 (left) / 0.4 (right), y 0.4, which puts the padded
    shoulder rect at x (0.28, 0.72), y (0.27, 0.63).
    """
    pts = [Landmark(0.5, 0.5, 0.0, 0.9) for _ in range(NUM_POSE_LANDMARKS)]
    pts[0] = Landmark(nose[0], nose[1], 0.0, 0.99)
    pts[2] = Landmark(0.45, 0.50, 0.0, 0.99)
    pts[5] = Landmark(0.55, 0.50, 0.0, 0.99)
    pts[11] = Landmark(0.60 + shoulder_shift, 0.40, 0.0, 0.99)
    pts[12] = Landmark(0.40 + shoulder_shift, 0.40, 0.0, 0.99)
    pts[15] = Landmark(left_wrist[0], left_wrist[1], 0.0, wrist_visibility)
    pts[16] = Landmark(right_wrist[0], right_wrist[1], 0.0, wrist_visibility)
    return pts


OUT_OF_RECT = (0.50, 0.95)
