"""Hand geometry, pose classification and per-hand persistence."""

from .config import (
    Chirality,
    WakeMode,
    HAND_SLOTS,
    HandConfig,
    BodyConfig,
    ArbiterConfig,
    TrackingConfig,
    load_config,
)
from .features import (
    LM,
    Finger,
    Joint,
    Landmark,
    HandResult,
    HandSkeleton,
    stable_anchor,
    hand_scale,
    palm_forward,
    extended_finger_mask,
    pinch_distance,
    head_yaw,
)
from .gestures import (
    FingerPoseState,
    GrabState,
    HoldToConfirmDetector,
    FingerPoseDetector,
    GrabPoseDetector,
    extended_finger_count,
    is_pinching,
    is_pointing,
)
from .persistence import (
    PersistenceState,
    PinchPositionCache,
    TrackedHand,
    HandPairTracker,
    assign_pinch_ids,
    raw_state,
)

__all__ = [
    "Chirality",
    "WakeMode",
    "HAND_SLOTS",
    "HandConfig",
    "BodyConfig",
    "ArbiterConfig",
    "TrackingConfig",
    "load_config",
    "LM",
    "Finger",
    "Joint",
    "Landmark",
    "HandResult",
    "HandSkeleton",
    "stable_anchor",
    "hand_scale",
    "palm_forward",
    "extended_finger_mask",
    "pinch_distance",
    "head_yaw",
    "FingerPoseState",
    "GrabState",
    "HoldToConfirmDetector",
    "FingerPoseDetector",
    "GrabPoseDetector",
    "extended_finger_count",
    "is_pinching",
    "is_pointing",
    "PersistenceState",
    "PinchPositionCache",
    "TrackedHand",
    "HandPairTracker",
    "assign_pinch_ids",
    "raw_state",
]
