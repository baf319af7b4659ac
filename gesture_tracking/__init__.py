"""Hand and body landmark gesture tracking package."""

from .hand_gestures import (
    Chirality,
    WakeMode,
    TrackingConfig,
    load_config,
    Landmark,
    HandResult,
    HandSkeleton,
    PersistenceState,
    TrackedHand,
    HandPairTracker,
    FingerPoseDetector,
    GrabPoseDetector,
)

from .body_tracks import (
    PoseState,
    MovementState,
    TrackedBody,
    BodyPoseTracker,
    Person,
    MultiPersonArbiter,
)

from .hand_tracks import (
    LandmarkFrame,
    FrameEvent,
    GesturePipeline,
    PoseDutyCycle,
)

__all__ = [
    # Hands
    "Chirality",
    "WakeMode",
    "TrackingConfig",
    "load_config",
    "Landmark",
    "HandResult",
    "HandSkeleton",
    "PersistenceState",
    "TrackedHand",
    "HandPairTracker",
    "FingerPoseDetector",
    "GrabPoseDetector",
    # Bodies
    "PoseState",
    "MovementState",
    "TrackedBody",
    "BodyPoseTracker",
    "Person",
    "MultiPersonArbiter",
    # Pipeline
    "LandmarkFrame",
    "FrameEvent",
    "GesturePipeline",
    "PoseDutyCycle",
]
