"""Body pose tracking and active person arbitration."""

from .body_tracker import (
    PoseState,
    MovementState,
    ShoulderRects,
    TrackedBody,
    BodyPoseTracker,
    pinches_in_screen_space,
    client_xy,
)
from .arbiter import Person, WakeCandidate, ArbiterResult, MultiPersonArbiter, attempting_wake

__all__ = [
    "PoseState",
    "MovementState",
    "ShoulderRects",
    "TrackedBody",
    "BodyPoseTracker",
    "pinches_in_screen_space",
    "client_xy",
    "Person",
    "WakeCandidate",
    "ArbiterResult",
    "MultiPersonArbiter",
    "attempting_wake",
]
