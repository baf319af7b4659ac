"""Hand-to-body association and the per-frame tracking pipeline.

The MediaPipe adapter lives in `hand_tracks.landmark_source` and is not
imported here, so the pipeline works without the camera extras installed.
"""

from .association import associate_hands_with_people
from .pipeline import (
    LandmarkFrame,
    FrameEvent,
    GesturePipeline,
    PoseDutyCycle,
    IndicatorState,
    people_indicator,
)

__all__ = [
    "associate_hands_with_people",
    "LandmarkFrame",
    "FrameEvent",
    "GesturePipeline",
    "PoseDutyCycle",
    "IndicatorState",
    "people_indicator",
]
