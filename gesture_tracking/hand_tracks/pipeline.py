"""Per-frame driving loop: bodies, hand association, hand pairs, arbitration."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from ..body_tracks.arbiter import ArbiterResult, MultiPersonArbiter, Person
from ..body_tracks.body_tracker import BodyPoseTracker, PoseState, pinches_in_screen_space
from ..hand_gestures.config import TrackingConfig
from ..hand_gestures.features import HandResult, Landmark
from ..hand_gestures.math_utils import Point3
from ..hand_gestures.persistence import HandPairTracker
from .association import associate_hands_with_people

logger = logging.getLogger(__name__)


@dataclass
class LandmarkFrame:
    """One tick of landmark provider output."""
    hands: list[HandResult] = field(default_factory=list)
    bodies: list[Sequence[Landmark] | None] = field(default_factory=list)
    fresh_hands: bool = False
    # Informational; bodies are re-tracked from cached landmarks every tick
    fresh_bodies: bool = False
    timestamp: float = 0.0


class IndicatorState(Enum):
    ACTIVE = "ACTIVE"
    VISIBLE = "VISIBLE"
    INACTIVE = "INACTIVE"


def people_indicator(active: Person | None, people: Sequence[Person]) -> list[IndicatorState]:
    """Presence icon state for each person."""
    states = []
    for person in people:
        if active is not None and active.name == person.name:
            states.append(IndicatorState.ACTIVE)
        elif person.body.body.pose_state is not PoseState.MISSING:
            states.append(IndicatorState.VISIBLE)
        else:
            states.append(IndicatorState.INACTIVE)
    return states


@dataclass
class FrameEvent:
    """Everything the pipeline knows after one tick."""
    people: list[Person]
    active_person: Person | None
    no_active_person: bool
    timestamp: float
    screen_size: tuple[float, float] = (0.0, 0.0)
    arbiter: ArbiterResult | None = None

    @property
    def indicators(self) -> list[IndicatorState]:
        return people_indicator(self.active_person, self.people)

    def screen_pinches(self, person: Person) -> list[Point3]:
        """The person's Left/Right pinch positions in centred screen space."""
        w, h = self.screen_size
        return pinches_in_screen_space(person.hands.pinch_positions, person.body.body, w, h)


class PoseDutyCycle:
    """
    Alternates body and hand detection over a repeating frame cycle.

    The body detector runs on the first `pose_duty` frames of every
    `cycle_length`, the hand detector on the rest.
    """

    def __init__(self, cycle_length: int = 3, pose_duty: int = 1):
        self.cycle_length = cycle_length
        self.pose_duty = pose_duty
        self.counter = 0

    def next(self) -> bool:
        """Advance one frame; True means run the body detector this frame."""
        body_frame = self.counter < self.pose_duty
        self.counter = (self.counter + 1) % self.cycle_length
        return body_frame


class GesturePipeline:
    """
    Explicit tracking context, built once and driven by `process` each tick.

    Bodies are updated before hands are associated with them, since
    association reads this frame's body wrists.
    """

    def __init__(self, config: TrackingConfig | None = None):
        self.config = config or TrackingConfig()
        cfg = self.config
        self.people = [
            Person(
                name=name,
                body=BodyPoseTracker(cfg.body, label=name),
                hands=HandPairTracker(cfg.hands, wake_with_fist=cfg.wake_with_fist, label=name),
            )
            for name in cfg.arbiter.person_names
        ]
        self.arbiter = MultiPersonArbiter(cfg.arbiter)
        self.duty_cycle = PoseDutyCycle(cfg.pose_cycle_length, cfg.pose_duty_time)

    def process(self, frame: LandmarkFrame, screen_size: tuple[float, float], now: float) -> FrameEvent:
        width, height = screen_size

        for ix, person in enumerate(self.people):
            landmarks = frame.bodies[ix] if ix < len(frame.bodies) else None
            person.body.update(landmarks, width, height)

        hand_pairs = associate_hands_with_people(
            frame.hands,
            [person.body.body.landmarks for person in self.people],
            self.config.arbiter.hand_body_max_dx,
        )
        result = self.arbiter.update(self.people, hand_pairs, frame.fresh_hands, now)

        return FrameEvent(
            people=self.people,
            active_person=result.active_person,
            no_active_person=result.no_active_person,
            timestamp=now,
            screen_size=(width, height),
            arbiter=result,
        )
