"""Active person arbitration across up to two tracked people."""

import logging
import weakref
from dataclasses import dataclass, field
from typing import Sequence

from ..hand_gestures.config import ArbiterConfig, WakeMode
from ..hand_gestures.features import HandResult
from ..hand_gestures.gestures import GrabState
from ..hand_gestures.persistence import HandPairTracker
from .body_tracker import BodyPoseTracker, MovementState, NO_HAND, PoseState

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Person:
    """A fixed pairing of one body tracker with one hand pair tracker."""
    name: str
    body: BodyPoseTracker
    hands: HandPairTracker
    hand_results: list[HandResult] = field(default_factory=list)

    @property
    def in_rect_chirality(self) -> str:
        return self.body.body.hand_in_rect_chirality

    @property
    def present(self) -> bool:
        return self.in_rect_chirality != NO_HAND


@dataclass
class WakeCandidate:
    person_name: str
    since: float


@dataclass
class ArbiterResult:
    active_person: Person | None = None
    no_active_person: bool = False
    candidate: WakeCandidate | None = None


def attempting_wake(person: Person, mode: WakeMode) -> bool:
    """Whether `person` is currently performing the configured wake gesture."""
    body = person.body.body
    if mode is WakeMode.TWO_HANDS_IN:
        return body.hands_in_rect == 2 and body.movement_state is MovementState.STATIC
    if mode is WakeMode.FIST:
        detector = person.hands.grab_detector
        if detector is None:
            return False
        return body.hands_in_rect == 1 and detector.state is GrabState.GRABBING
    # No wake gesture, any hand in the zone counts
    return True


class MultiPersonArbiter:
    """
    Decides which single person drives input.

    A person becomes awake by holding the wake gesture for `wake_hold_s`.
    The awake person stays active while they keep a hand in their shoulder
    zone; after `inactive_timeout_s` without one they are dropped, and that
    tick's result carries `no_active_person`.
    """

    def __init__(self, config: ArbiterConfig | None = None):
        self.config = config or ArbiterConfig()
        self._awake_ref: weakref.ref | None = None
        self.awake_candidate: WakeCandidate | None = None
        self.inactive_time = 0.0
        self.last_tick: float | None = None

    @property
    def awake_person(self) -> Person | None:
        return self._awake_ref() if self._awake_ref is not None else None

    @awake_person.setter
    def awake_person(self, person: Person | None) -> None:
        self._awake_ref = weakref.ref(person) if person is not None else None

    def _tick(self, now: float) -> float:
        dt = 0.0 if self.last_tick is None else max(0.0, now - self.last_tick)
        self.last_tick = now
        return dt

    def update(
        self,
        people: Sequence[Person],
        hand_pairs: Sequence[Sequence[HandResult]],
        fresh_hands: bool,
        now: float,
    ) -> ArbiterResult:
        dt = self._tick(now)
        awake = self.awake_person
        awake_present = awake is not None and awake.present
        cleared = False

        if self.config.remove_after_timeout and awake is not None:
            if awake_present:
                self.inactive_time = 0.0
            else:
                self.inactive_time += dt
                if self.inactive_time > self.config.inactive_timeout_s:
                    logger.info(f"Hands inactive for {self.inactive_time:.1f}s, clearing active person {awake.name}")
                    self.awake_person = None
                    self.inactive_time = 0.0
                    cleared = True

        confirmed = None
        for person, results in zip(people, hand_pairs):
            person.hand_results = list(results)
            person.hands.update(person.hand_results, person.in_rect_chirality, fresh_hands, now)

            attempting = (
                person.body.body.pose_state is PoseState.IN_SHOULDER_RECT
                and attempting_wake(person, self.config.wake_mode)
            )
            candidate = self.awake_candidate
            if attempting:
                if candidate is None or candidate.person_name != person.name:
                    self.awake_candidate = WakeCandidate(person.name, now)
                    logger.debug(f"{person.name}: wake candidate")
                elif now - candidate.since >= self.config.wake_hold_s and not cleared:
                    confirmed = person
            elif candidate is not None and candidate.person_name == person.name:
                self.awake_candidate = None

        if cleared:
            return ArbiterResult(None, True, self.awake_candidate)

        if awake_present:
            active = awake
        elif confirmed is not None:
            active = confirmed
            if confirmed is not awake:
                logger.info(f"{confirmed.name}: now the active person")
            self.awake_person = confirmed
            self.inactive_time = 0.0
        else:
            active = None
        return ArbiterResult(active, False, self.awake_candidate)
