"""Per-hand persistence state, pinch position filtering and pinch identity."""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

import numpy as np

from .config import Chirality, HAND_SLOTS, HandConfig, MISSING_HAND_TIMEOUT_S, PINCH_CACHE_LENGTH, PINCH_SMOOTHING
from .features import HandResult, HandSkeleton, extended_finger_mask
from .gestures import (
    FingerPoseDetector, FingerPoseState, GrabPoseDetector, GrabState,
    is_pinching, is_pointing,
)
from .math_utils import ORIGIN3, Point3, deadzone3

logger = logging.getLogger(__name__)


class PersistenceState(Enum):
    MISSING = 0
    VISIBLE = 1
    POINTING = 2
    PINCHING = 3
    RESET = 4


def raw_state(skeleton: HandSkeleton | None, pinch_threshold: float | None = None) -> PersistenceState:
    """Single-frame classification; pointing wins over pinching."""
    if skeleton is None:
        return PersistenceState.MISSING
    if is_pointing(skeleton, extended_finger_mask(skeleton)):
        return PersistenceState.POINTING
    pinching = is_pinching(skeleton) if pinch_threshold is None else is_pinching(skeleton, pinch_threshold)
    if pinching:
        return PersistenceState.PINCHING
    return PersistenceState.VISIBLE


# =============================================================================
# PINCH POSITION FILTERING
# =============================================================================

class PinchPositionCache:
    """
    Bounded FIFO of (timestamp, position) pinch samples.

    Fresh samples are exponentially smoothed against the newest entry before
    being cached. When the tracker recycles stale results the position is
    extrapolated from the cached velocity instead.
    """

    def __init__(self, capacity: int = PINCH_CACHE_LENGTH, smoothing: float = PINCH_SMOOTHING):
        self.capacity = capacity
        self.smoothing = smoothing
        self._entries: deque[tuple[float, Point3]] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def full(self) -> bool:
        return len(self._entries) == self.capacity

    @property
    def newest(self) -> Point3 | None:
        return self._entries[-1][1] if self._entries else None

    def entries(self) -> list[tuple[float, Point3]]:
        return list(self._entries)

    def push(self, position: Point3, timestamp: float) -> Point3:
        self._entries.append((timestamp, position))
        return position

    def smooth(self, raw: Point3) -> Point3:
        last = self.newest
        if last is None:
            return raw
        t = 1.0 - self.smoothing
        return (
            last[0] + (raw[0] - last[0]) * t,
            last[1] + (raw[1] - last[1]) * t,
            last[2] + (raw[2] - last[2]) * t,
        )

    def extrapolate(self, now: float) -> Point3:
        """Project the newest sample forward, never further than the cache spans."""
        t_old, oldest = self._entries[0]
        t_new, newest = self._entries[-1]
        if not self.full:
            return newest

        span = t_new - t_old
        with np.errstate(divide="ignore", invalid="ignore"):
            velocity = (np.array(newest) - np.array(oldest)) / span
            result = np.array(newest) + velocity * min(now - t_new, span)
        if not np.all(np.isfinite(result)):
            return newest
        return (float(result[0]), float(result[1]), float(result[2]))

    def filter(self, raw: Point3, fresh: bool, now: float) -> Point3:
        if fresh:
            return self.push(self.smooth(raw), now)
        if self._entries:
            return self.extrapolate(now)
        return raw


# =============================================================================
# TRACKED HAND
# =============================================================================

@dataclass(eq=False)
class TrackedHand:
    """Persistent view of one hand slot (Left or Right)."""
    chirality: Chirality
    skeleton: HandSkeleton | None = None
    state: PersistenceState = PersistenceState.MISSING
    pinch_age: int = 0
    pinch_id: int = -1
    gesture_state: FingerPoseState = FingerPoseState.NONE
    gesture_progress: float = 0.0
    grab_state: GrabState = GrabState.NONE
    grab_progress: float = 0.0
    pinch_cache: PinchPositionCache = field(default_factory=PinchPositionCache)
    pinch_position: Point3 = ORIGIN3
    last_seen: float = 0.0
    missing_timeout_s: float = MISSING_HAND_TIMEOUT_S

    @property
    def visible(self) -> bool:
        return self.state is not PersistenceState.MISSING

    @property
    def pinching(self) -> bool:
        return self.state is PersistenceState.PINCHING

    @property
    def pointing(self) -> bool:
        return self.state is PersistenceState.POINTING

    def raw_pinch_position(self) -> Point3:
        if self.skeleton is None:
            return self.pinch_position
        return self.skeleton.anchor_position

    def evaluate_persistent_state(
        self, new_state: PersistenceState, previous: PersistenceState, now: float
    ) -> PersistenceState:
        """
        Debounce a single-frame classification against the previous state.

        A missing hand holds its previous state until `missing_timeout_s` has
        passed since it was last seen, then goes through RESET to MISSING.
        """
        state = new_state
        if new_state is PersistenceState.MISSING:
            if previous is PersistenceState.MISSING:
                state = PersistenceState.MISSING
            elif now - self.last_seen > self.missing_timeout_s:
                state = PersistenceState.RESET
            else:
                state = previous
        else:
            self.last_seen = now

        if previous is PersistenceState.MISSING:
            self.pinch_age = 0
        elif previous is PersistenceState.VISIBLE:
            if state is PersistenceState.PINCHING:
                self.pinch_age = 0
        elif previous is PersistenceState.PINCHING:
            if state is not PersistenceState.VISIBLE:
                self.pinch_age += 1
        elif previous is PersistenceState.RESET:
            state = PersistenceState.MISSING
            self.pinch_age = 0

        return state


def assign_pinch_ids(hands: Sequence[TrackedHand]) -> tuple[int, int]:
    """
    Pinch identity for the (Left, Right) pair.

    A lone pinching hand gets 0. With both pinching, the longer-held pinch
    keeps 0 and Left wins ties. Non-pinching hands get -1.
    """
    left, right = hands[0], hands[1]
    if left.pinching and right.pinching:
        if left.pinch_age >= right.pinch_age:
            return 0, 1
        return 1, 0
    return (0 if left.pinching else -1), (0 if right.pinching else -1)


# =============================================================================
# HAND PAIR
# =============================================================================

class HandPairTracker:
    """
    Tracks the Left and Right hand of one person across frames.

    Holds the per-person aggregate user state that decides when pinch ids
    are (re)assigned, and the optional finger-pose and grab detectors which
    only run on the person's active hand.
    """

    def __init__(self, config: HandConfig | None = None, wake_with_fist: bool = False, label: str = ""):
        self.config = config or HandConfig()
        self.label = label
        self.check_finger_poses = self.config.check_finger_poses
        self.wake_with_fist = wake_with_fist
        self.pose_detector = (
            FingerPoseDetector(self.config.hold_threshold_s, label=label) if self.check_finger_poses else None
        )
        self.grab_detector = (
            GrabPoseDetector(self.config.hold_threshold_s, label=label) if wake_with_fist else None
        )
        self.hands: list[TrackedHand] = [self._empty_hand(c) for c in HAND_SLOTS]
        self.user_state = PersistenceState.MISSING
        self.last_update: float | None = None

    def _empty_hand(self, chirality: Chirality) -> TrackedHand:
        return TrackedHand(
            chirality=chirality,
            pinch_cache=PinchPositionCache(self.config.pinch_cache_length, self.config.pinch_smoothing),
            missing_timeout_s=self.config.missing_timeout_s,
        )

    def hand(self, chirality: Chirality) -> TrackedHand:
        return self.hands[HAND_SLOTS.index(chirality)]

    @property
    def pinch_positions(self) -> list[Point3]:
        return [h.pinch_position for h in self.hands]

    def update(
        self,
        hand_results: Sequence[HandResult],
        active_chirality: str | Chirality | None,
        fresh: bool,
        now: float,
    ) -> list[TrackedHand]:
        delta = 0.0 if self.last_update is None else max(0.0, now - self.last_update)
        self.last_update = now

        active = _chirality_value(active_chirality)
        active_present = False
        for slot, chirality in enumerate(HAND_SLOTS):
            previous = self.hands[slot]
            before = previous.state
            result = _find_hand(chirality, hand_results)
            if result is not None:
                active_present = active_present or chirality.value == active
                hand = self._update_present(previous, result, active_chirality, fresh, now, delta)
            else:
                hand = self._update_missing(previous, now)
            self._log_transition(before, hand)
            self.hands[slot] = hand

        if not active_present:
            self._reset_detectors()
        self._update_user_state()
        return self.hands

    def _update_present(self, previous, result, active_chirality, fresh, now, delta) -> TrackedHand:
        skeleton = HandSkeleton.from_landmarks(result.landmarks, result.chirality)
        hand = TrackedHand(
            chirality=result.chirality,
            skeleton=skeleton,
            pinch_age=previous.pinch_age,
            pinch_cache=previous.pinch_cache,
            last_seen=previous.last_seen,
            missing_timeout_s=previous.missing_timeout_s,
        )
        hand.state = hand.evaluate_persistent_state(
            raw_state(skeleton, self.config.pinch_threshold), previous.state, now
        )
        if previous.pinch_id != -1:
            hand.pinch_id = previous.pinch_id

        if _chirality_value(active_chirality) == hand.chirality.value:
            if self.pose_detector is not None:
                self.pose_detector.update(delta, skeleton)
                hand.gesture_state = self.pose_detector.state
                hand.gesture_progress = self.pose_detector.progress
            if self.grab_detector is not None:
                self.grab_detector.update(delta, skeleton)
                hand.grab_state = self.grab_detector.state
                hand.grab_progress = self.grab_detector.progress

        filtered = hand.pinch_cache.filter(hand.raw_pinch_position(), fresh, now)
        hand.pinch_position = deadzone3(previous.pinch_position, filtered, self.config.pinch_deadzone)
        return hand

    def _update_missing(self, hand: TrackedHand, now: float) -> TrackedHand:
        hand.state = hand.evaluate_persistent_state(PersistenceState.MISSING, hand.state, now)
        if hand.state is PersistenceState.MISSING:
            hand.skeleton = None
            hand.pinch_id = -1
            hand.pinch_cache = PinchPositionCache(self.config.pinch_cache_length, self.config.pinch_smoothing)
            hand.pinch_position = ORIGIN3
            return hand
        hand.pinch_position = hand.pinch_cache.filter(hand.pinch_position, False, now)
        return hand

    def _reset_detectors(self) -> None:
        """Drop any held pose while the active hand is out of view."""
        for detector in (self.pose_detector, self.grab_detector):
            if detector is not None:
                detector.reset()
                detector.last_extended_count = 0
        for hand in self.hands:
            hand.gesture_state = FingerPoseState.NONE
            hand.gesture_progress = 0.0
            hand.grab_state = GrabState.NONE
            hand.grab_progress = 0.0

    def _log_transition(self, before: PersistenceState, hand: TrackedHand) -> None:
        if before is hand.state:
            return
        name = f"{self.label} {hand.chirality.value}".strip()
        if hand.state is PersistenceState.PINCHING:
            logger.info(f"{name}: Pinch START")
        elif before is PersistenceState.PINCHING:
            logger.info(f"{name}: Pinch RELEASED")
        elif hand.state is PersistenceState.RESET:
            logger.info(f"{name}: hand lost")
        else:
            logger.debug(f"{name}: {before.name} -> {hand.state.name}")

    # ---------------------------------------------------------------------
    # User state
    # ---------------------------------------------------------------------

    def any_visible(self) -> bool:
        return any(h.visible for h in self.hands)

    def any_pinching(self) -> bool:
        return any(h.pinching for h in self.hands)

    def any_pointing(self) -> bool:
        return any(h.pointing for h in self.hands)

    def _apply_pinch_ids(self) -> bool:
        ids = assign_pinch_ids(self.hands)
        changed = any(h.pinch_id != i for h, i in zip(self.hands, ids))
        for h, i in zip(self.hands, ids):
            h.pinch_id = i
        return changed

    def _update_user_state(self) -> None:
        if not self.any_visible():
            self.user_state = PersistenceState.MISSING

        state = self.user_state
        if state is PersistenceState.MISSING:
            if self.any_visible():
                self.user_state = PersistenceState.VISIBLE
        elif state is PersistenceState.VISIBLE:
            if self.any_pinching():
                self.user_state = PersistenceState.PINCHING
                self._apply_pinch_ids()
            elif self.any_pointing():
                self.user_state = PersistenceState.POINTING
        elif state is PersistenceState.POINTING:
            if not self.any_pointing():
                self.user_state = PersistenceState.VISIBLE
        elif state is PersistenceState.PINCHING:
            changed = self._apply_pinch_ids()
            if changed or not self.any_pinching():
                self.user_state = PersistenceState.VISIBLE
        elif state is PersistenceState.RESET:
            self.user_state = PersistenceState.MISSING

        # Ids only mean something while pinching
        for h in self.hands:
            if not h.pinching:
                h.pinch_id = -1


def _chirality_value(chirality) -> str | None:
    if isinstance(chirality, Chirality):
        return chirality.value
    return chirality


def _find_hand(chirality: Chirality, hand_results: Sequence[HandResult]) -> HandResult | None:
    for result in hand_results or ():
        if result.chirality is chirality:
            return result
    return None
