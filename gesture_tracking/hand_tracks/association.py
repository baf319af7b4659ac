"""Assign detected hands to tracked bodies by wrist proximity."""

import logging
from typing import Sequence

from ..hand_gestures.config import HAND_BODY_MAX_DX
from ..hand_gestures.features import LM, HandResult, Landmark

logger = logging.getLogger(__name__)

BODY_LEFT_WRIST = 15
BODY_RIGHT_WRIST = 16


def wrist_distance(hand: HandResult, body_landmarks: Sequence[Landmark]) -> float:
    """Horizontal distance from the hand's wrist to the nearer body wrist."""
    x = hand.landmarks[LM.WRIST].x
    return min(
        abs(body_landmarks[BODY_LEFT_WRIST].x - x),
        abs(body_landmarks[BODY_RIGHT_WRIST].x - x),
    )


def associate_hands_with_people(
    hand_results: Sequence[HandResult],
    bodies: Sequence[Sequence[Landmark] | None],
    max_dx: float = HAND_BODY_MAX_DX,
) -> list[list[HandResult]]:
    """
    Group hands by body, one list per body in `bodies` order.

    Bodies must already be updated for this frame. A body keeps at most one
    hand per chirality; when two compete, the closer wrist wins.
    """
    associated: list[list[HandResult]] = []
    for body_ix, body_landmarks in enumerate(bodies):
        if not body_landmarks or len(body_landmarks) <= BODY_RIGHT_WRIST:
            associated.append([])
            continue

        chosen: dict = {}
        for hand in hand_results or ():
            distance = wrist_distance(hand, body_landmarks)
            if distance >= max_dx:
                continue
            current = chosen.get(hand.chirality)
            if current is not None:
                logger.warning(
                    f"More than one {hand.chirality.value} hand for body {body_ix}, keeping the closest"
                )
                if distance >= current[0]:
                    continue
            chosen[hand.chirality] = (distance, hand)

        associated.append([hand for _, hand in chosen.values()])
    return associated
