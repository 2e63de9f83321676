from __future__ import annotations

import logging
from dataclasses import dataclass
from math import inf

from ..config import PinchConfig
from ..models.landmarks import HandFrame, Point3
from ..models.utils import planar_distance

logger = logging.getLogger(__name__)


@dataclass
class PinchState:
    """Pinch tracking of one hand slot, kept from tick to tick."""

    raw_distance: float = inf
    is_pinching: bool = False
    last_transition_timestamp: float = -inf  # last time the tips were seen under the enter threshold

    def reset(self) -> None:
        self.raw_distance = inf
        self.is_pinching = False
        self.last_transition_timestamp = -inf


class PinchGestureDetector:
    """Thumb/index pinch with hysteresis and a minimum hold time.

    Tracking noise near a single threshold makes the pinch flicker, so a pinch
    starts under `enter_threshold`, only ends over `exit_threshold`, and not
    before `grace_period` seconds have passed since the tips were last close.
    Between both thresholds the state does not change.
    """

    def __init__(self, config: PinchConfig | None = None) -> None:
        self.config = config or PinchConfig()

    def update(self, state: PinchState, thumb_tip: Point3, index_tip: Point3, now: float) -> bool:
        """Update `state` with this tick's tips positions and return whether the hand is pinching."""
        config = self.config
        distance = planar_distance(thumb_tip, index_tip)
        state.raw_distance = distance

        if distance < config.enter_threshold:
            if not state.is_pinching:
                logger.debug("Pinch started (distance=%.3f)", distance)
            state.is_pinching = True
            state.last_transition_timestamp = now
        elif distance > config.exit_threshold and now - state.last_transition_timestamp > config.grace_period:
            if state.is_pinching:
                logger.debug("Pinch ended (distance=%.3f)", distance)
            state.is_pinching = False

        return state.is_pinching

    def update_hand(self, state: PinchState, hand: HandFrame, now: float) -> bool:
        """Same as `update`, reading the tips from a hand frame."""
        return self.update(state, hand.thumb_tip, hand.index_tip, now)
