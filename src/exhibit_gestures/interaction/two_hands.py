"""Gestures made with both hands at once.

Both hands open, thumbs and index fingers spread, frame a box; pinching both
hands then captures it. While both hands pinch, their span (distance and
angle) can drive a scale or a rotation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from math import atan2, inf
from typing import NamedTuple

from ..config import TwoHandsConfig
from ..events import TwoHandPinch
from ..mapping import CoordinateMapper
from ..models.landmarks import HandFrame, Point3
from ..models.utils import Box, midpoint, planar_distance

logger = logging.getLogger(__name__)


class TwoHandSpan(NamedTuple):
    distance: float
    angle: float  # radians, from the first hand to the second
    center: Point3


def hands_span(first: Point3, second: Point3) -> TwoHandSpan:
    return TwoHandSpan(
        distance=planar_distance(first, second),
        angle=atan2(second.y - first.y, second.x - first.x),
        center=Point3(*midpoint(first, second)),
    )


class TwoHandPinchTracker:
    """Frame-and-capture with both hands, on the two first hand slots.

    A capture fires on the tick both hands are pinching after at least one of
    them was not, and not again before `debounce_seconds`. The frame it carries
    is the last box framed while both hands were in view; it is consumed by the
    capture and forgotten when a hand leaves.
    """

    def __init__(self, mapper: CoordinateMapper, config: TwoHandsConfig | None = None) -> None:
        self.mapper = mapper
        self.config = config or TwoHandsConfig()
        self.frame: Box | None = None
        self.was_pinching = False
        self.last_capture = -inf
        self.span: TwoHandSpan | None = None  # set while both hands pinch

    def framing_box(self, first: HandFrame, second: HandFrame) -> Box | None:
        """Play-space box around both thumb and index tips, if both hands are spread."""
        threshold = self.config.frame_threshold
        if any(planar_distance(hand.thumb_tip, hand.index_tip) <= threshold for hand in (first, second)):
            return None
        tips = [self.mapper.to_play_space(tip) for hand in (first, second) for tip in (hand.thumb_tip, hand.index_tip)]
        xs = [tip.x for tip in tips]
        ys = [tip.y for tip in tips]
        return Box(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))

    def update(self, hands: Mapping[int, HandFrame], pinching: Mapping[int, bool], now: float) -> TwoHandPinch | None:
        """Run one tick with the visible hands and their pinch state, by slot."""
        first, second = hands.get(0), hands.get(1)
        if first is None or second is None:
            self.reset()
            return None

        if (box := self.framing_box(first, second)) is not None:
            self.frame = box

        both_pinching = pinching.get(0, False) and pinching.get(1, False)
        rising_edge = both_pinching and not self.was_pinching
        self.was_pinching = both_pinching

        if not both_pinching:
            self.span = None
            return None

        self.span = hands_span(self.mapper.pinch_point(first), self.mapper.pinch_point(second))
        if not rising_edge:
            return None
        if now - self.last_capture < self.config.debounce_seconds:
            logger.debug("Two-hand pinch ignored, last capture %.3fs ago", now - self.last_capture)
            return None

        self.last_capture = now
        frame, self.frame = self.frame, None
        logger.debug("Two-hand pinch (distance=%.3f, frame=%s)", self.span.distance, frame)
        return TwoHandPinch(distance=self.span.distance, angle=self.span.angle, frame=frame)

    def reset(self) -> None:
        """Forget the frame and the pinch edge, the debounce is kept."""
        self.frame = None
        self.was_pinching = False
        self.span = None
