"""Open palm and fist recognition, and timed holding of a hand pose."""

from __future__ import annotations

from ..config import HandPoseConfig
from ..events import GestureHold, HandGesture
from ..models.landmarks import HandFrame, HandLandmark
from ..models.utils import planar_distance

# (tip, base) pairs compared to the wrist to decide if a finger is extended
EXTENSION_PAIRS: tuple[tuple[HandLandmark, HandLandmark], ...] = (
    (HandLandmark.THUMB_TIP, HandLandmark.THUMB_MCP),
    (HandLandmark.INDEX_FINGER_TIP, HandLandmark.INDEX_FINGER_PIP),
    (HandLandmark.MIDDLE_FINGER_TIP, HandLandmark.MIDDLE_FINGER_PIP),
    (HandLandmark.RING_FINGER_TIP, HandLandmark.RING_FINGER_PIP),
    (HandLandmark.PINKY_TIP, HandLandmark.PINKY_PIP),
)

# (tip, knuckle) pairs compared to the wrist to decide if a finger is curled, thumb excluded
CURL_PAIRS: tuple[tuple[HandLandmark, HandLandmark], ...] = (
    (HandLandmark.INDEX_FINGER_TIP, HandLandmark.INDEX_FINGER_MCP),
    (HandLandmark.MIDDLE_FINGER_TIP, HandLandmark.MIDDLE_FINGER_MCP),
    (HandLandmark.RING_FINGER_TIP, HandLandmark.RING_FINGER_MCP),
    (HandLandmark.PINKY_TIP, HandLandmark.PINKY_MCP),
)


def count_extended_fingers(hand: HandFrame, ratio: float) -> int:
    wrist = hand.landmarks[HandLandmark.WRIST]
    return sum(
        1
        for tip, base in EXTENSION_PAIRS
        if planar_distance(hand.landmarks[tip], wrist) > planar_distance(hand.landmarks[base], wrist) * ratio
    )


def count_curled_fingers(hand: HandFrame, ratio: float) -> int:
    wrist = hand.landmarks[HandLandmark.WRIST]
    return sum(
        1
        for tip, knuckle in CURL_PAIRS
        if planar_distance(hand.landmarks[tip], wrist) < planar_distance(hand.landmarks[knuckle], wrist) * ratio
    )


def classify_hand_pose(hand: HandFrame, config: HandPoseConfig | None = None) -> HandGesture:
    """Tell whether the hand shows an open palm, a fist, or nothing we know.

    Pinch is not decided here: it needs the hysteresis of the pinch detector.
    """
    config = config or HandPoseConfig()
    if count_extended_fingers(hand, config.open_palm_ratio) >= config.open_palm_min_fingers:
        return HandGesture.OPEN_PALM
    if count_curled_fingers(hand, config.fist_ratio) >= config.fist_min_fingers:
        return HandGesture.FIST
    return HandGesture.NONE


class GestureHoldTrigger:
    """Fires once when a hand keeps the configured gesture for long enough.

    Re-arms only after the gesture ends, so holding a fist does not repeat.
    """

    def __init__(self, hand_id: int, config: HandPoseConfig | None = None) -> None:
        self.hand_id = hand_id
        self.config = config or HandPoseConfig()
        self.hold_start: float | None = None
        self.fired = False

    def progress(self, now: float) -> float:
        """Share of the hold duration already done, for a progress ring."""
        if self.hold_start is None:
            return 0.0
        return min((now - self.hold_start) / self.config.hold_seconds, 1.0)

    def update(self, gesture: HandGesture | None, now: float) -> GestureHold | None:
        if gesture != self.config.hold_gesture:
            self.reset()
            return None

        if self.hold_start is None:
            self.hold_start = now

        if not self.fired and now - self.hold_start >= self.config.hold_seconds:
            self.fired = True
            return GestureHold(hand_id=self.hand_id, gesture=gesture)
        return None

    def reset(self) -> None:
        self.hold_start = None
        self.fired = False
