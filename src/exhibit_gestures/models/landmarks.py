from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, NamedTuple, TypeAlias

from .utils import all_finite, midpoint

HAND_LANDMARKS_COUNT = 21
POSE_LANDMARKS_COUNT = 33
MAX_HANDS = 2


class HandLandmark(IntEnum):
    """MediaPipe hand landmark indices."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class PoseLandmark(IntEnum):
    """MediaPipe pose landmark indices used by the engine."""

    NOSE = 0
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_HIP = 23
    RIGHT_HIP = 24


class Point2(NamedTuple):
    x: float
    y: float


class Point3(NamedTuple):
    x: float
    y: float
    z: float = 0.0

    @property
    def xy(self) -> Point2:
        """Drop the depth."""
        return Point2(self.x, self.y)

    @classmethod
    def from_any(cls, value: Any) -> Point3:
        """Build a point from a sequence or from an object with x/y(/z) attributes."""
        if hasattr(value, "x") and hasattr(value, "y"):
            return cls(float(value.x), float(value.y), float(getattr(value, "z", 0.0) or 0.0))
        coords = tuple(float(v) for v in value)
        if len(coords) == 2:
            return cls(coords[0], coords[1])
        if len(coords) != 3:
            raise ValueError(f"Expected 2 or 3 coordinates, got {len(coords)}")
        return cls(*coords)


Landmarks: TypeAlias = tuple[Point3, ...]


@dataclass(frozen=True)
class HandFrame:
    """One detected hand for one tick. Never mutated by the engine."""

    hand_id: int
    landmarks: Landmarks

    @property
    def is_valid(self) -> bool:
        """A hand can be used if it has all its landmarks, all finite."""
        return len(self.landmarks) == HAND_LANDMARKS_COUNT and all(all_finite(lm) for lm in self.landmarks)

    @property
    def thumb_tip(self) -> Point3:
        return self.landmarks[HandLandmark.THUMB_TIP]

    @property
    def index_tip(self) -> Point3:
        return self.landmarks[HandLandmark.INDEX_FINGER_TIP]

    @property
    def pinch_point(self) -> Point3:
        """Midpoint between thumb and index tips."""
        return Point3(*midpoint(self.thumb_tip, self.index_tip))


@dataclass(frozen=True)
class LandmarkFrame:
    """Everything the detector reported for one tick."""

    hands: tuple[HandFrame, ...] = ()
    pose: Landmarks | None = None
    timestamp: float | None = None  # seconds, monotonic

    @classmethod
    def from_lists(
        cls,
        hands: Iterable[Sequence[Any]] = (),
        pose: Sequence[Any] | None = None,
        timestamp: float | None = None,
    ) -> LandmarkFrame:
        """Build a frame from plain coordinates, hand slots given by list position."""
        return cls(
            hands=tuple(
                HandFrame(hand_id=hand_id, landmarks=tuple(Point3.from_any(lm) for lm in landmarks))
                for hand_id, landmarks in enumerate(hands)
            ),
            pose=None if pose is None else tuple(Point3.from_any(lm) for lm in pose),
            timestamp=timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the frame as a dictionary."""
        return {
            "hands": [
                {"hand_id": hand.hand_id, "landmarks": [list(lm) for lm in hand.landmarks]} for hand in self.hands
            ],
            "pose": None if self.pose is None else [list(lm) for lm in self.pose],
            "timestamp": self.timestamp,
        }
