from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar

from .models.utils import Box


class HandGesture(str, Enum):
    NONE = "None"
    PINCH = "Pinch"  # Thumb and index tips together
    OPEN_PALM = "Open_Palm"
    FIST = "Fist"


class InteractionEvents(str, Enum):
    GRAB_START = "grab_start"
    GRAB_RELEASE = "grab_release"
    DELIVER = "deliver"
    DWELL_COMPLETE = "dwell_complete"
    ENTITY_SPAWNED = "entity_spawned"  # Initial population and replacement after a delivery
    GESTURE_HOLD = "gesture_hold"  # Hand pose kept long enough (e.g. fist to reset)
    TWO_HAND_PINCH = "two_hand_pinch"  # Both hands start pinching together (frame and capture)
    ROUND_OVER = "round_over"  # Time of a delivery round ran out


class ReleaseReason(str, Enum):
    DROPPED = "dropped"  # Pinch released outside any zone
    HAND_LOST = "hand_lost"  # Hand missing for longer than the grace period
    PAUSED = "paused"  # Engine paused while holding
    RESET = "reset"  # Scene rebuilt while holding


@dataclass(frozen=True)
class InteractionEvent:
    kind: ClassVar[InteractionEvents]

    def to_dict(self) -> dict[str, Any]:
        """Export the event as a dictionary, with its kind."""
        data = {
            key: value.value if isinstance(value, Enum) else value for key, value in asdict(self).items()
        }
        return {"event": self.kind.value, **data}


@dataclass(frozen=True)
class GrabStart(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.GRAB_START

    entity_id: int
    hand_id: int


@dataclass(frozen=True)
class GrabRelease(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.GRAB_RELEASE

    entity_id: int
    hand_id: int
    reason: ReleaseReason = ReleaseReason.DROPPED


@dataclass(frozen=True)
class Deliver(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.DELIVER

    entity_id: int
    zone_id: str
    success: bool


@dataclass(frozen=True)
class DwellComplete(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.DWELL_COMPLETE

    target_id: str


@dataclass(frozen=True)
class EntitySpawned(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.ENTITY_SPAWNED

    entity_id: int
    category: str
    fallback: bool = False  # Placed on the fallback ring instead of by sampling


@dataclass(frozen=True)
class GestureHold(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.GESTURE_HOLD

    hand_id: int
    gesture: HandGesture


@dataclass(frozen=True)
class TwoHandPinch(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.TWO_HAND_PINCH

    distance: float  # play-space distance between both pinch points
    angle: float  # radians, direction from hand slot 0 to hand slot 1
    frame: Box | None = None  # last box framed by both open hands, if any


@dataclass(frozen=True)
class RoundOver(InteractionEvent):
    kind: ClassVar[InteractionEvents] = InteractionEvents.ROUND_OVER

    score: int
    deliveries: int
