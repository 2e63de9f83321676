"""Gesture-interaction engine for camera-driven exhibits: pinch grabbing, delivery zones and dwell selection."""

from .config import Config
from .events import (
    Deliver,
    DwellComplete,
    EntitySpawned,
    GestureHold,
    GrabRelease,
    GrabStart,
    HandGesture,
    InteractionEvent,
    InteractionEvents,
    ReleaseReason,
    RoundOver,
    TwoHandPinch,
)
from .interaction import InteractionEngine, TickResult, step
from .mapping import CoordinateMapper
from .models import (
    DeliveryZone,
    DwellTarget,
    GrabbableEntity,
    HandFrame,
    LandmarkFrame,
    Point2,
    Point3,
    SizeClass,
)

__all__ = [
    # Core classes
    "InteractionEngine",
    "TickResult",
    "step",
    "CoordinateMapper",
    # Models
    "DeliveryZone",
    "DwellTarget",
    "GrabbableEntity",
    "HandFrame",
    "LandmarkFrame",
    "Point2",
    "Point3",
    "SizeClass",
    # Events
    "InteractionEvent",
    "InteractionEvents",
    "GrabStart",
    "GrabRelease",
    "Deliver",
    "DwellComplete",
    "EntitySpawned",
    "GestureHold",
    "HandGesture",
    "ReleaseReason",
    "RoundOver",
    "TwoHandPinch",
    # Configuration
    "Config",
]
