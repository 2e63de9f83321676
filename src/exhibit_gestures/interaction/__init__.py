from .dwell import DwellSelector
from .engine import InteractionEngine, TickResult, step
from .grab import GrabStateMachine, HandPhase, HandTrackerState
from .hand_pose import GestureHoldTrigger, classify_hand_pose
from .pinch import PinchGestureDetector, PinchState
from .placement import EntitySpawner, Footprint, Placement, SpatialPlacer
from .scoring import DeliveryRound
from .two_hands import TwoHandPinchTracker, TwoHandSpan, hands_span

__all__ = [
    "DeliveryRound",
    "DwellSelector",
    "EntitySpawner",
    "Footprint",
    "GestureHoldTrigger",
    "GrabStateMachine",
    "HandPhase",
    "HandTrackerState",
    "InteractionEngine",
    "PinchGestureDetector",
    "PinchState",
    "Placement",
    "SpatialPlacer",
    "TickResult",
    "TwoHandPinchTracker",
    "TwoHandSpan",
    "classify_hand_pose",
    "hands_span",
    "step",
]
