from .entities import DeliveryZone, DwellTarget, GrabbableEntity, SizeClass
from .landmarks import (
    HAND_LANDMARKS_COUNT,
    MAX_HANDS,
    POSE_LANDMARKS_COUNT,
    HandFrame,
    HandLandmark,
    LandmarkFrame,
    Point2,
    Point3,
    PoseLandmark,
)
from .utils import Box, all_finite, midpoint, planar_distance

__all__ = [
    "HAND_LANDMARKS_COUNT",
    "MAX_HANDS",
    "POSE_LANDMARKS_COUNT",
    "Box",
    "DeliveryZone",
    "DwellTarget",
    "GrabbableEntity",
    "HandFrame",
    "HandLandmark",
    "LandmarkFrame",
    "Point2",
    "Point3",
    "PoseLandmark",
    "SizeClass",
    "all_finite",
    "midpoint",
    "planar_distance",
]
