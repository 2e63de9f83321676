import mediapipe as mp  # type: ignore[import-untyped]
from mediapipe.tasks.python import BaseOptions  # type: ignore[import-untyped]
from mediapipe.tasks.python.vision import (  # type: ignore[import-untyped]
    HandLandmarker,
    HandLandmarkerOptions,
    HandLandmarkerResult,
    PoseLandmarker,
    PoseLandmarkerOptions,
    PoseLandmarkerResult,
    RunningMode,
)

from mediapipe.tasks.python.components.containers import (  # type: ignore[import-untyped] # isort: skip
    Category,
    NormalizedLandmark,
)

__all__ = [
    "BaseOptions",
    "Category",
    "HandLandmarker",
    "HandLandmarkerOptions",
    "HandLandmarkerResult",
    "PoseLandmarker",
    "PoseLandmarkerOptions",
    "PoseLandmarkerResult",
    "RunningMode",
    "NormalizedLandmark",
    "mp",
]
