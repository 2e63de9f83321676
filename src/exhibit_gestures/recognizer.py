from __future__ import annotations

import logging
import os
import time
import urllib.request
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, NamedTuple, TypeAlias

import cv2

from .mediapipe import (
    BaseOptions,
    Category,
    HandLandmarker,
    HandLandmarkerOptions,
    HandLandmarkerResult,
    NormalizedLandmark,
    PoseLandmarker,
    PoseLandmarkerOptions,
    PoseLandmarkerResult,
    RunningMode,
    mp,
)
from .models.landmarks import MAX_HANDS, HandFrame, LandmarkFrame, Point3

logger = logging.getLogger(__name__)

OpenCVImage: TypeAlias = cv2.typing.MatLike  # Type alias for images (numpy arrays)

# Hand slots follow handedness so a physical hand keeps its slot from frame to frame
HANDEDNESS_SLOTS = {"left": 0, "right": 1}


@dataclass
class RecognizerResult:
    hand_landmarks: list[list[NormalizedLandmark]]
    handedness: list[list[Category]]
    timestamp: float  # Timestamp of the result, in seconds


def to_points(landmarks: list[NormalizedLandmark]) -> tuple[Point3, ...]:
    return tuple(Point3(landmark.x, landmark.y, landmark.z or 0.0) for landmark in landmarks)


class Recognizer:
    """Runs the MediaPipe hand (and optionally pose) landmarkers on a live stream.

    Results arrive on MediaPipe's own thread through the callbacks, which only
    replace the last result; `landmark_frame` is read from the frame loop.
    """

    hand_model_url: ClassVar[str] = (
        "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
    )
    pose_model_url: ClassVar[str] = (
        "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/1/pose_landmarker_lite.task"
    )

    def __init__(self, hand_model_path: str, pose_model_path: str | None = None, use_gpu: bool = False) -> None:
        self.last_result: RecognizerResult | None = None
        self.last_pose: tuple[Point3, ...] | None = None

        self.check_model(hand_model_path, self.hand_model_url)
        delegate = BaseOptions.Delegate.GPU if use_gpu else BaseOptions.Delegate.CPU

        self.hand_landmarker: HandLandmarker | None = HandLandmarker.create_from_options(
            HandLandmarkerOptions(
                base_options=BaseOptions(model_asset_path=hand_model_path, delegate=delegate),
                running_mode=RunningMode.LIVE_STREAM,
                num_hands=MAX_HANDS,
                min_hand_detection_confidence=0.5,
                min_hand_presence_confidence=0.5,
                min_tracking_confidence=0.5,
                result_callback=self.save_hands_result,
            )
        )

        self.pose_landmarker: PoseLandmarker | None = None
        if pose_model_path is not None:
            self.check_model(pose_model_path, self.pose_model_url)
            self.pose_landmarker = PoseLandmarker.create_from_options(
                PoseLandmarkerOptions(
                    base_options=BaseOptions(model_asset_path=pose_model_path, delegate=delegate),
                    running_mode=RunningMode.LIVE_STREAM,
                    num_poses=1,
                    result_callback=self.save_pose_result,
                )
            )

    @staticmethod
    def check_model(model_path: str, model_url: str) -> None:
        # Check if model file exists
        if not os.path.exists(model_path):
            logger.info("Model file '%s' not found. Downloading...", model_path)
            try:
                urllib.request.urlretrieve(model_url, model_path)
                logger.info("Successfully downloaded model to '%s'", model_path)
            except Exception as exc:
                logger.error("Failed to download model: %s", exc)
                raise RuntimeError(f"Could not download model from {model_url}: {exc}") from exc

    @staticmethod
    def convert_image_from_opencv(frame: OpenCVImage) -> mp.Image:
        # Convert frame to RGB (opencv BGR not supported by MediaPipe)
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

    def recognize_image(self, image: mp.Image, timestamp: float) -> mp.Image:
        timestamp_ms = int(timestamp * 1000)  # Convert seconds to milliseconds
        if self.hand_landmarker is not None:
            self.hand_landmarker.detect_async(image, timestamp_ms)
        if self.pose_landmarker is not None:
            self.pose_landmarker.detect_async(image, timestamp_ms)
        return image

    def save_hands_result(self, result: HandLandmarkerResult, input_image: mp.Image, timestamp_ms: int) -> None:
        """Save the latest hand landmarks result."""
        self.last_result = RecognizerResult(
            hand_landmarks=result.hand_landmarks,
            handedness=result.handedness,
            timestamp=timestamp_ms / 1000,  # Convert milliseconds to seconds
        )

    def save_pose_result(self, result: PoseLandmarkerResult, input_image: mp.Image, timestamp_ms: int) -> None:
        """Save the latest body pose, if any."""
        self.last_pose = to_points(result.pose_landmarks[0]) if result.pose_landmarks else None

    def landmark_frame(self) -> LandmarkFrame | None:
        """Convert the last results into the engine input."""
        if (result := self.last_result) is None:
            return None

        hands: dict[int, HandFrame] = {}
        for hand_index, landmarks in enumerate(result.hand_landmarks):
            slot = None
            if hand_index < len(result.handedness) and result.handedness[hand_index]:
                slot = HANDEDNESS_SLOTS.get(result.handedness[hand_index][0].category_name.lower())
            if slot is None or slot in hands:
                # Unknown or duplicated handedness, take the first free slot
                slot = next((s for s in range(MAX_HANDS) if s not in hands), None)
            if slot is None:
                continue
            hands[slot] = HandFrame(hand_id=slot, landmarks=to_points(landmarks))

        return LandmarkFrame(
            hands=tuple(hands[slot] for slot in sorted(hands)),
            pose=self.last_pose,
            timestamp=result.timestamp,
        )

    def close(self) -> None:
        """Close the landmarkers and release resources."""
        if self.hand_landmarker:
            self.hand_landmarker.close()
            self.hand_landmarker = None
        if self.pose_landmarker:
            self.pose_landmarker.close()
            self.pose_landmarker = None

    def __enter__(self) -> Recognizer:
        """Enter the context manager."""
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Exit the context manager and clean up resources."""
        self.close()

    def handle_opencv_capture(self, cap: cv2.VideoCapture) -> Iterator[tuple[OpenCVImage, StreamInfo, LandmarkFrame]]:
        """Read frames from an OpenCV VideoCapture object, yield each new recognition."""
        start_time = time.perf_counter()
        last_recognized_timestamp: float = -1
        frames_count = 0
        recognized_frames_count = 0

        while True:
            ret, frame = cap.read()
            if not ret:
                break

            frames_count += 1
            current_time = time.perf_counter()
            elapsed_time = current_time - start_time

            mp_image = self.recognize_image(self.convert_image_from_opencv(frame), elapsed_time)

            if self.last_result is None:
                continue
            if self.last_result.timestamp == last_recognized_timestamp:
                continue

            recognized_frames_count += 1
            last_recognized_timestamp = self.last_result.timestamp

            landmark_frame = self.landmark_frame()
            if landmark_frame is None:
                continue

            stream_info = StreamInfo(
                frames_count=frames_count,
                recognized_frames_count=recognized_frames_count,
                frames_fps=frames_count / elapsed_time if elapsed_time > 0 else 0,
                recognition_fps=recognized_frames_count / elapsed_time if elapsed_time > 0 else 0,
                latency=elapsed_time - self.last_result.timestamp,
                height=mp_image.height,
                width=mp_image.width,
            )

            yield frame, stream_info, landmark_frame


class StreamInfo(NamedTuple):
    frames_count: int  # Total number of frames read
    recognized_frames_count: int  # Number of frames that were recognized
    frames_fps: float  # FPS of the capture
    recognition_fps: float  # FPS of recognition
    latency: float  # Time since the frame of the last result
    width: int  # Width of the image
    height: int  # Height of the image

    def to_dict(self) -> dict[str, Any]:
        """Export stream info as a dictionary with all fields."""
        return self._asdict()
