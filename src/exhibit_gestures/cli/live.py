"""Camera loop of the `run` command: OpenCV capture, MediaPipe landmarks, engine, overlay."""

from __future__ import annotations

import logging
import os
import sys
from typing import cast

import cv2  # type: ignore[import-untyped]

from ..cameras import CameraInfo, find_cameras
from ..config import Config
from ..drawing import draw_interaction_overlay
from ..events import DwellComplete, GestureHold, InteractionEvent, RoundOver, TwoHandPinch
from ..interaction import DeliveryRound, InteractionEngine
from ..recognizer import Recognizer
from ..simulation import exhibit_layout

logger = logging.getLogger(__name__)


def pick_camera(filter_name: str | None = None) -> CameraInfo | None:
    """List cameras and let user pick one. Returns selected CameraInfo or None.

    Args:
        filter_name: Optional string to filter cameras by name (case insensitive)
    """
    cameras = find_cameras(filter_name)

    if not cameras:
        if filter_name:
            print(f"No cameras found matching '{filter_name}'", file=sys.stderr)
        else:
            print("No cameras found!", file=sys.stderr)
        return None

    if len(cameras) == 1:
        # Auto-select if only one match
        selected = cameras[0]
        print(f"Auto-selected camera: {selected}")
        return selected

    print(f"Cameras matching '{filter_name}':" if filter_name else "Available cameras:")

    cam_dict = {}
    for cam in cameras:
        print(f"  {cam}")
        cam_dict[cam.device_index] = cam

    valid_indices = sorted(cam_dict.keys())

    while True:
        try:
            choice = input(f"\nSelect camera ({', '.join(map(str, valid_indices))} or q to quit): ")
            if choice.lower() == "q":
                return None
            idx = int(choice)
            if idx in cam_dict:
                return cam_dict[idx]
            print(f"Invalid choice. Please enter one of: {', '.join(map(str, valid_indices))}", file=sys.stderr)
        except ValueError:
            print("Invalid input. Please enter a number or 'q'", file=sys.stderr)


def init_camera_capture(
    camera_info: CameraInfo, show_preview: bool, desired_size: int
) -> tuple[cv2.VideoCapture | None, str | None]:
    """Initialize camera capture and set resolution."""
    cap = cv2.VideoCapture(camera_info.device_index)

    if not cap.isOpened():
        print(f"Error: Could not open camera {camera_info.device_index}", file=sys.stderr)
        return None, None

    width, height = camera_info.capture_size(desired_size)
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter.fourcc(*"MJPG"))  # Use MJPEG for better performance
    cap.set(cv2.CAP_PROP_FPS, 30)

    cap_fps = cap.get(cv2.CAP_PROP_FPS)
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))

    print(f"Camera {camera_info.name} opened successfully at {width}x{height} with FPS: {cap_fps:.2f}")

    window_name = None
    if show_preview:
        window_name = f"Exhibit Preview - {camera_info.name}"
        cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
        print(f"Showing preview for {camera_info.name}")

    return cap, window_name


def handle_events(
    engine: InteractionEngine,
    game_round: DeliveryRound,
    events: list[InteractionEvent],
    entities_count: int,
    now: float,
) -> None:
    """Log the events and play the part of the exhibit application."""
    if (over := game_round.update(events, now)) is not None:
        events = [*events, over]

    for event in events:
        logger.info("%s", event.to_dict())
        if isinstance(event, DwellComplete):
            # No fact panel to show here, close it right away
            engine.dwell.reset(event.target_id)
        elif isinstance(event, TwoHandPinch) and event.frame is not None:
            logger.info("Framed area captured: %s", event.frame)
        elif isinstance(event, RoundOver):
            logger.info("Round over: %d points, hold a fist to play again", event.score)
        elif isinstance(event, GestureHold):
            logger.info("Reset gesture, rebuilding the scene")
            respawned = engine.respawn(entities_count)
            game_round.start(now)
            handle_events(engine, game_round, respawned, entities_count, now)


def run_exhibit(
    camera_info: CameraInfo,
    show_preview: bool,
    config: Config,
    desired_size: int,
    use_gpu: bool = False,
    use_pose: bool = False,
    entities_count: int = 6,
) -> None:
    """Show a live preview of the selected camera driving the interaction engine."""
    engine = exhibit_layout(config)
    game_round = DeliveryRound(config.scoring)
    handle_events(engine, game_round, list(engine.populate(entities_count)), entities_count, 0.0)

    cap, window_name = init_camera_capture(camera_info, show_preview, desired_size)
    if cap is None:
        return

    print("Loading landmarker models...")

    hand_model_path = os.getenv("EXHIBIT_GESTURES_HAND_MODEL_PATH", "").strip() or "hand_landmarker.task"
    pose_model_path = None
    if use_pose:
        pose_model_path = os.getenv("EXHIBIT_GESTURES_POSE_MODEL_PATH", "").strip() or "pose_landmarker_lite.task"

    last_timestamp: float | None = None
    try:
        with Recognizer(hand_model_path, pose_model_path, use_gpu=use_gpu) as recognizer:
            print("Landmarkers loaded successfully")
            if show_preview:
                print("Press 'q' or ESC to quit, 'p' to pause/resume")

            for frame, stream_info, landmark_frame in recognizer.handle_opencv_capture(cap):
                now = cast(float, landmark_frame.timestamp)
                delta_time = 0.0 if last_timestamp is None else now - last_timestamp
                if last_timestamp is None:
                    game_round.start(now)
                last_timestamp = now

                result = engine.update(landmark_frame, delta_time, now)
                handle_events(engine, game_round, result.events, entities_count, now)

                if not show_preview:
                    continue

                frame = draw_interaction_overlay(
                    engine, result, stream_info, frame, config.mapping.mirror, now, game_round
                )
                cv2.imshow(cast(str, window_name), frame)

                # Check for key press
                key = cv2.waitKey(1) & 0xFF
                if key == ord("q") or key == 27:  # 'q' or ESC
                    break
                if key == ord("p"):
                    if engine.paused:
                        engine.resume()
                    else:
                        engine.pause()

                # Check if window was closed
                try:
                    if cv2.getWindowProperty(cast(str, window_name), cv2.WND_PROP_VISIBLE) < 1:
                        break
                except cv2.error:
                    # Window was closed
                    break
    except Exception as e:
        print(f"\nError running the landmarkers: {e}", file=sys.stderr)
        raise
    finally:
        cap.release()
        if show_preview:
            cv2.destroyAllWindows()
