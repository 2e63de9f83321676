from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import cv2  # type: ignore[import-untyped]

from .events import HandGesture
from .models.entities import SizeClass
from .models.landmarks import Point2

if TYPE_CHECKING:
    from .interaction import DeliveryRound, InteractionEngine, TickResult
    from .mapping import CoordinateMapper
    from .models.landmarks import Point3
    from .recognizer import StreamInfo

OpenCVImage: TypeAlias = cv2.typing.MatLike  # Type alias for images (numpy arrays)

# Colors for the categories of entities and zones (BGR format for OpenCV), in declaration order
CATEGORY_COLORS = [
    (60, 80, 220),  # Red
    (60, 200, 240),  # Yellow
    (220, 160, 60),  # Blue
    (120, 200, 80),  # Green
    (200, 90, 200),  # Magenta
]

GESTURE_COLORS = {
    HandGesture.NONE: (200, 200, 200),
    HandGesture.PINCH: (0, 255, 0),
    HandGesture.OPEN_PALM: (255, 255, 0),
    HandGesture.FIST: (0, 0, 255),
}


class OverlayPainter:
    """Projects play-space objects onto a (possibly flipped) camera frame."""

    def __init__(self, mapper: CoordinateMapper, image: OpenCVImage, mirrored_image: bool) -> None:
        self.mapper = mapper
        self.image = image
        self.mirrored_image = mirrored_image
        self.height, self.width = image.shape[:2]
        self.categories: list[str] = []

    def to_pixel(self, point: Point2 | Point3) -> tuple[int, int]:
        return self.mapper.to_image(point, self.width, self.height, self.mirrored_image)

    def to_pixel_length(self, length: float) -> int:
        return max(1, int(round(length / self.mapper.config.width_scale * self.width)))

    def category_color(self, category: str) -> tuple[int, int, int]:
        if category not in self.categories:
            self.categories.append(category)
        return CATEGORY_COLORS[self.categories.index(category) % len(CATEGORY_COLORS)]

    def label(self, text: str, position: tuple[int, int], color: tuple[int, int, int], scale: float = 0.5) -> None:
        text_size = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, 1)[0]
        cv2.putText(
            self.image,
            text,
            (position[0] - text_size[0] // 2, position[1] + text_size[1] // 2),
            cv2.FONT_HERSHEY_SIMPLEX,
            scale,
            color,
            1,
            cv2.LINE_AA,
        )


def draw_zones(engine: InteractionEngine, painter: OverlayPainter) -> None:
    for zone in engine.zones:
        center = painter.to_pixel(zone.position)
        color = painter.category_color(zone.accepted_category)
        cv2.circle(painter.image, center, painter.to_pixel_length(zone.snap_radius), color, 2, cv2.LINE_AA)
        painter.label(zone.id, center, color)


def draw_entities(engine: InteractionEngine, painter: OverlayPainter, now: float | None) -> None:
    for entity in engine.entities:
        center = painter.to_pixel(entity.position)
        color = painter.category_color(entity.category)
        radius = painter.to_pixel_length(0.25 if entity.size_class == SizeClass.SMALL else 0.4)
        cv2.circle(painter.image, center, radius, color, -1, cv2.LINE_AA)
        if entity.is_grabbed:
            cv2.circle(painter.image, center, radius + 4, (255, 255, 255), 2, cv2.LINE_AA)
        elif now is not None and entity.is_bouncing(now):
            cv2.circle(painter.image, center, radius + 4, (0, 0, 255), 2, cv2.LINE_AA)


def draw_dwell_targets(engine: InteractionEngine, painter: OverlayPainter) -> None:
    for target in engine.dwell.targets.values():
        center = painter.to_pixel(target.position)
        radius = painter.to_pixel_length(target.radius)
        cv2.circle(painter.image, center, radius, (180, 180, 180), 1, cv2.LINE_AA)
        if target.progress > 0:
            # Progress ring, clockwise from the top
            end_angle = int(360 * min(1.0, target.progress))
            cv2.ellipse(painter.image, center, (radius, radius), -90, 0, end_angle, (0, 255, 255), 3, cv2.LINE_AA)
        painter.label(target.id, center, (0, 255, 0) if target.fired else (180, 180, 180), 0.4)


def draw_cursors(result: TickResult, painter: OverlayPainter) -> None:
    for cursor, gesture in zip(result.cursors, result.gestures, strict=False):
        if cursor is None:
            continue
        color = GESTURE_COLORS[gesture or HandGesture.NONE]
        center = painter.to_pixel(cursor)
        cv2.circle(painter.image, center, 8, color, 2, cv2.LINE_AA)
        cv2.drawMarker(painter.image, center, color, cv2.MARKER_CROSS, 10, 1, cv2.LINE_AA)

    if result.dwell_cursor is not None:
        cv2.circle(painter.image, painter.to_pixel(result.dwell_cursor), 5, (0, 255, 255), -1, cv2.LINE_AA)


def draw_two_hands(engine: InteractionEngine, result: TickResult, painter: OverlayPainter) -> None:
    """Framed box waiting for a capture, and the span while both hands pinch."""
    if (box := engine.two_hands.frame) is not None:
        top_left = painter.to_pixel(Point2(box.min_x, box.max_y))
        bottom_right = painter.to_pixel(Point2(box.max_x, box.min_y))
        cv2.rectangle(painter.image, top_left, bottom_right, (255, 255, 255), 1, cv2.LINE_AA)

    first, second = result.cursors[0], result.cursors[1]
    if result.span is not None and first is not None and second is not None:
        cv2.line(painter.image, painter.to_pixel(first), painter.to_pixel(second), (0, 255, 0), 2, cv2.LINE_AA)


def draw_header(
    frame: OpenCVImage,
    stream_info: StreamInfo,
    result: TickResult,
    game_round: DeliveryRound | None = None,
    now: float | None = None,
) -> OpenCVImage:
    """Top banner with FPS, latency, round score and pause state."""
    frame_width = frame.shape[1]
    header_height = 30
    padding = 10

    # Add semi-transparent black header
    overlay = frame.copy()
    cv2.rectangle(overlay, (0, 0), (frame_width, header_height), (0, 0, 0), -1)
    frame = cv2.addWeighted(overlay, 0.7, frame, 0.3, 0)

    fps_text = f"FPS: frames: {stream_info.frames_fps:.1f}, recognition: {stream_info.recognition_fps:.1f}"
    latency_text = f"Latency: {stream_info.latency * 1000:.1f}ms"
    metrics_text = f"{fps_text}  |  {latency_text}"
    if game_round is not None and now is not None:
        metrics_text += f"  |  Score: {game_round.score}  |  Time: {game_round.time_left(now):.0f}s"
    if result.paused:
        metrics_text += "  |  PAUSED"

    cv2.putText(
        frame,
        metrics_text,
        (padding, header_height - padding),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.5,
        (0, 255, 0),
        1,
        cv2.LINE_AA,
    )
    return frame


def draw_interaction_overlay(
    engine: InteractionEngine,
    result: TickResult,
    stream_info: StreamInfo,
    frame: OpenCVImage,
    mirror: bool,
    now: float | None = None,
    game_round: DeliveryRound | None = None,
) -> OpenCVImage:
    """Draw zones, entities, dwell targets and cursors on the frame and return the modified frame."""
    if mirror:
        frame = cv2.flip(frame, 1)

    painter = OverlayPainter(engine.mapper, frame, mirrored_image=mirror)
    draw_zones(engine, painter)
    draw_dwell_targets(engine, painter)
    draw_entities(engine, painter, now)
    draw_two_hands(engine, result, painter)
    draw_cursors(result, painter)

    return draw_header(painter.image, stream_info, result, game_round, now)
