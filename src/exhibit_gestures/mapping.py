"""Conversion of normalized landmark coordinates into play-space coordinates."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .config import MappingConfig
from .models.landmarks import POSE_LANDMARKS_COUNT, HandFrame, Point2, Point3, PoseLandmark
from .models.utils import all_finite
from .smoothing import CoordSmoother

logger = logging.getLogger(__name__)


class CoordinateMapper:
    """Maps normalized image coordinates ([0, 1], y down) to play space (y up).

    The image center lands on (offset_x, offset_y); the full image spans
    `width_scale` x `height_scale` play-space units. With `mirror`, the image is
    flipped horizontally so moving the hand right moves the cursor right on a
    selfie-style display.
    """

    def __init__(self, config: MappingConfig | None = None) -> None:
        self.config = config or MappingConfig()

    def to_play_space(self, point: Point3) -> Point3:
        config = self.config
        nx = 1.0 - point.x if config.mirror else point.x
        return Point3(
            (nx - 0.5) * config.width_scale + config.offset_x,
            (0.5 - point.y) * config.height_scale + config.offset_y,
            point.z * config.depth_scale + config.offset_z,
        )

    def to_normalized(self, point: Point2 | Point3) -> Point2:
        """Inverse of `to_play_space` on x and y."""
        config = self.config
        nx = (point.x - config.offset_x) / config.width_scale + 0.5
        ny = 0.5 - (point.y - config.offset_y) / config.height_scale
        return Point2(1.0 - nx if config.mirror else nx, ny)

    def to_image(
        self, point: Point2 | Point3, width: int, height: int, mirrored_image: bool = False
    ) -> tuple[int, int]:
        """Pixel coordinates of a play-space point on a camera image.

        `mirrored_image` tells whether the image itself was flipped before display.
        """
        normalized = self.to_normalized(point)
        nx = 1.0 - normalized.x if mirrored_image else normalized.x
        return int(round(nx * width)), int(round(normalized.y * height))

    def pinch_point(self, hand: HandFrame) -> Point3:
        """Play-space midpoint of the thumb and index tips."""
        return self.to_play_space(hand.pinch_point)

    def index_tip(self, hand: HandFrame) -> Point3:
        return self.to_play_space(hand.index_tip)


class PoseCursorTracker:
    """Cursor following the raised index fingertip of a body pose.

    Used when only a body skeleton is tracked: of both index fingertips, the one
    higher in the image wins, and the raw reading is smoothed before mapping.
    """

    def __init__(self, mapper: CoordinateMapper) -> None:
        self.mapper = mapper
        self.smoother = CoordSmoother(ema_alpha=mapper.config.pose_smoothing)

    @staticmethod
    def select_fingertip(pose: Sequence[Point3]) -> Point3 | None:
        """Pick the index fingertip that is raised the most (smallest y)."""
        if len(pose) != POSE_LANDMARKS_COUNT:
            return None
        candidates = [
            tip for tip in (pose[PoseLandmark.LEFT_INDEX], pose[PoseLandmark.RIGHT_INDEX]) if all_finite(tip)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda tip: tip.y)

    def update(self, pose: Sequence[Point3] | None) -> Point3 | None:
        """Return the play-space cursor for this tick, `None` when not tracked.

        A lost fingertip restarts the smoothing, so the cursor jumps to where it comes back.
        """
        fingertip = None if pose is None else self.select_fingertip(pose)
        if fingertip is None:
            if pose is not None:
                logger.debug("No usable index fingertip in pose")
            self.reset()
            return None
        smoothed = self.smoother.update(fingertip)
        return None if smoothed is None else self.mapper.to_play_space(smoothed)

    def reset(self) -> None:
        self.smoother.reset()
