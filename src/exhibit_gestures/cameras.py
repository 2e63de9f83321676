from __future__ import annotations

import glob
import logging
import re
from typing import NamedTuple

from linuxpy.video.device import (  # type: ignore[import-untyped]
    BufferType,
    Device,
    PixelFormat,
)

logger = logging.getLogger(__name__)

DEVICE_INDEX_RE = re.compile(r"/dev/video(\d+)$")


class CameraInfo(NamedTuple):
    device_index: int
    name: str
    height: int
    width: int
    format: PixelFormat

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 1.0

    def capture_size(self, desired_size: int) -> tuple[int, int]:
        """Width and height with the larger side at `desired_size`, keeping the aspect ratio."""
        if self.width > self.height:
            return desired_size, int(desired_size / self.aspect_ratio)
        return int(desired_size * self.aspect_ratio), desired_size

    def __str__(self) -> str:
        return f"[{self.device_index}] {self.name} - {self.width}x{self.height} @ {self.format.name}"


def read_camera_info(device_path: str) -> CameraInfo | None:
    """Describe a V4L2 device, `None` if it is not a color capture device."""
    if (match := DEVICE_INDEX_RE.search(device_path)) is None:
        return None

    with Device(device_path) as device:
        # Only keep devices that support video capture
        if not any(f.type == BufferType.VIDEO_CAPTURE for f in device.info.formats):
            return None

        current_format = device.get_format(BufferType.VIDEO_CAPTURE)

        # Depth and IR sensors often expose GREY streams, useless for hand tracking
        if current_format.pixel_format == PixelFormat.GREY:
            return None

        return CameraInfo(
            device_index=int(match.group(1)),
            name=device.info.card,
            height=current_format.height,
            width=current_format.width,
            format=current_format.pixel_format,
        )


def list_cameras() -> list[CameraInfo]:
    """List all available cameras and return a list of CameraInfo objects."""
    cameras = []
    for device_path in sorted(glob.glob("/dev/video*")):
        try:
            camera_info = read_camera_info(device_path)
        except OSError as exc:
            logger.debug("Skipping %s: %s", device_path, exc)
            continue
        if camera_info is not None:
            cameras.append(camera_info)

    logger.debug("Found %d camera(s)", len(cameras))
    return cameras


def find_cameras(filter_name: str | None = None) -> list[CameraInfo]:
    """Available cameras whose name contains `filter_name` (case insensitive)."""
    cameras = list_cameras()
    if not filter_name:
        return cameras
    filter_lower = filter_name.lower()
    return [camera for camera in cameras if filter_lower in camera.name.lower()]
