from __future__ import annotations

import sys

import typer

from . import options
from .common import app


@app.command("cameras")
def list_cameras_cmd(camera: str | None = options.camera) -> None:
    """List the capture devices usable by the run command."""
    from ..cameras import find_cameras

    cameras = find_cameras(camera)
    if not cameras:
        print("No cameras found!", file=sys.stderr)
        raise typer.Exit(1)

    for camera_info in cameras:
        print(camera_info)
