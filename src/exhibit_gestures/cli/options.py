"""Shared CLI option definitions."""

from __future__ import annotations

import typer

from .common import DEFAULT_USER_CONFIG_PATH

camera = typer.Option(None, "--camera", "--cam", "-cm", help="Camera name filter (case insensitive)")

preview = typer.Option(True, "--preview/--no-preview", "-p/-np", help="Show visual preview window")

mirror = typer.Option(
    None, "--mirror/--no-mirror", "-m/-nm", help="Force mirror mode (overrides environment variable)"
)

size = typer.Option(None, "--size", "-s", help="Maximum dimension of the camera capture")

config = typer.Option(None, "--config", "-c", help=f"Path to config file. Default: {DEFAULT_USER_CONFIG_PATH}")

gpu = typer.Option(False, "--gpu/--no-gpu", "-g/-ng", help="Run the MediaPipe models on the GPU")

pose = typer.Option(None, "--pose/--no-pose", help="Also track the body pose for a pointing cursor")

entities = typer.Option(None, "--entities", "-e", min=0, help="Number of entities to spawn")

seed = typer.Option(None, "--seed", help="Seed of the entity placement, for reproducible sessions")

verbose = typer.Option(False, "--verbose", "-v", help="Log debug details of the interaction engine")
