from __future__ import annotations

from pathlib import Path

import typer

from ..config import Config
from . import options
from .common import apply_mirror, apply_seed, app, determine_mirror_mode, setup_logging


@app.callback(invoke_without_command=True)
def run_exhibit_cmd(
    ctx: typer.Context,
    camera: str | None = options.camera,
    preview: bool = options.preview,
    mirror: bool | None = options.mirror,
    size: int | None = options.size,
    gpu: bool = options.gpu,
    pose: bool | None = options.pose,
    entities: int | None = options.entities,
    seed: int | None = options.seed,
    config_path: Path | None = options.config,
    verbose: bool = options.verbose,
) -> None:
    """Run the exhibit on the selected camera: grab entities, deliver them to their zones.

    The default config location is platform-specific and will be shown if the config file is not found.
    """
    setup_logging(verbose)

    # If a subcommand is being invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    # Heavy camera stack, only needed here
    from .live import pick_camera, run_exhibit

    # Load configuration
    config = Config.load(config_path)

    # Use config values as defaults, but CLI options take precedence
    final_mirror = determine_mirror_mode(mirror, config)
    config = apply_seed(apply_mirror(config, final_mirror), seed)
    final_camera = camera if camera is not None else config.cli.camera
    final_size = size if size is not None else config.cli.size
    final_pose = pose if pose is not None else config.cli.use_pose
    final_entities = entities if entities is not None else config.cli.entities

    selected = pick_camera(final_camera)

    if selected:
        print(f"\nSelected: {selected}")
        run_exhibit(
            selected,
            show_preview=preview,
            config=config,
            desired_size=final_size,
            use_gpu=gpu,
            use_pose=final_pose,
            entities_count=final_entities,
        )
    else:
        print("\nNo camera selected.")
