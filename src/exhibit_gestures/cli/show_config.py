from __future__ import annotations

from pathlib import Path

import typer

from ..config import Config
from . import options
from .common import app


@app.command("config")
def show_config_cmd(
    config_path: Path | None = options.config,
    save: bool = typer.Option(False, "--save", help="Write the effective configuration to the config file"),
) -> None:
    """Print the effective configuration as JSON.

    With --save, the configuration (defaults included) is written to the config file, ready to be edited.
    """
    config = Config.load(config_path)
    print(config.model_dump_json(indent=2))

    if save:
        path = config.save(config_path)
        print(f"Configuration saved to {path}")
