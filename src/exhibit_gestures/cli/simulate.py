from __future__ import annotations

import json
from pathlib import Path

import typer

from ..config import Config
from ..simulation import ScriptedSession, exhibit_layout
from . import options
from .common import apply_mirror, apply_seed, app, determine_mirror_mode


@app.command("simulate")
def simulate_cmd(
    deliveries: int = typer.Option(3, "--deliveries", "-d", min=0, help="Number of entities to carry to their zone"),
    entities: int | None = options.entities,
    seed: int | None = options.seed,
    fps: float = typer.Option(30.0, "--fps", min=1.0, help="Simulated frame rate"),
    mirror: bool | None = options.mirror,
    config_path: Path | None = options.config,
) -> None:
    """Play a scripted session with a synthetic hand and print the events as JSON lines.

    No camera or model is needed. With --seed, the output is the same from one run to the next.
    """
    config = Config.load(config_path)
    config = apply_seed(apply_mirror(config, determine_mirror_mode(mirror, config)), seed)

    engine = exhibit_layout(config)
    session = ScriptedSession(engine, fps=fps)

    for event in engine.populate(entities if entities is not None else config.cli.entities):
        print(json.dumps({"t": 0.0, **event.to_dict()}))

    for timestamp, event in session.run(deliveries):
        print(json.dumps({"t": round(timestamp, 4), **event.to_dict()}))
