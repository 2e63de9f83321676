from __future__ import annotations

import logging
import os

import typer

from ..config import Config

app = typer.Typer()

DEFAULT_USER_CONFIG_PATH = Config.get_user_path()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Send the package logs to the current stderr."""
    logger = logging.getLogger("exhibit_gestures")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers = [handler]
    logger.propagate = False  # Don't propagate to root logger


def apply_seed(config: Config, seed: int | None) -> Config:
    """Config with the placement seed overridden, when one is given."""
    if seed is None:
        return config
    return config.model_copy(
        update={"placement": config.placement.model_copy(update={"seed": seed})},
    )


def determine_mirror_mode(mirror: bool | None, config: Config | None = None) -> bool:
    """Determine whether to use mirror mode based on CLI arguments, environment variable, and config.

    Priority order:
    1. CLI arguments (--mirror / --no-mirror)
    2. Environment variable (EXHIBIT_GESTURES_MIRROR)
    3. Config file (config.mapping.mirror)
    4. Default (True)

    Args:
        mirror: Value of the --mirror/--no-mirror flag, `None` if not given
        config: Optional Config object

    Returns:
        bool: Whether to use mirror mode
    """
    # Priority 1: CLI arguments
    if mirror is not None:
        return mirror

    # Priority 2: Environment variable
    env_mirror = os.getenv("EXHIBIT_GESTURES_MIRROR", "").strip().lower()
    if env_mirror in ("false", "0", "no"):
        return False
    if env_mirror in ("true", "1", "yes"):
        return True

    # Priority 3: Config file
    if config is not None:
        return config.mapping.mirror

    # Priority 4: Default
    return True


def apply_mirror(config: Config, mirror: bool) -> Config:
    return config.model_copy(update={"mapping": config.mapping.model_copy(update={"mirror": mirror})})
