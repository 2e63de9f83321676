#!/usr/bin/env python3

"""The CLI runs the exhibit on a camera, or a scripted session without one."""


from .common import app
from .list_cameras import list_cameras_cmd  # noqa: F401
from .run import run_exhibit_cmd  # noqa: F401
from .show_config import show_config_cmd  # noqa: F401
from .simulate import simulate_cmd  # noqa: F401


def main() -> None:
    """Entry point for the application."""
    app()


if __name__ == "__main__":
    main()
