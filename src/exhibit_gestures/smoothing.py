"""Smoothing utilities for cursors and held entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .models.landmarks import Point3

# Smoothing configuration constants
SMOOTHING_EMA_WEIGHT = 0.2  # Weight for new values in exponential moving average (0-1)
FOLLOW_STIFFNESS = 18.0  # Angular frequency (rad/s) of the follow spring

PointType = TypeVar("PointType", bound=tuple[float, ...])


class CoordSmoother:
    """Smooths a 2D/3D coordinate with an exponential moving average."""

    def __init__(self, ema_alpha: float = SMOOTHING_EMA_WEIGHT):
        if not 0 < ema_alpha <= 1:
            raise ValueError(f"ema_alpha must be in (0, 1], got {ema_alpha}")
        self.ema_alpha = ema_alpha
        self._value: tuple[float, ...] | None = None
        self._last_raw: tuple[float, ...] | None = None

    def update(self, coord: PointType | None) -> PointType | None:
        """Update with new coordinate and return smoothed result.

        A `None` coordinate (nothing tracked) returns `None` but keeps the
        current average, so a single missed frame does not make the cursor jump.
        """
        self._last_raw = coord
        if coord is None:
            return None

        if self._value is None or len(self._value) != len(coord):
            self._value = tuple(coord)
        else:
            self._value = tuple(
                prev + (new - prev) * self.ema_alpha for prev, new in zip(self._value, coord, strict=True)
            )
        return type(coord)(*self._value) if hasattr(coord, "_fields") else self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the current average."""
        self._value = None
        self._last_raw = None

    @property
    def raw(self) -> tuple[float, ...] | None:
        """Get the last raw (unsmoothed) coordinate."""
        return self._last_raw


class SpringFollower:
    """Moves a point toward a moving target with a critically damped spring.

    Uses the closed-form approximation of the damped spring so it stays stable
    for any frame duration and never overshoots the target.
    """

    def __init__(self, stiffness: float = FOLLOW_STIFFNESS):
        if stiffness <= 0:
            raise ValueError(f"stiffness must be positive, got {stiffness}")
        self.stiffness = stiffness
        self.velocity: tuple[float, ...] = (0.0, 0.0, 0.0)

    def update(self, current: Sequence[float], target: Sequence[float], dt: float) -> Point3:
        """Advance `current` toward `target` by `dt` seconds and return the new position."""
        if dt <= 0:
            return Point3(*current)

        omega = self.stiffness
        x = omega * dt
        decay = 1.0 / (1.0 + x + 0.48 * x * x + 0.235 * x * x * x)

        position = []
        velocity = []
        for pos, goal, vel in zip(current, target, self.velocity, strict=True):
            change = pos - goal
            temp = (vel + omega * change) * dt
            velocity.append((vel - omega * temp) * decay)
            position.append(goal + (change + temp) * decay)

        self.velocity = tuple(velocity)
        return Point3(*position)

    def reset(self) -> None:
        """Stop any residual motion."""
        self.velocity = (0.0, 0.0, 0.0)
