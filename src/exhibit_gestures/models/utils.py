from __future__ import annotations

from dataclasses import dataclass
from math import hypot, isfinite
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def planar_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Distance between two points using only x and y.

    Depth from a monocular tracker is too unreliable to be part of any distance.
    """
    return hypot(a[0] - b[0], a[1] - b[1])


def midpoint(a: Sequence[float], b: Sequence[float]) -> tuple[float, ...]:
    """Component-wise midpoint of two points of the same dimension."""
    if len(a) != len(b):
        raise ValueError(f"Cannot compute midpoint of points with {len(a)} and {len(b)} dimensions")
    return tuple((ca + cb) / 2 for ca, cb in zip(a, b))


def all_finite(point: Sequence[float]) -> bool:
    """Check that no coordinate is NaN or infinite."""
    return all(isfinite(coord) for coord in point)


@dataclass(frozen=True)
class Box:
    """Represents an axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple[float, float]:
        """Center of the box."""
        return (self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2

    def contains(self, point: Sequence[float]) -> bool:
        """Check if the point (x, y) is inside the box, edges included."""
        return self.min_x <= point[0] <= self.max_x and self.min_y <= point[1] <= self.max_y

    def clamp(self, point: Sequence[float]) -> tuple[float, float]:
        """Closest point of the box to the given (x, y) point."""
        return min(max(point[0], self.min_x), self.max_x), min(max(point[1], self.min_y), self.max_y)
