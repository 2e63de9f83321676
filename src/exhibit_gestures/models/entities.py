from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .landmarks import Point2, Point3
from .utils import planar_distance


class SizeClass(str, Enum):
    NORMAL = "normal"
    SMALL = "small"  # Smaller grab radius, harder to catch


@dataclass
class GrabbableEntity:
    """Something a hand can pinch, carry and deliver to a zone."""

    id: int
    position: Point3
    category: str
    size_class: SizeClass = SizeClass.NORMAL
    grabbed_by: int | None = None
    rejected_until: float | None = None  # end of the bounce-back window after a wrong delivery

    @property
    def is_grabbed(self) -> bool:
        return self.grabbed_by is not None

    def is_bouncing(self, now: float) -> bool:
        """Whether the bounce-back window of a rejected delivery is still open."""
        return self.rejected_until is not None and now < self.rejected_until


@dataclass(frozen=True)
class DeliveryZone:
    """Fixed target area accepting entities of one category."""

    id: str
    position: Point2
    snap_radius: float
    accepted_category: str

    def contains(self, point: Point2 | Point3) -> bool:
        """Check if the point is within the snap radius (planar)."""
        return planar_distance(point, self.position) <= self.snap_radius

    def accepts(self, entity: GrabbableEntity) -> bool:
        """Exact category match, nothing fuzzy."""
        return entity.category == self.accepted_category


@dataclass
class DwellTarget:
    """Hover-to-confirm target.

    `progress` goes back to 0 as soon as the cursor leaves `radius`, and `fired` stays set until the consumer
    re-arms the target (see `DwellSelector.reset`).
    """

    id: str
    position: Point2
    radius: float
    dwell_seconds: float
    progress: float = 0.0
    fired: bool = False
    exclusive: bool = True  # once fired, behaves as an open modal and freezes the other targets

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError(f"Dwell target {self.id!r} must have a positive radius")
        if self.dwell_seconds <= 0:
            raise ValueError(f"Dwell target {self.id!r} must have a positive dwell duration")

    def contains(self, point: Point2 | Point3) -> bool:
        return planar_distance(point, self.position) <= self.radius
