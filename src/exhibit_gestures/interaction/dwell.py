from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import DwellConfig
from ..events import DwellComplete
from ..models.entities import DwellTarget
from ..models.landmarks import Point2, Point3

logger = logging.getLogger(__name__)

# Summed frame durations fall a hair short of the exact hover time (10 x 0.1 < 1.0)
PROGRESS_TOLERANCE = 1e-9


class DwellSelector:
    """Hover-to-confirm selection, independent of any pinch.

    Each target fills while the cursor stays inside its radius and empties at
    once when the cursor leaves. A filled target fires once, then stays fired
    until `reset` is called for it. While a fired exclusive target is waiting
    for its reset (a modal is open), every other target stays at zero.
    """

    def __init__(self, config: DwellConfig | None = None, targets: Iterable[DwellTarget] = ()) -> None:
        self.config = config or DwellConfig()
        self.targets: dict[str, DwellTarget] = {}
        for target in targets:
            self.add(target)

    def create(
        self,
        target_id: str,
        position: Point2,
        radius: float | None = None,
        dwell_seconds: float | None = None,
        exclusive: bool = True,
    ) -> DwellTarget:
        """Create and register a target, using the configured defaults."""
        target = DwellTarget(
            id=target_id,
            position=position,
            radius=self.config.radius if radius is None else radius,
            dwell_seconds=self.config.dwell_seconds if dwell_seconds is None else dwell_seconds,
            exclusive=exclusive,
        )
        self.add(target)
        return target

    def add(self, target: DwellTarget) -> None:
        if target.id in self.targets:
            raise ValueError(f"Dwell target {target.id!r} already exists")
        self.targets[target.id] = target

    def remove(self, target_id: str) -> DwellTarget:
        return self.targets.pop(target_id)

    def reset(self, target_id: str) -> None:
        """Re-arm a fired target, typically when the content it opened is dismissed."""
        target = self.targets[target_id]
        target.fired = False
        target.progress = 0.0

    @property
    def locking_target(self) -> DwellTarget | None:
        """The fired exclusive target holding the others, if any."""
        for target in self.targets.values():
            if target.fired and target.exclusive:
                return target
        return None

    def update(self, cursor: Point2 | Point3 | None, dt: float) -> list[DwellComplete]:
        events: list[DwellComplete] = []
        locking = self.locking_target

        for target in self.targets.values():
            if locking is not None and target is not locking:
                target.progress = 0.0
                continue

            if cursor is None or not target.contains(cursor):
                target.progress = 0.0
                continue

            if dt > 0:
                target.progress = min(target.progress + dt / target.dwell_seconds, 1.0)

            if target.progress >= 1.0 - PROGRESS_TOLERANCE and not target.fired:
                target.progress = 1.0
                target.fired = True
                logger.debug("Dwell target %s completed", target.id)
                events.append(DwellComplete(target_id=target.id))
                if target.exclusive:
                    # Lock the others right away, they may come later in this loop
                    locking = target

        if locking is not None:
            # Targets before the one that just fired in this loop progressed before the lock
            for target in self.targets.values():
                if target is not locking:
                    target.progress = 0.0

        return events
