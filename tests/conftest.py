"""Shared fixtures: a small exhibit and a synthetic hand to drive it."""

from __future__ import annotations

import pytest

from exhibit_gestures.config import Config, PlacementConfig
from exhibit_gestures.events import InteractionEvent
from exhibit_gestures.interaction import InteractionEngine, TickResult
from exhibit_gestures.models import DeliveryZone, GrabbableEntity, LandmarkFrame, Point2, Point3
from exhibit_gestures.simulation import OPEN_DISTANCE, PINCH_DISTANCE, synthetic_hand

FPS = 30.0


class HandDriver:
    """Feeds one synthetic hand to an engine, one tick per call, 30 ticks per second."""

    def __init__(self, engine: InteractionEngine) -> None:
        self.engine = engine
        self.now = 0.0

    def frame(self, point: Point2 | None, pinch: bool = False, fist: bool = False) -> LandmarkFrame:
        if point is None:
            return LandmarkFrame(timestamp=self.now)
        center = self.engine.mapper.to_normalized(point)
        hand = synthetic_hand(center, PINCH_DISTANCE if pinch else OPEN_DISTANCE, fist)
        return LandmarkFrame.from_lists([hand], timestamp=self.now)

    def tick(
        self, point: Point2 | None, pinch: bool = False, fist: bool = False, dt: float = 1 / FPS
    ) -> TickResult:
        self.now += dt
        return self.engine.update(self.frame(point, pinch, fist), dt, self.now)

    def ticks(self, count: int, point: Point2 | None, pinch: bool = False, fist: bool = False) -> list[InteractionEvent]:
        events: list[InteractionEvent] = []
        for _ in range(count):
            events.extend(self.tick(point, pinch, fist).events)
        return events

    def move(self, start: Point2, end: Point2, steps: int, pinch: bool = False) -> list[InteractionEvent]:
        """Linear move, `end` included."""
        events: list[InteractionEvent] = []
        for step in range(1, steps + 1):
            ratio = step / steps
            point = Point2(start.x + (end.x - start.x) * ratio, start.y + (end.y - start.y) * ratio)
            events.extend(self.tick(point, pinch).events)
        return events


@pytest.fixture
def config() -> Config:
    return Config(placement=PlacementConfig(seed=7))


@pytest.fixture
def zones() -> list[DeliveryZone]:
    return [
        DeliveryZone(id="mars-zone", position=Point2(3.0, 0.0), snap_radius=0.8, accepted_category="mars"),
        DeliveryZone(id="venus-zone", position=Point2(-3.0, 0.0), snap_radius=0.8, accepted_category="venus"),
    ]


@pytest.fixture
def engine(config: Config, zones: list[DeliveryZone]) -> InteractionEngine:
    """Engine with two zones and one `mars` entity (id 1) at the center."""
    engine = InteractionEngine(config, zones=zones)
    engine.grab.add_entity(GrabbableEntity(id=1, position=Point3(0.0, 0.0, 0.0), category="mars"))
    engine.grab.spawner.next_id = 100  # type: ignore[union-attr]
    return engine


@pytest.fixture
def driver(engine: InteractionEngine) -> HandDriver:
    return HandDriver(engine)
