"""Synthetic landmarks and a scripted session, to run the engine without a camera.

Hands are laid out in normalized image coordinates (y down) with the wrist
below the fingers, like a hand raised in front of the camera. The thumb and
index tips are placed on each side of the requested pinch point, so the
pinch distance seen by the detector is exactly the requested one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from math import ceil

from .config import Config
from .events import InteractionEvent
from .interaction import DeliveryRound, InteractionEngine
from .models.entities import DeliveryZone, DwellTarget, GrabbableEntity
from .models.landmarks import POSE_LANDMARKS_COUNT, LandmarkFrame, Point2, Point3, PoseLandmark
from .models.utils import planar_distance

logger = logging.getLogger(__name__)

OPEN_DISTANCE = 0.2  # Thumb/index distance of a relaxed open hand
PINCH_DISTANCE = 0.03  # Thumb/index distance of a firm pinch

# (x offset, y offsets of MCP/PIP/DIP/TIP) of the four long fingers, relative to the pinch point
FINGERS_LAYOUT = (
    (-0.02, (0.10, 0.06, 0.03, 0.0)),  # Index, tip replaced by the pinch layout
    (0.01, (0.10, 0.05, 0.01, -0.03)),  # Middle
    (0.04, (0.10, 0.06, 0.03, 0.0)),  # Ring
    (0.07, (0.11, 0.08, 0.06, 0.04)),  # Pinky
)
WRIST_OFFSET = 0.2
CURLED_TIP_OFFSET = 0.13  # Curled tips end up just above their knuckle


def synthetic_hand(
    center: Point2, pinch_distance: float = OPEN_DISTANCE, fist: bool = False, z: float = 0.0
) -> tuple[Point3, ...]:
    """Build the 21 landmarks of a hand whose pinch point is at `center` (normalized coordinates)."""
    cx, cy = center
    landmarks = [Point3(cx, cy + WRIST_OFFSET, z)]

    if fist:
        # Thumb stays out, away from the curled index
        landmarks += [
            Point3(cx - 0.05, cy + 0.18, z),
            Point3(cx - 0.09, cy + 0.16, z),
            Point3(cx - 0.13, cy + 0.14, z),
            Point3(cx - 0.17, cy + CURLED_TIP_OFFSET, z),
        ]
    else:
        landmarks += [
            Point3(cx - 0.04, cy + 0.17, z),
            Point3(cx - 0.06, cy + 0.12, z),
            Point3(cx - pinch_distance / 4 - 0.02, cy + 0.05, z),
            Point3(cx - pinch_distance / 2, cy, z),
        ]

    for finger_index, (x_offset, y_offsets) in enumerate(FINGERS_LAYOUT):
        mcp, pip, dip, tip = (Point3(cx + x_offset, cy + y_offset, z) for y_offset in y_offsets)
        if fist:
            pip = Point3(mcp.x, cy + 0.07, z)
            dip = Point3(mcp.x, cy + 0.10, z)
            tip = Point3(mcp.x, cy + CURLED_TIP_OFFSET, z)
        elif finger_index == 0:
            tip = Point3(cx + pinch_distance / 2, cy, z)
        landmarks += [mcp, pip, dip, tip]

    return tuple(landmarks)


def synthetic_pose(fingertip: Point2, z: float = 0.0) -> tuple[Point3, ...]:
    """Build the 33 pose landmarks of a person raising one index finger at `fingertip` (normalized)."""
    x, y = fingertip
    landmarks = [Point3(0.5, 0.7, z)] * POSE_LANDMARKS_COUNT
    landmarks[PoseLandmark.NOSE] = Point3(0.5, 0.3, z)
    landmarks[PoseLandmark.LEFT_INDEX] = Point3(x, y, z)
    landmarks[PoseLandmark.RIGHT_INDEX] = Point3(0.6, max(y, 0.9), z)
    return tuple(landmarks)


@dataclass
class ScriptStep:
    """Where the (single) synthetic hand is during one tick, in play space."""

    pinch_point: Point2 | None
    pinch_distance: float = OPEN_DISTANCE
    fist: bool = False


def glide(start: Point2, end: Point2, ticks: int, pinch_distance: float) -> Iterator[ScriptStep]:
    """Linear move, `end` included."""
    for tick in range(1, ticks + 1):
        ratio = tick / ticks
        yield ScriptStep(
            Point2(start.x + (end.x - start.x) * ratio, start.y + (end.y - start.y) * ratio), pinch_distance
        )


def hold(point: Point2, ticks: int, pinch_distance: float = OPEN_DISTANCE, fist: bool = False) -> Iterator[ScriptStep]:
    for _ in range(ticks):
        yield ScriptStep(point, pinch_distance, fist)


class ScriptedSession:
    """Drives an engine with one synthetic hand carrying entities to their zones.

    For each delivery, the hand reaches the lowest-id free entity with an open
    hand, pinches it, carries it above the row of zones, then lowers it into
    the zone of its category and opens. Sessions end with a hover on a dwell
    target and a held fist. Deliveries are scored in a timed round started
    with the session.
    """

    def __init__(self, engine: InteractionEngine, fps: float = 30.0, speed: float = 4.0) -> None:
        self.engine = engine
        self.fps = fps
        self.speed = speed  # Play-space units per second
        self.tick = 0
        self.position = Point2(engine.config.mapping.offset_x, engine.config.mapping.offset_y)
        self.round = DeliveryRound(engine.config.scoring)
        self.round.start(self.now)

    @property
    def now(self) -> float:
        return self.tick / self.fps

    def ticks_for(self, start: Point2, end: Point2) -> int:
        return max(1, ceil(planar_distance(start, end) / self.speed * self.fps))

    def ticks_for_duration(self, seconds: float) -> int:
        return ceil(seconds * self.fps) + 2

    def frame(self, step: ScriptStep) -> LandmarkFrame:
        if step.pinch_point is None:
            return LandmarkFrame(timestamp=self.now)
        mapper = self.engine.mapper
        center = mapper.to_normalized(step.pinch_point)
        hand = synthetic_hand(center, step.pinch_distance, step.fist)
        return LandmarkFrame.from_lists([hand], timestamp=self.now)

    def play(self, steps: Iterable[ScriptStep]) -> Iterator[tuple[float, InteractionEvent]]:
        """Feed the steps to the engine, yield the events with their timestamp."""
        for step in steps:
            self.tick += 1
            if step.pinch_point is not None:
                self.position = step.pinch_point
            result = self.engine.update(self.frame(step), 1 / self.fps, self.now)
            for event in result.events:
                yield self.now, event
            if (over := self.round.update(result.events, self.now)) is not None:
                yield self.now, over

    def release_ticks(self) -> int:
        # Open long enough for the pinch grace period to end
        return self.ticks_for_duration(self.engine.config.pinch.grace_period) + 2

    def delivery_steps(self, entity: GrabbableEntity, zone: DeliveryZone) -> Iterator[ScriptStep]:
        """Reach, pinch, carry above the zones, lower into the zone, open."""
        target = entity.position.xy
        yield from glide(self.position, target, self.ticks_for(self.position, target), OPEN_DISTANCE)
        yield from hold(target, 3, PINCH_DISTANCE)

        clearance = max(z.position.y + z.snap_radius for z in self.engine.zones) + 0.4
        lifted = Point2(target.x, max(target.y, clearance))
        above_zone = Point2(zone.position.x, lifted.y)
        yield from glide(target, lifted, self.ticks_for(target, lifted), PINCH_DISTANCE)
        yield from glide(lifted, above_zone, self.ticks_for(lifted, above_zone), PINCH_DISTANCE)
        yield from glide(above_zone, zone.position, self.ticks_for(above_zone, zone.position), PINCH_DISTANCE)
        yield from hold(zone.position, self.release_ticks(), OPEN_DISTANCE)

    def deliver(self, count: int) -> Iterator[tuple[float, InteractionEvent]]:
        """Deliver `count` entities, each to the zone accepting its category."""
        for _ in range(count):
            free = sorted((e for e in self.engine.entities if not e.is_grabbed), key=lambda e: e.id)
            target = next(
                ((entity, zone) for entity in free for zone in self.engine.zones if zone.accepts(entity)), None
            )
            if target is None:
                logger.warning("No entity left with a matching zone")
                return
            entity, zone = target
            logger.debug("Carrying entity %d (%s) to zone %s", entity.id, entity.category, zone.id)
            yield from self.play(self.delivery_steps(entity, zone))

    def dwell_on(self, target: DwellTarget) -> Iterator[tuple[float, InteractionEvent]]:
        """Hover the index tip over a dwell target until it fires."""
        # The index tip sits right of the pinch point in the image, so left in play space when mirrored
        shift = OPEN_DISTANCE / 2 * self.engine.config.mapping.width_scale
        if self.engine.config.mapping.mirror:
            shift = -shift
        hover = Point2(target.position.x - shift, target.position.y)
        steps = [
            *glide(self.position, hover, self.ticks_for(self.position, hover), OPEN_DISTANCE),
            *hold(hover, self.ticks_for_duration(target.dwell_seconds)),
        ]
        yield from self.play(steps)

    def hold_fist(self) -> Iterator[tuple[float, InteractionEvent]]:
        ticks = self.ticks_for_duration(self.engine.config.hand_pose.hold_seconds)
        yield from self.play(hold(self.position, ticks, fist=True))

    def run(self, deliveries: int) -> Iterator[tuple[float, InteractionEvent]]:
        yield from self.deliver(deliveries)
        for target in list(self.engine.dwell.targets.values()):
            yield from self.dwell_on(target)
            self.engine.dwell.reset(target.id)
        yield from self.hold_fist()
        # Hand leaves the frame
        yield from self.play([ScriptStep(None)] * self.ticks_for_duration(self.engine.config.grab.hand_loss_grace))


def exhibit_layout(config: Config, categories: tuple[str, ...] = ("mars", "venus", "jupiter")) -> InteractionEngine:
    """Engine with one zone per category along the bottom of the play area and an info dwell target."""
    bounds = config.placement.bounds
    width = bounds.max_x - bounds.min_x
    zones = [
        DeliveryZone(
            id=f"{category}-zone",
            position=Point2(bounds.min_x + width * (index + 0.5) / len(categories), bounds.min_y + 0.5),
            snap_radius=0.8,
            accepted_category=category,
        )
        for index, category in enumerate(categories)
    ]
    info = DwellTarget(
        id="info",
        position=Point2(bounds.max_x - 0.5, bounds.max_y - 0.5),
        radius=config.dwell.radius,
        dwell_seconds=config.dwell.dwell_seconds,
    )
    return InteractionEngine(config, zones=zones, dwell_targets=[info], categories=categories)
