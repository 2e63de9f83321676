"""Spawn positions for grabbable entities.

Positions are drawn by bounded rejection sampling inside the reachable area:
a candidate is dropped when it is too close to a delivery zone or to another
entity, and after `max_attempts` failed draws a deterministic point on a small
ring around the area center is used instead, so placement always terminates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from math import cos, pi, sin, sqrt
from typing import NamedTuple

import numpy as np

from ..config import PlacementConfig
from ..events import EntitySpawned
from ..models.entities import DeliveryZone, GrabbableEntity, SizeClass
from ..models.landmarks import Point2, Point3
from ..models.utils import Box

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = pi * (3 - sqrt(5))


class Footprint(NamedTuple):
    """Space already taken by an entity."""

    position: Point2
    size_class: SizeClass

    @classmethod
    def from_entity(cls, entity: GrabbableEntity) -> Footprint:
        return cls(entity.position.xy, entity.size_class)


@dataclass(frozen=True)
class Placement:
    position: Point3
    fallback: bool = False  # True when sampling failed and the fallback ring was used


class SpatialPlacer:
    def __init__(self, config: PlacementConfig | None = None, rng: np.random.Generator | None = None) -> None:
        self.config = config or PlacementConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        bounds = self.config.bounds
        self.bounds = Box(min_x=bounds.min_x, min_y=bounds.min_y, max_x=bounds.max_x, max_y=bounds.max_y)

    def min_distance(self, size_class: SizeClass) -> float:
        """Clearance an entity of this size class needs around it."""
        if size_class == SizeClass.SMALL:
            return self.config.small_min_entity_distance
        return self.config.min_entity_distance

    def required_separation(self, first: SizeClass, second: SizeClass) -> float:
        """Minimum distance between two entities, the larger clearance wins."""
        return max(self.min_distance(first), self.min_distance(second))

    def zone_clearance(self, zone: DeliveryZone) -> float:
        return self.config.zone_exclusion_margin + zone.snap_radius

    def fallback_position(self, index: int) -> Point2:
        """Deterministic position on the fallback ring, spread by the golden angle."""
        center_x, center_y = self.bounds.center
        radius = self.config.fallback_ring_radius
        angle = index * GOLDEN_ANGLE
        return Point2(*self.bounds.clamp((center_x + radius * cos(angle), center_y + radius * sin(angle))))

    def place(
        self,
        size_class: SizeClass = SizeClass.NORMAL,
        zones: Sequence[DeliveryZone] = (),
        placed: Sequence[Footprint] = (),
    ) -> Placement:
        """Find a position for one new entity."""
        config = self.config
        bounds = self.bounds

        # All candidates are drawn at once, checks stay vectorized
        candidates = self.rng.uniform(
            low=(bounds.min_x, bounds.min_y),
            high=(bounds.max_x, bounds.max_y),
            size=(config.max_attempts, 2),
        )
        valid = np.ones(config.max_attempts, dtype=bool)

        for zone in zones:
            distances = np.hypot(candidates[:, 0] - zone.position.x, candidates[:, 1] - zone.position.y)
            valid &= distances >= self.zone_clearance(zone)

        for footprint in placed:
            distances = np.hypot(candidates[:, 0] - footprint.position.x, candidates[:, 1] - footprint.position.y)
            valid &= distances >= self.required_separation(size_class, footprint.size_class)

        # The first valid draw is the one a draw-check-redraw loop would have kept
        if (valid_indices := np.flatnonzero(valid)).size:
            x, y = candidates[valid_indices[0]]
            return Placement(Point3(float(x), float(y), config.plane_z))

        x, y = self.fallback_position(len(placed))
        logger.debug("No valid position after %d attempts, using fallback (%.2f, %.2f)", config.max_attempts, x, y)
        return Placement(Point3(x, y, config.plane_z), fallback=True)

    def populate(
        self,
        size_classes: Iterable[SizeClass],
        zones: Sequence[DeliveryZone] = (),
        placed: Sequence[Footprint] = (),
    ) -> list[Placement]:
        """Place several entities, each one avoiding the previous ones."""
        footprints = list(placed)
        placements = []
        for size_class in size_classes:
            placement = self.place(size_class, zones, footprints)
            placements.append(placement)
            footprints.append(Footprint(placement.position.xy, size_class))
        return placements


class EntitySpawner:
    """Creates entities, keeping every category populated."""

    def __init__(
        self,
        placer: SpatialPlacer,
        categories: Sequence[str],
        first_id: int = 0,
    ) -> None:
        if not categories:
            raise ValueError("At least one category is needed to spawn entities")
        self.placer = placer
        self.categories = tuple(dict.fromkeys(categories))
        self.next_id = first_id

    def next_category(self, entities: Iterable[GrabbableEntity]) -> str:
        """Category with the fewest live entities, first declared one on ties."""
        counts = dict.fromkeys(self.categories, 0)
        for entity in entities:
            if entity.category in counts:
                counts[entity.category] += 1
        return min(self.categories, key=counts.__getitem__)

    def next_size_class(self) -> SizeClass:
        if self.placer.rng.random() < self.placer.config.small_ratio:
            return SizeClass.SMALL
        return SizeClass.NORMAL

    def spawn(
        self,
        entities: Sequence[GrabbableEntity],
        zones: Sequence[DeliveryZone] = (),
    ) -> tuple[GrabbableEntity, EntitySpawned]:
        """Create one entity placed away from the zones and the given entities."""
        size_class = self.next_size_class()
        placement = self.placer.place(size_class, zones, [Footprint.from_entity(e) for e in entities])
        entity = GrabbableEntity(
            id=self.next_id,
            position=placement.position,
            category=self.next_category(entities),
            size_class=size_class,
        )
        self.next_id += 1
        logger.debug("Spawned entity %d (%s, %s) at %s", entity.id, entity.category, size_class.value, entity.position)
        return entity, EntitySpawned(entity_id=entity.id, category=entity.category, fallback=placement.fallback)

    def populate(
        self,
        count: int,
        entities: Sequence[GrabbableEntity] = (),
        zones: Sequence[DeliveryZone] = (),
    ) -> list[tuple[GrabbableEntity, EntitySpawned]]:
        """Spawn `count` entities, each one seeing the previously spawned ones."""
        live = list(entities)
        spawned = []
        for _ in range(count):
            entity, event = self.spawn(live, zones)
            live.append(entity)
            spawned.append((entity, event))
        return spawned
