"""Tests for spawn placement and category balancing."""

from itertools import combinations
from math import isfinite

import numpy as np
import pytest

from exhibit_gestures.config import BoundsConfig, PlacementConfig
from exhibit_gestures.interaction import EntitySpawner, SpatialPlacer
from exhibit_gestures.models import DeliveryZone, GrabbableEntity, Point2, Point3, SizeClass, planar_distance

ZONES = [
    DeliveryZone(id="mars-zone", position=Point2(-3.0, -2.0), snap_radius=0.8, accepted_category="mars"),
    DeliveryZone(id="venus-zone", position=Point2(0.0, -2.0), snap_radius=0.8, accepted_category="venus"),
    DeliveryZone(id="jupiter-zone", position=Point2(3.0, -2.0), snap_radius=0.8, accepted_category="jupiter"),
]


class TestSpatialPlacer:
    @pytest.fixture
    def placer(self):
        return SpatialPlacer(PlacementConfig(seed=42))

    def test_placed_entities_respect_separation(self, placer):
        size_classes = [SizeClass.NORMAL, SizeClass.SMALL] * 4
        placements = placer.populate(size_classes, ZONES)

        sampled = [(p, size) for p, size in zip(placements, size_classes, strict=True) if not p.fallback]
        assert len(sampled) >= 2
        for (first, first_size), (second, second_size) in combinations(sampled, 2):
            distance = planar_distance(first.position, second.position)
            assert distance >= placer.required_separation(first_size, second_size)

    def test_placed_entities_avoid_zones(self, placer):
        placements = placer.populate([SizeClass.NORMAL] * 6, ZONES)
        for placement in placements:
            if placement.fallback:
                continue
            for zone in ZONES:
                assert planar_distance(placement.position, zone.position) >= placer.zone_clearance(zone)

    def test_placed_entities_inside_bounds(self, placer):
        for placement in placer.populate([SizeClass.NORMAL] * 6, ZONES):
            assert placer.bounds.contains(placement.position)
            assert placement.position.z == placer.config.plane_z

    def test_mixed_sizes_use_larger_clearance(self, placer):
        assert placer.required_separation(SizeClass.SMALL, SizeClass.SMALL) == 1.0
        assert placer.required_separation(SizeClass.SMALL, SizeClass.NORMAL) == 1.5

    def test_crowded_area_falls_back(self):
        config = PlacementConfig(
            bounds=BoundsConfig(min_x=-1.0, max_x=1.0, min_y=-1.0, max_y=1.0), max_attempts=10, seed=1
        )
        placer = SpatialPlacer(config)
        placements = placer.populate([SizeClass.NORMAL] * 12)

        assert any(placement.fallback for placement in placements)
        for placement in placements:
            assert all(isfinite(coord) for coord in placement.position)
            assert placer.bounds.contains(placement.position)

    def test_fallback_is_deterministic(self):
        placer = SpatialPlacer(PlacementConfig())
        assert placer.fallback_position(3) == placer.fallback_position(3)
        assert placer.fallback_position(3) != placer.fallback_position(4)
        assert planar_distance(placer.fallback_position(0), placer.bounds.center) == pytest.approx(0.5)

    def test_fallback_ring_clamped_to_bounds(self):
        config = PlacementConfig(
            bounds=BoundsConfig(min_x=0.0, max_x=0.1, min_y=0.0, max_y=0.1), fallback_ring_radius=5.0
        )
        placer = SpatialPlacer(config)
        for index in range(5):
            assert placer.bounds.contains(placer.fallback_position(index))

    def test_same_seed_same_positions(self):
        first = SpatialPlacer(PlacementConfig(seed=3)).populate([SizeClass.NORMAL] * 4, ZONES)
        second = SpatialPlacer(PlacementConfig(), np.random.default_rng(3)).populate([SizeClass.NORMAL] * 4, ZONES)
        assert first == second


class TestEntitySpawner:
    @pytest.fixture
    def spawner(self):
        return EntitySpawner(SpatialPlacer(PlacementConfig(seed=5)), ["mars", "venus", "jupiter"])

    def test_categories_stay_balanced(self, spawner):
        spawned = spawner.populate(9, zones=ZONES)
        categories = [entity.category for entity, _ in spawned]
        assert {category: categories.count(category) for category in set(categories)} == {
            "mars": 3,
            "venus": 3,
            "jupiter": 3,
        }

    def test_least_represented_category_first(self, spawner):
        entities = [
            GrabbableEntity(id=0, position=Point3(0.0, 0.0), category="mars"),
            GrabbableEntity(id=1, position=Point3(1.0, 0.0), category="jupiter"),
        ]
        assert spawner.next_category(entities) == "venus"

    def test_ties_follow_declaration_order(self, spawner):
        assert spawner.next_category([]) == "mars"

    def test_ids_increase(self, spawner):
        spawned = spawner.populate(3)
        assert [entity.id for entity, _ in spawned] == [0, 1, 2]
        assert [event.entity_id for _, event in spawned] == [0, 1, 2]

    def test_spawn_event_reports_fallback(self):
        config = PlacementConfig(bounds=BoundsConfig(min_x=-0.5, max_x=0.5, min_y=-0.5, max_y=0.5), seed=2)
        spawner = EntitySpawner(SpatialPlacer(config), ["mars"])
        events = [event for _, event in spawner.populate(4)]
        assert any(event.fallback for event in events)

    def test_no_category(self):
        with pytest.raises(ValueError):
            EntitySpawner(SpatialPlacer(), [])
