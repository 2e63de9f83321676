from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..config import GrabConfig
from ..events import Deliver, EntitySpawned, GrabRelease, GrabStart, HandGesture, InteractionEvent, ReleaseReason
from ..models.entities import DeliveryZone, GrabbableEntity, SizeClass
from ..models.landmarks import MAX_HANDS, Point3
from ..models.utils import planar_distance
from ..smoothing import SpringFollower
from .pinch import PinchState
from .placement import EntitySpawner

logger = logging.getLogger(__name__)


class HandPhase(str, Enum):
    IDLE = "idle"  # Nothing under the hand
    NEAR = "near"  # An entity is within grab radius, not pinched yet
    GRABBED = "grabbed"  # An entity follows the hand


@dataclass
class HandTrackerState:
    """Everything remembered about one hand slot between ticks."""

    hand_id: int
    follower: SpringFollower = field(default_factory=SpringFollower)
    pinch: PinchState = field(default_factory=PinchState)
    phase: HandPhase = HandPhase.IDLE
    was_pinching: bool = False
    cursor: Point3 | None = None
    candidate_id: int | None = None
    grabbed_id: int | None = None
    last_seen: float | None = None
    gesture: HandGesture | None = None

    def clear_transient(self) -> None:
        """Forget what only makes sense while the hand is visible."""
        self.cursor = None
        self.candidate_id = None
        self.gesture = None
        self.phase = HandPhase.GRABBED if self.grabbed_id is not None else HandPhase.IDLE

    def reset(self) -> None:
        """Back to a never-seen slot."""
        self.grabbed_id = None
        self.clear_transient()
        self.pinch.reset()
        self.follower.reset()
        self.was_pinching = False
        self.last_seen = None


class GrabStateMachine:
    """Grab, carry, deliver and release of entities, per hand.

    A hand grabs the nearest entity within reach on the rising edge of its
    pinch only, so a sustained pinch sweeping over entities never picks them up.
    A held entity is delivered as soon as the pinch point enters a zone, while
    the pinch is still held. A matching zone consumes the entity and a
    replacement is spawned, a wrong zone drops it with a bounce-back window.
    """

    def __init__(
        self,
        config: GrabConfig | None = None,
        zones: Iterable[DeliveryZone] = (),
        spawner: EntitySpawner | None = None,
        hands_count: int = MAX_HANDS,
    ) -> None:
        self.config = config or GrabConfig()
        self.zones: tuple[DeliveryZone, ...] = tuple(zones)
        if len({zone.id for zone in self.zones}) != len(self.zones):
            raise ValueError("Delivery zone ids must be unique")
        self.spawner = spawner
        self.entities: dict[int, GrabbableEntity] = {}
        self.hands: tuple[HandTrackerState, ...] = tuple(
            HandTrackerState(hand_id=hand_id, follower=SpringFollower(self.config.follow_stiffness))
            for hand_id in range(hands_count)
        )

    def add_entity(self, entity: GrabbableEntity) -> None:
        if entity.id in self.entities:
            raise ValueError(f"Entity {entity.id} already exists")
        self.entities[entity.id] = entity

    def remove_entity(self, entity_id: int) -> GrabbableEntity:
        entity = self.entities.pop(entity_id)
        for tracker in self.hands:
            if tracker.grabbed_id == entity_id:
                tracker.grabbed_id = None
                tracker.follower.reset()
                tracker.phase = HandPhase.IDLE
            if tracker.candidate_id == entity_id:
                tracker.candidate_id = None
        return entity

    def spawn(self, count: int = 1) -> list[EntitySpawned]:
        """Add `count` new entities using the spawner."""
        if self.spawner is None:
            raise RuntimeError("No spawner configured")
        events = []
        for entity, event in self.spawner.populate(count, list(self.entities.values()), self.zones):
            self.add_entity(entity)
            events.append(event)
        return events

    def grabbed_entity(self, hand_id: int) -> GrabbableEntity | None:
        grabbed_id = self.hands[hand_id].grabbed_id
        return None if grabbed_id is None else self.entities.get(grabbed_id)

    def grab_radius(self, entity: GrabbableEntity) -> float:
        if entity.size_class == SizeClass.SMALL:
            return self.config.small_grab_radius
        return self.config.grab_radius

    def find_candidate(self, point: Point3) -> GrabbableEntity | None:
        """Closest free entity strictly within its grab radius, lowest id on ties."""
        best: GrabbableEntity | None = None
        best_distance = 0.0
        for entity in sorted(self.entities.values(), key=lambda e: e.id):
            if entity.is_grabbed:
                continue
            distance = planar_distance(point, entity.position)
            if distance >= self.grab_radius(entity):
                continue
            if best is None or distance < best_distance:
                best, best_distance = entity, distance
        return best

    def find_zone(self, point: Point3) -> DeliveryZone | None:
        """Closest zone whose snap radius contains the point."""
        containing = [zone for zone in self.zones if zone.contains(point)]
        if not containing:
            return None
        return min(containing, key=lambda zone: planar_distance(point, zone.position))

    def update_hand(
        self, hand_id: int, pinch_point: Point3, is_pinching: bool, now: float, dt: float
    ) -> list[InteractionEvent]:
        """Run one tick for a visible hand."""
        tracker = self.hands[hand_id]
        tracker.cursor = pinch_point
        tracker.last_seen = now
        rising_edge = is_pinching and not tracker.was_pinching
        tracker.was_pinching = is_pinching
        events: list[InteractionEvent] = []

        if tracker.grabbed_id is not None:
            entity = self.entities.get(tracker.grabbed_id)
            if entity is None:
                # Removed behind our back
                tracker.grabbed_id = None
                tracker.follower.reset()
            else:
                entity.position = tracker.follower.update(entity.position, pinch_point, dt)
                if not is_pinching:
                    if (release := self.release(hand_id, ReleaseReason.DROPPED)) is not None:
                        events.append(release)
                elif (zone := self.find_zone(pinch_point)) is not None:
                    events.extend(self._deliver(tracker, entity, zone, now))
                else:
                    tracker.phase = HandPhase.GRABBED
                    return events

        # Only a free hand looks for something to grab
        candidate = self.find_candidate(pinch_point)
        tracker.candidate_id = None if candidate is None else candidate.id

        if rising_edge and candidate is not None:
            candidate.grabbed_by = hand_id
            candidate.rejected_until = None
            tracker.grabbed_id = candidate.id
            tracker.candidate_id = None
            tracker.follower.reset()
            tracker.phase = HandPhase.GRABBED
            logger.debug("Hand %d grabbed entity %d", hand_id, candidate.id)
            events.append(GrabStart(entity_id=candidate.id, hand_id=hand_id))
        else:
            tracker.phase = HandPhase.NEAR if candidate is not None else HandPhase.IDLE

        return events

    def lose_hand(self, hand_id: int, now: float) -> list[InteractionEvent]:
        """Run one tick for a hand missing from the frame.

        The held entity survives short tracking dropouts and is only dropped when
        the hand has been gone for longer than `hand_loss_grace`.
        """
        tracker = self.hands[hand_id]
        tracker.clear_transient()
        if tracker.last_seen is None or now - tracker.last_seen <= self.config.hand_loss_grace:
            return []

        events: list[InteractionEvent] = []
        if (release := self.release(hand_id, ReleaseReason.HAND_LOST)) is not None:
            events.append(release)
        logger.debug("Hand %d lost for %.3fs, slot reset", hand_id, now - tracker.last_seen)
        tracker.reset()
        return events

    def release(self, hand_id: int, reason: ReleaseReason = ReleaseReason.DROPPED) -> GrabRelease | None:
        """Drop whatever the hand holds, where it is."""
        tracker = self.hands[hand_id]
        if tracker.grabbed_id is None:
            return None

        entity_id = tracker.grabbed_id
        if (entity := self.entities.get(entity_id)) is not None:
            entity.grabbed_by = None
        tracker.grabbed_id = None
        tracker.follower.reset()
        tracker.phase = HandPhase.IDLE
        logger.debug("Hand %d released entity %d (%s)", hand_id, entity_id, reason.value)
        return GrabRelease(entity_id=entity_id, hand_id=hand_id, reason=reason)

    def release_all(self, reason: ReleaseReason) -> list[GrabRelease]:
        events = []
        for tracker in self.hands:
            if (release := self.release(tracker.hand_id, reason)) is not None:
                events.append(release)
            tracker.candidate_id = None
        return events

    def _deliver(
        self, tracker: HandTrackerState, entity: GrabbableEntity, zone: DeliveryZone, now: float
    ) -> list[InteractionEvent]:
        success = zone.accepts(entity)
        events: list[InteractionEvent] = [Deliver(entity_id=entity.id, zone_id=zone.id, success=success)]

        tracker.grabbed_id = None
        tracker.follower.reset()
        tracker.phase = HandPhase.IDLE
        entity.grabbed_by = None

        if success:
            self.entities.pop(entity.id)
            logger.debug("Entity %d delivered to zone %s", entity.id, zone.id)
            if self.spawner is not None:
                events.extend(self.spawn(1))
        else:
            entity.rejected_until = now + self.config.bounce_window
            logger.debug(
                "Entity %d (%s) rejected by zone %s (%s)", entity.id, entity.category, zone.id, zone.accepted_category
            )

        return events
