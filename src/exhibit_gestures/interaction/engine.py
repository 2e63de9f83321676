from __future__ import annotations

import copy
import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from math import isfinite
from typing import Any

import numpy as np

from ..config import Config
from ..events import EntitySpawned, HandGesture, InteractionEvent, ReleaseReason
from ..mapping import CoordinateMapper, PoseCursorTracker
from ..models.entities import DeliveryZone, DwellTarget, GrabbableEntity
from ..models.landmarks import HandFrame, LandmarkFrame, Point3
from .dwell import DwellSelector
from .grab import GrabStateMachine, HandTrackerState
from .hand_pose import GestureHoldTrigger, classify_hand_pose
from .pinch import PinchGestureDetector
from .placement import EntitySpawner, SpatialPlacer
from .two_hands import TwoHandPinchTracker, TwoHandSpan

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """What one `update` call produced, for the rendering/audio/UI side."""

    cursors: tuple[Point3 | None, ...]  # play-space pinch point per hand slot
    gestures: tuple[HandGesture | None, ...]
    dwell_cursor: Point3 | None = None
    events: list[InteractionEvent] = field(default_factory=list)
    paused: bool = False
    duplicate: bool = False  # same tick already processed, nothing happened
    span: TwoHandSpan | None = None  # while both hands pinch

    def to_dict(self) -> dict[str, Any]:
        """Export the tick result as a dictionary."""
        return {
            "cursors": [None if cursor is None else list(cursor) for cursor in self.cursors],
            "gestures": [None if gesture is None else gesture.value for gesture in self.gestures],
            "dwell_cursor": None if self.dwell_cursor is None else list(self.dwell_cursor),
            "events": [event.to_dict() for event in self.events],
            "paused": self.paused,
            "duplicate": self.duplicate,
            "span": None if self.span is None else dict(self.span._asdict(), center=list(self.span.center)),
        }


class InteractionEngine:
    """Turns per-frame landmarks into interaction events.

    One instance per session, fed once per rendered frame through `update`.
    It owns all the interaction state: hand slots, entities, dwell targets.
    """

    def __init__(
        self,
        config: Config | None = None,
        zones: Iterable[DeliveryZone] = (),
        dwell_targets: Iterable[DwellTarget] = (),
        categories: Sequence[str] | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or Config()
        zones = tuple(zones)

        self.mapper = CoordinateMapper(self.config.mapping)
        self.pose_cursor = PoseCursorTracker(self.mapper)
        self.pinch_detector = PinchGestureDetector(self.config.pinch)

        if categories is None:
            categories = [zone.accepted_category for zone in zones]
        self.placer = SpatialPlacer(self.config.placement, rng)
        spawner = EntitySpawner(self.placer, categories) if categories else None
        self.grab = GrabStateMachine(self.config.grab, zones, spawner)

        self.dwell = DwellSelector(self.config.dwell, dwell_targets)
        self.hold_triggers = tuple(GestureHoldTrigger(hand.hand_id, self.config.hand_pose) for hand in self.hands)
        self.two_hands = TwoHandPinchTracker(self.mapper, self.config.two_hands)

        self.paused = False
        self.last_tick: float | None = None
        self._last_dwell_cursor: Point3 | None = None

    @property
    def hands(self) -> tuple[HandTrackerState, ...]:
        return self.grab.hands

    @property
    def zones(self) -> tuple[DeliveryZone, ...]:
        return self.grab.zones

    @property
    def entities(self) -> list[GrabbableEntity]:
        return list(self.grab.entities.values())

    def populate(self, count: int) -> list[EntitySpawned]:
        """Spawn the initial entities of a session."""
        return self.grab.spawn(count)

    def respawn(self, count: int) -> list[InteractionEvent]:
        """Drop every entity and spawn `count` new ones, e.g. on a reset gesture."""
        events: list[InteractionEvent] = list(self.grab.release_all(ReleaseReason.RESET))
        for entity_id in list(self.grab.entities):
            self.grab.remove_entity(entity_id)
        events.extend(self.populate(count))
        return events

    def pause(self) -> None:
        """Stop interactions, e.g. while a fact panel is shown. Held entities drop on the next tick."""
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def update(self, frame: LandmarkFrame | None, delta_time: float, now: float | None = None) -> TickResult:
        """Process one frame.

        Args:
            frame: Detector output for this tick, `None` when nothing was detected
            delta_time: Seconds since the previous tick
            now: Monotonic timestamp of the tick, defaults to the frame timestamp, then to the current time

        Returns:
            Cursors and events of this tick.
        """
        frame = frame or LandmarkFrame()
        if now is None:
            now = frame.timestamp if frame.timestamp is not None else time.monotonic()
        dt = delta_time if isfinite(delta_time) and delta_time > 0 else 0.0

        if self.last_tick is not None and now == self.last_tick:
            logger.debug("Tick %.3f already processed, ignored", now)
            return self._result([], duplicate=True)
        self.last_tick = now

        if self.paused:
            return self._paused_tick(frame)

        events: list[InteractionEvent] = []
        visible: dict[int, HandFrame] = {}
        pinching: dict[int, bool] = {}

        for hand in frame.hands:
            if not 0 <= hand.hand_id < len(self.hands) or hand.hand_id in visible:
                logger.debug("Ignoring extra hand in slot %d", hand.hand_id)
                continue
            if not hand.is_valid:
                logger.debug("Skipping hand %d with malformed landmarks", hand.hand_id)
                continue
            visible[hand.hand_id] = hand

        for tracker in self.hands:
            hand_id = tracker.hand_id
            if (hand := visible.get(hand_id)) is None:
                events.extend(self.grab.lose_hand(hand_id, now))
                self.hold_triggers[hand_id].reset()
                continue

            is_pinching = self.pinch_detector.update_hand(tracker.pinch, hand, now)
            pinching[hand_id] = is_pinching
            events.extend(self.grab.update_hand(hand_id, self.mapper.pinch_point(hand), is_pinching, now, dt))

            tracker.gesture = HandGesture.PINCH if is_pinching else classify_hand_pose(hand, self.config.hand_pose)
            if (hold := self.hold_triggers[hand_id].update(tracker.gesture, now)) is not None:
                events.append(hold)

        if (capture := self.two_hands.update(visible, pinching, now)) is not None:
            events.append(capture)

        self._last_dwell_cursor = self._dwell_cursor(frame, visible)
        events.extend(self.dwell.update(self._last_dwell_cursor, dt))

        return self._result(events)

    def _paused_tick(self, frame: LandmarkFrame) -> TickResult:
        events: list[InteractionEvent] = list(self.grab.release_all(ReleaseReason.PAUSED))
        for trigger in self.hold_triggers:
            trigger.reset()
        self.two_hands.reset()

        # Cursors are still reported so the UI can draw them over the open panel
        cursors: list[Point3 | None] = [None] * len(self.hands)
        for hand in frame.hands:
            if 0 <= hand.hand_id < len(self.hands) and hand.is_valid:
                cursors[hand.hand_id] = self.mapper.pinch_point(hand)

        return TickResult(
            cursors=tuple(cursors),
            gestures=(None,) * len(self.hands),
            dwell_cursor=None,
            events=events,
            paused=True,
        )

    def _dwell_cursor(self, frame: LandmarkFrame, visible: dict[int, HandFrame]) -> Point3 | None:
        source = self.config.dwell.cursor_source

        pose_cursor = None
        if source != "hand":
            pose_cursor = self.pose_cursor.update(frame.pose)

        hand_cursor = None
        if source != "pose" and visible:
            hand_cursor = self.mapper.index_tip(visible[min(visible)])

        if source == "hand":
            return hand_cursor
        if source == "pose":
            return pose_cursor
        return hand_cursor if hand_cursor is not None else pose_cursor

    def _result(self, events: list[InteractionEvent], duplicate: bool = False) -> TickResult:
        return TickResult(
            cursors=tuple(tracker.cursor for tracker in self.hands),
            gestures=tuple(tracker.gesture for tracker in self.hands),
            dwell_cursor=self._last_dwell_cursor,
            events=events,
            paused=self.paused,
            duplicate=duplicate,
            span=self.two_hands.span,
        )


def step(
    engine: InteractionEngine, frame: LandmarkFrame | None, delta_time: float, now: float | None = None
) -> tuple[InteractionEngine, list[InteractionEvent]]:
    """Pure form of `InteractionEngine.update`: the given engine is left untouched."""
    new_engine = copy.deepcopy(engine)
    result = new_engine.update(frame, delta_time, now)
    return new_engine, result.events
