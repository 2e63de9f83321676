"""Tests for the pinch hysteresis."""

import pytest

from exhibit_gestures.config import PinchConfig
from exhibit_gestures.interaction import PinchGestureDetector, PinchState
from exhibit_gestures.models import Point3


def tips(distance: float) -> tuple[Point3, Point3]:
    return Point3(0.5, 0.5), Point3(0.5 + distance, 0.5)


class TestPinchGestureDetector:
    @pytest.fixture
    def detector(self):
        return PinchGestureDetector(PinchConfig())

    def feed(self, detector, state, readings):
        """Feed (distance, timestamp) readings and return the pinch state after each one."""
        return [detector.update(state, *tips(distance), now) for distance, now in readings]

    def test_distances_within_hysteresis_band_keep_pinch(self, detector):
        state = PinchState()
        results = self.feed(detector, state, [(0.05, 0.0), (0.05, 0.033), (0.09, 0.066), (0.05, 0.1)])
        assert results == [True, True, True, True]

    def test_no_pinch_between_thresholds_without_entering(self, detector):
        state = PinchState()
        assert self.feed(detector, state, [(0.2, 0.0), (0.1, 0.1), (0.09, 0.2)]) == [False, False, False]

    def test_brief_opening_is_ignored(self, detector):
        state = PinchState()
        results = self.feed(detector, state, [(0.05, 0.0), (0.2, 0.1), (0.05, 0.2)])
        assert results == [True, True, True]

    def test_release_after_grace_period(self, detector):
        state = PinchState()
        results = self.feed(detector, state, [(0.05, 0.0), (0.2, 0.2), (0.2, 0.3)])
        assert results == [True, True, False]

    def test_hysteresis_band_holds_after_grace(self, detector):
        state = PinchState()
        results = self.feed(detector, state, [(0.05, 0.0), (0.1, 1.0), (0.12, 2.0)])
        assert results == [True, True, True]

    def test_close_readings_refresh_grace(self, detector):
        state = PinchState()
        # Last close reading at 0.2, so still pinching at 0.4
        results = self.feed(detector, state, [(0.05, 0.0), (0.05, 0.2), (0.2, 0.4), (0.2, 0.5)])
        assert results == [True, True, True, False]

    def test_state_keeps_raw_distance(self, detector):
        state = PinchState()
        detector.update(state, *tips(0.07), 0.0)
        assert state.raw_distance == pytest.approx(0.07)
        assert state.last_transition_timestamp == 0.0

    def test_reset(self, detector):
        state = PinchState()
        detector.update(state, *tips(0.05), 0.0)
        state.reset()
        assert not state.is_pinching
        assert state.raw_distance == float("inf")

    def test_exit_threshold_below_enter_rejected(self):
        with pytest.raises(ValueError):
            PinchConfig(enter_threshold=0.1, exit_threshold=0.05)
