"""Tests for dwell (hover-to-confirm) selection."""

import pytest

from exhibit_gestures.config import DwellConfig
from exhibit_gestures.events import DwellComplete
from exhibit_gestures.interaction import DwellSelector
from exhibit_gestures.models import DwellTarget, Point2

INSIDE = Point2(0.1, 0.0)
OUTSIDE = Point2(3.0, 0.0)
DT = 0.1


class TestDwellSelector:
    @pytest.fixture
    def selector(self):
        selector = DwellSelector(DwellConfig(dwell_seconds=1.0, radius=0.5))
        selector.create("info", Point2(0.0, 0.0))
        return selector

    def test_progress_grows_while_inside(self, selector):
        target = selector.targets["info"]
        progresses = []
        for _ in range(5):
            selector.update(INSIDE, DT)
            progresses.append(target.progress)

        assert progresses == sorted(progresses)
        assert progresses[-1] == pytest.approx(0.5)

    def test_progress_resets_when_leaving(self, selector):
        target = selector.targets["info"]
        for _ in range(5):
            selector.update(INSIDE, DT)
        selector.update(OUTSIDE, DT)
        assert target.progress == 0.0

    def test_progress_resets_without_cursor(self, selector):
        selector.update(INSIDE, DT)
        selector.update(None, DT)
        assert selector.targets["info"].progress == 0.0

    def test_fires_once(self, selector):
        events = []
        for _ in range(30):
            events += selector.update(INSIDE, DT)

        assert events == [DwellComplete(target_id="info")]
        assert selector.targets["info"].fired
        assert selector.targets["info"].progress == 1.0

    def test_reset_rearms(self, selector):
        events = []
        for _ in range(11):
            events += selector.update(INSIDE, DT)
        selector.reset("info")
        assert selector.targets["info"].progress == 0.0
        for _ in range(11):
            events += selector.update(INSIDE, DT)
        assert len(events) == 2

    def test_fired_exclusive_target_locks_others(self, selector):
        other = selector.create("other", Point2(2.0, 0.0))
        for _ in range(11):
            selector.update(INSIDE, DT)
        assert selector.locking_target is selector.targets["info"]

        events = []
        for _ in range(20):
            events += selector.update(Point2(2.0, 0.0), DT)
        assert events == []
        assert other.progress == 0.0

        selector.reset("info")
        for _ in range(11):
            events += selector.update(Point2(2.0, 0.0), DT)
        assert events == [DwellComplete(target_id="other")]

    def test_non_exclusive_target_does_not_lock(self, selector):
        selector.create("hint", Point2(-2.0, 0.0), exclusive=False)
        for _ in range(11):
            selector.update(Point2(-2.0, 0.0), DT)
        assert selector.locking_target is None

        events = []
        for _ in range(11):
            events += selector.update(INSIDE, DT)
        assert events == [DwellComplete(target_id="info")]

    def test_zero_dt_does_not_progress(self, selector):
        selector.update(INSIDE, 0.0)
        assert selector.targets["info"].progress == 0.0

    def test_target_defaults_from_config(self, selector):
        target = selector.targets["info"]
        assert target.radius == 0.5
        assert target.dwell_seconds == 1.0

    def test_duplicate_target_rejected(self, selector):
        with pytest.raises(ValueError):
            selector.create("info", Point2(1.0, 1.0))

    def test_remove(self, selector):
        selector.remove("info")
        assert selector.update(INSIDE, 10.0) == []

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            DwellTarget(id="bad", position=Point2(0.0, 0.0), radius=0.0, dwell_seconds=1.0)

    def test_fires_after_exactly_dwell_seconds(self, selector):
        events = []
        for _ in range(10):
            events += selector.update(INSIDE, DT)

        assert events == [DwellComplete(target_id="info")]
        assert selector.targets["info"].progress == 1.0

    def test_overlapping_target_cleared_when_lock_starts(self):
        selector = DwellSelector(DwellConfig(radius=0.5))
        slow = selector.create("other", Point2(0.0, 0.0), dwell_seconds=5.0)
        fast = selector.create("info", Point2(0.0, 0.0), dwell_seconds=1.0)

        events = []
        for _ in range(11):
            events += selector.update(INSIDE, DT)

        assert events == [DwellComplete(target_id="info")]
        assert fast.fired
        assert slow.progress == 0.0
        assert not slow.fired
