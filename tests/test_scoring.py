"""Tests for timed delivery rounds."""

import pytest

from exhibit_gestures.config import ScoringConfig
from exhibit_gestures.events import Deliver, GrabStart, RoundOver
from exhibit_gestures.interaction import DeliveryRound

SUCCESS = Deliver(entity_id=1, zone_id="mars-zone", success=True)
REJECTED = Deliver(entity_id=2, zone_id="venus-zone", success=False)


class TestDeliveryRound:
    @pytest.fixture
    def game_round(self):
        game_round = DeliveryRound(ScoringConfig(round_seconds=60.0))
        game_round.start(10.0)
        return game_round

    def test_not_started(self):
        game_round = DeliveryRound()
        assert not game_round.is_active
        assert game_round.update([SUCCESS], 1.0) is None
        assert game_round.score == 0
        assert game_round.time_left(1.0) == 60.0

    def test_only_successful_deliveries_score(self, game_round):
        assert game_round.update([SUCCESS, REJECTED, GrabStart(entity_id=3, hand_id=0)], 11.0) is None
        assert game_round.score == 100
        assert game_round.deliveries == 1

    def test_countdown(self, game_round):
        assert game_round.time_left(25.0) == pytest.approx(45.0)
        assert game_round.time_left(100.0) == 0.0

    def test_round_over_once(self, game_round):
        game_round.update([SUCCESS], 20.0)
        assert game_round.update([SUCCESS], 70.0) == RoundOver(score=200, deliveries=2)
        assert not game_round.is_active
        assert game_round.update([SUCCESS], 71.0) is None
        assert game_round.score == 200

    def test_restart(self, game_round):
        game_round.update([SUCCESS], 70.0)
        game_round.start(80.0)
        assert game_round.is_active
        assert game_round.score == 0
        assert game_round.time_left(80.0) == 60.0

    def test_points_from_config(self):
        game_round = DeliveryRound(ScoringConfig(points_per_delivery=25))
        game_round.start(0.0)
        game_round.update([SUCCESS, SUCCESS], 1.0)
        assert game_round.score == 50
