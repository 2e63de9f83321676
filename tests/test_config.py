"""Tests for the configuration tree and its JSON file."""

import pytest
from pydantic import ValidationError

from exhibit_gestures.config import BoundsConfig, Config, PinchConfig


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.pinch.enter_threshold == 0.08
        assert config.pinch.exit_threshold == 0.13
        assert config.pinch.grace_period == 0.25
        assert config.grab.grab_radius == 1.8
        assert config.grab.small_grab_radius == 1.2
        assert config.grab.hand_loss_grace == 0.3
        assert config.placement.max_attempts == 100
        assert config.dwell.dwell_seconds == 1.5
        assert config.mapping.mirror is True
        assert config.two_hands.debounce_seconds == 1.0
        assert config.scoring.round_seconds == 60.0
        assert config.scoring.points_per_delivery == 100

    def test_invalid_thresholds(self):
        with pytest.raises(ValidationError):
            PinchConfig(enter_threshold=0.2, exit_threshold=0.1)

    def test_empty_bounds(self):
        with pytest.raises(ValidationError):
            BoundsConfig(min_x=1.0, max_x=1.0)

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            Config.model_validate({"grab": {"grab_radius": -1.0}})

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "sub" / "config.json"
        config = Config.model_validate({"pinch": {"enter_threshold": 0.05}, "cli": {"entities": 9}})

        assert config.save(path) == path.resolve()
        loaded = Config.load(path)

        assert loaded == config
        assert loaded.pinch.enter_threshold == 0.05

    def test_load_missing_file_gives_defaults(self, tmp_path):
        assert Config.load(tmp_path / "missing.json") == Config()

    def test_load_invalid_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert Config.load(path) == Config()

    def test_load_directory_fails(self, tmp_path):
        with pytest.raises(ValueError):
            Config.load(tmp_path)

    def test_save_on_directory_fails(self, tmp_path):
        with pytest.raises(ValueError):
            Config().save(tmp_path)

    def test_user_path(self):
        path = Config.get_user_path()
        assert path.name == "config.json"
        assert "exhibit-gestures" in str(path)
