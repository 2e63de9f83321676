"""Tests for the command line, without any camera."""

import json

import pytest
from typer.testing import CliRunner

from exhibit_gestures.cli import app
from exhibit_gestures.cli.common import apply_seed, determine_mirror_mode
from exhibit_gestures.config import Config, MappingConfig

runner = CliRunner()


def json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


class TestSimulate:
    def test_prints_events(self, config_path):
        result = runner.invoke(app, ["simulate", "--seed", "3", "--config", str(config_path)])
        assert result.exit_code == 0, result.output

        lines = json_lines(result.stdout)
        spawned = [line for line in lines if line["event"] == "entity_spawned"]
        delivers = [line for line in lines if line["event"] == "deliver"]

        assert len(spawned) >= Config().cli.entities
        assert all(line["t"] == 0.0 for line in spawned[: Config().cli.entities])
        assert len(delivers) == 3
        assert all(line["success"] for line in delivers)
        assert lines[-1]["event"] == "gesture_hold"

    def test_seeded_runs_are_identical(self, config_path):
        args = ["simulate", "--seed", "5", "--deliveries", "2", "--config", str(config_path)]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        assert json_lines(first.stdout) == json_lines(second.stdout)

    def test_entities_option(self, config_path):
        result = runner.invoke(
            app, ["simulate", "--seed", "1", "--deliveries", "0", "--entities", "2", "--config", str(config_path)]
        )
        assert result.exit_code == 0, result.output
        lines = json_lines(result.stdout)
        assert [line["event"] for line in lines[:2]] == ["entity_spawned", "entity_spawned"]
        assert not any(line["event"] == "deliver" for line in lines)


class TestShowConfig:
    def test_prints_defaults(self, config_path):
        result = runner.invoke(app, ["config", "--config", str(config_path)])
        assert result.exit_code == 0, result.output
        assert Config.model_validate_json(result.stdout) == Config()
        assert not config_path.exists()

    def test_save(self, config_path):
        result = runner.invoke(app, ["config", "--config", str(config_path), "--save"])
        assert result.exit_code == 0, result.output
        assert "Configuration saved to" in result.stdout
        assert Config.load(config_path) == Config()


class TestMirrorMode:
    def test_flag_wins(self, monkeypatch):
        monkeypatch.setenv("EXHIBIT_GESTURES_MIRROR", "true")
        assert determine_mirror_mode(False, Config()) is False

    @pytest.mark.parametrize("value, expected", [("0", False), ("no", False), ("TRUE", True), ("1", True)])
    def test_environment_over_config(self, monkeypatch, value, expected):
        monkeypatch.setenv("EXHIBIT_GESTURES_MIRROR", value)
        config = Config(mapping=MappingConfig(mirror=not expected))
        assert determine_mirror_mode(None, config) is expected

    def test_config_then_default(self, monkeypatch):
        monkeypatch.setenv("EXHIBIT_GESTURES_MIRROR", "maybe")
        assert determine_mirror_mode(None, Config(mapping=MappingConfig(mirror=False))) is False
        monkeypatch.delenv("EXHIBIT_GESTURES_MIRROR")
        assert determine_mirror_mode(None) is True


def test_apply_seed():
    config = Config()
    assert apply_seed(config, None) is config
    assert apply_seed(config, 42).placement.seed == 42
    assert config.placement.seed != 42
