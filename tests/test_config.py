"""
Tests for configuration loading.
"""

import os

import pytest
import yaml

import latin_drop
from latin_drop.latin_core.config_loader import load_config

DEFAULT_CONFIG = os.path.join(os.path.dirname(latin_drop.__file__), "game_config.yaml")


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG, "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestLoadConfig:
    """Test the default configuration."""

    def test_defaults(self):
        config = load_config()
        assert config.levels.count == 8
        assert config.levels.min_grid_size == 3
        assert config.levels.max_grid_size == 14
        assert config.board.width == 600
        assert config.session.retry_policy == "fresh"

    def test_last_band_open(self):
        config = load_config()
        assert config.levels.difficulty_bands[-1].max_level is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_config_immutable(self):
        config = load_config()
        with pytest.raises(AttributeError):
            config.levels.count = 3


class TestValidation:
    """Test rejection of inconsistent configs."""

    def test_bad_retry_policy(self, tmp_path, raw_config):
        raw_config["session"]["retry_policy"] = "sometimes"
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_closed_last_band(self, tmp_path, raw_config):
        raw_config["levels"]["difficulty_bands"][-1]["max_level"] = 20
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_inverted_ratio(self, tmp_path, raw_config):
        band = raw_config["levels"]["difficulty_bands"][0]
        band["min_ratio"], band["max_ratio"] = 0.5, 0.2
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_inverted_sizes(self, tmp_path, raw_config):
        raw_config["levels"]["min_grid_size"] = 10
        raw_config["levels"]["max_grid_size"] = 4
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_round_trip_custom_board(self, tmp_path, raw_config):
        raw_config["board"]["width"] = 800
        config = load_config(write_config(tmp_path, raw_config))
        assert config.board.width == 800
