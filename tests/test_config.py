"""Tests for SpotLayoutConfig and config loading."""

import json

import pytest

from textspots.config import SpotLayoutConfig, load_config, validate_min_size
from textspots.engine.geometry import Padding, Size
from textspots.exceptions import ConfigurationError


class TestSpotLayoutConfig:
    """Test suite for SpotLayoutConfig."""

    def test_defaults(self):
        """Test default tunables."""
        config = SpotLayoutConfig()

        assert config.canvas_size == Size(800.0, 800.0)
        assert config.padding == Padding.uniform(20.0)
        assert config.min_spot_size == Size(50.0, 50.0)
        assert config.match_distance == 150.0
        assert (config.autofit_max_size, config.autofit_min_size, config.autofit_step) == (120.0, 8.0, 2.0)
        assert config.auto_detect is True
        assert config.debounce_delay == 0.5
        assert config.immediate_delay == 0.05

    def test_validate_returns_self(self):
        """Test validate chains."""
        config = SpotLayoutConfig()

        assert config.validate() is config

    @pytest.mark.parametrize("kwargs", [
        {"canvas_size": Size(0, 800)},
        {"min_spot_size": Size(-1, 50)},
        {"match_distance": -1.0},
        {"autofit_step": 0.0},
        {"autofit_min_size": 0.0},
        {"autofit_min_size": 200.0},
        {"debounce_delay": -0.1},
    ])
    def test_invalid_values(self, kwargs):
        """Test invalid configuration raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            SpotLayoutConfig(**kwargs).validate()

    def test_configuration_error_is_value_error(self):
        """Test ConfigurationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            SpotLayoutConfig(match_distance=-1.0).validate()

    def test_dict_roundtrip(self):
        """Test to_dict / from_dict."""
        config = SpotLayoutConfig(min_spot_size=Size(80, 40), padding=Padding(1, 2, 3, 4), auto_detect=False)

        assert SpotLayoutConfig.from_dict(config.to_dict()) == config

    def test_from_dict_accepts_shorthand(self):
        """Test sizes and padding accept numbers and pairs."""
        config = SpotLayoutConfig.from_dict({"canvas_size": [1080, 1350], "padding": 0, "min_spot_size": 60})

        assert config.canvas_size == Size(1080.0, 1350.0)
        assert config.padding == Padding()
        assert config.min_spot_size == Size(60.0, 60.0)

    def test_from_dict_rejects_unknown_keys(self):
        """Test unknown keys are reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            SpotLayoutConfig.from_dict({"match_distanse": 100})

        assert "match_distanse" in str(exc_info.value)


class TestValidateMinSize:
    """Test suite for validate_min_size."""

    def test_valid(self):
        """Test a valid size is returned unchanged."""
        size = Size(0, 10)

        assert validate_min_size(size) is size

    @pytest.mark.parametrize("size", [Size(-1, 0), Size(0, -0.5), Size(None, 1), Size(False, 1)])
    def test_invalid(self, size):
        """Test invalid sizes raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            validate_min_size(size)


class TestLoadConfig:
    """Test suite for load_config."""

    def test_load(self, tmp_path):
        """Test loading a JSON config file."""
        path = tmp_path / "spots.json"
        path.write_text(json.dumps({"match_distance": 90, "debounce_delay": 0.25}), encoding="utf-8")

        config = load_config(path)

        assert config.match_distance == 90
        assert config.debounce_delay == 0.25

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises ConfigurationError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_object(self, tmp_path):
        """Test a JSON array is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path))
