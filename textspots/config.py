"""Configuration for the layout, detection and restoration pipeline."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from .engine.geometry import Padding, Size
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SpotLayoutConfig:
    """Tunables shared by the layout engine, the detector and the restorer."""

    canvas_size: Size = field(default_factory=lambda: Size(800.0, 800.0))
    padding: Padding = field(default_factory=lambda: Padding.uniform(20.0))
    min_spot_size: Size = field(default_factory=lambda: Size(50.0, 50.0))
    match_distance: float = 150.0  # canvas units between spot centres
    autofit_max_size: float = 120.0
    autofit_min_size: float = 8.0
    autofit_step: float = 2.0
    auto_detect: bool = True
    debounce_delay: float = 0.5  # seconds
    immediate_delay: float = 0.05  # seconds, e.g. toggling auto-detect

    def validate(self) -> "SpotLayoutConfig":
        """Fail fast on values no caller could mean.

        Returns:
            self, so ``SpotLayoutConfig(...).validate()`` chains

        Raises:
            ConfigurationError: On the first invalid value
        """
        if self.canvas_size.width <= 0 or self.canvas_size.height <= 0:
            raise ConfigurationError("Canvas size must be positive", str(self.canvas_size))
        validate_min_size(self.min_spot_size)
        if self.match_distance < 0:
            raise ConfigurationError("match_distance must be non-negative", repr(self.match_distance))
        if self.autofit_step <= 0:
            raise ConfigurationError("autofit_step must be positive", repr(self.autofit_step))
        if not 0 < self.autofit_min_size <= self.autofit_max_size:
            raise ConfigurationError(
                "Auto-fit bounds must satisfy 0 < min <= max",
                f"min={self.autofit_min_size}, max={self.autofit_max_size}",
            )
        if self.debounce_delay < 0 or self.immediate_delay < 0:
            raise ConfigurationError("Delays must be non-negative")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "canvas_size": self.canvas_size.to_dict(),
            "padding": self.padding.to_dict(),
            "min_spot_size": self.min_spot_size.to_dict(),
            "match_distance": self.match_distance,
            "autofit_max_size": self.autofit_max_size,
            "autofit_min_size": self.autofit_min_size,
            "autofit_step": self.autofit_step,
            "auto_detect": self.auto_detect,
            "debounce_delay": self.debounce_delay,
            "immediate_delay": self.immediate_delay,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpotLayoutConfig":
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError("Unknown configuration keys", ", ".join(sorted(unknown)))

        kwargs: Dict[str, Any] = dict(data)
        if "canvas_size" in kwargs:
            kwargs["canvas_size"] = Size.from_value(kwargs["canvas_size"])
        if "min_spot_size" in kwargs:
            kwargs["min_spot_size"] = Size.from_value(kwargs["min_spot_size"])
        if "padding" in kwargs:
            kwargs["padding"] = Padding.from_value(kwargs["padding"])
        return cls(**kwargs).validate()


def validate_min_size(min_size: Size) -> Size:
    """Check a minimum spot size; negative or non-numeric sizes are a caller bug."""
    for dimension in (min_size.width, min_size.height):
        if isinstance(dimension, bool) or not isinstance(dimension, (int, float)):
            raise ConfigurationError("Minimum spot size must be numeric", str(min_size))
        if dimension < 0:
            raise ConfigurationError("Minimum spot size must be non-negative", str(min_size))
    return min_size


def load_config(path: Union[str, Path]) -> SpotLayoutConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to a JSON object with ``SpotLayoutConfig`` field names

    Returns:
        Validated configuration
    """
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {config_path}", str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {config_path}", str(exc)) from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a JSON object", str(config_path))

    config = SpotLayoutConfig.from_dict(data)
    logger.debug("Loaded configuration from %s", config_path)
    return config
