"""
Text metrics - measuring the rendered width of a string in a given font.

The layout engine treats measurement as an injected collaborator
(``TextMetricsProvider``). Two implementations ship with the package:

- ``ReportLabTextMetrics``: real font metrics from ReportLab's AFM/TTF tables
- ``FixedAdvanceTextMetrics``: every glyph advances by a fixed fraction of the
  font size; deterministic and font-independent
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

from reportlab.pdfbase import pdfmetrics  # type: ignore

from ..exceptions import ConfigurationError
from .utils.font_registry import registered_font_names
from .utils.font_utils import resolve_font_variant

logger = logging.getLogger(__name__)

AUTO_SIZE = "auto"
FONT_WEIGHTS = ("normal", "bold")
FONT_STYLES = ("normal", "italic")


@dataclass(slots=True, frozen=True)
class FontSpec:
    """Font description: family (or CSS font stack), size, weight and style."""

    family: str = "Helvetica"
    size: Union[float, str] = AUTO_SIZE
    weight: str = "normal"
    style: str = "normal"

    def __post_init__(self):
        if self.weight not in FONT_WEIGHTS:
            raise ConfigurationError("Unknown font weight", repr(self.weight))
        if self.style not in FONT_STYLES:
            raise ConfigurationError("Unknown font style", repr(self.style))
        if self.size != AUTO_SIZE:
            if isinstance(self.size, str) or self.size <= 0:
                raise ConfigurationError("Font size must be positive or 'auto'", repr(self.size))

    @property
    def is_auto(self) -> bool:
        return self.size == AUTO_SIZE

    @property
    def bold(self) -> bool:
        return self.weight == "bold"

    @property
    def italic(self) -> bool:
        return self.style == "italic"

    def with_size(self, size: Union[float, str]) -> "FontSpec":
        return replace(self, size=size)

    def to_dict(self) -> Dict[str, Any]:
        return {"family": self.family, "size": self.size, "weight": self.weight, "style": self.style}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FontSpec":
        size = data.get("size", AUTO_SIZE)
        return cls(
            family=data.get("family", "Helvetica"),
            size=size if size == AUTO_SIZE else float(size),
            weight=data.get("weight", "normal"),
            style=data.get("style", "normal"),
        )


@dataclass(slots=True, frozen=True)
class TextMeasurement:
    """Result of measuring one string."""

    width: float


@runtime_checkable
class TextMetricsProvider(Protocol):
    """Anything that can tell the rendered width of a string."""

    def measure(self, text: str, font: FontSpec) -> TextMeasurement:
        ...


class ReportLabTextMetrics:
    """
    Metrics provider backed by ReportLab font tables.

    Font families are resolved through ``resolve_font_variant``: fonts
    registered with ReportLab first (see ``font_registry.register_font_file``),
    then the standard PDF fonts.
    """

    def __init__(self):
        self._font_cache: Dict[Tuple[str, bool, bool], str] = {}

    def resolve_font_name(self, font: FontSpec) -> str:
        key = (font.family, font.bold, font.italic)
        cached = self._font_cache.get(key)
        if cached is not None:
            return cached
        name = resolve_font_variant(font.family, font.bold, font.italic, registered_font_names())
        self._font_cache[key] = name
        logger.debug("Resolved font %r (bold=%s, italic=%s) -> %s", font.family, font.bold, font.italic, name)
        return name

    def clear_cache(self) -> None:
        """Forget resolved font names (call after registering new fonts)."""
        self._font_cache.clear()

    def measure(self, text: str, font: FontSpec) -> TextMeasurement:
        """
        Measures text width.

        Args:
            text: Text to measure
            font: Font with a numeric size

        Returns:
            TextMeasurement with the width in canvas units
        """
        if not text:
            return TextMeasurement(width=0.0)
        if font.is_auto:
            raise ConfigurationError("Cannot measure text with an unresolved 'auto' font size")

        font_name = self.resolve_font_name(font)
        width = pdfmetrics.stringWidth(text, font_name, float(font.size))
        return TextMeasurement(width=float(width))


class FixedAdvanceTextMetrics:
    """Every character advances by ``advance * font size``."""

    def __init__(self, advance: float = 0.6, overrides: Optional[Mapping[str, float]] = None):
        """
        Args:
            advance: Glyph advance as a fraction of the font size
            overrides: Exact widths for specific strings, independent of size
        """
        if advance <= 0:
            raise ConfigurationError("Glyph advance must be positive", repr(advance))
        self.advance = advance
        self.overrides = dict(overrides or {})

    def measure(self, text: str, font: FontSpec) -> TextMeasurement:
        if text in self.overrides:
            return TextMeasurement(width=float(self.overrides[text]))
        if not text:
            return TextMeasurement(width=0.0)
        if font.is_auto:
            raise ConfigurationError("Cannot measure text with an unresolved 'auto' font size")
        return TextMeasurement(width=len(text) * self.advance * float(font.size))
