"""Greedy line breaking for multi-line canvas text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .text_metrics import FontSpec, TextMetricsProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BrokenLine:
    text: str
    width: float
    forced: bool = False  # single word wider than the available width

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class LineBreaker:
    """Simple greedy line breaker.

    Explicit ``\\n`` breaks are honoured first; each logical line is then
    packed word by word while the measured width still fits.
    """

    def __init__(self, metrics: TextMetricsProvider) -> None:
        self.metrics = metrics

    def wrap(self, text: str, max_width: float, font: FontSpec, wrap_enabled: bool = True) -> List[BrokenLine]:
        lines: List[BrokenLine] = []
        for logical_line in text.split("\n"):
            if not logical_line.strip():
                # Keeps its vertical slot, nothing to measure
                lines.append(BrokenLine(text="", width=0.0))
                continue
            if not wrap_enabled:
                lines.append(BrokenLine(text=logical_line, width=self._width(logical_line, font)))
                continue
            lines.extend(self._break_logical_line(logical_line, max_width, font))
        return lines

    def _break_logical_line(self, text: str, max_width: float, font: FontSpec) -> List[BrokenLine]:
        words = [word for word in text.split(" ") if word]
        lines: List[BrokenLine] = []
        current_line = ""
        current_width = 0.0

        for word in words:
            candidate = f"{current_line} {word}" if current_line else word
            candidate_width = self._width(candidate, font)

            if candidate_width <= max_width:
                current_line = candidate
                current_width = candidate_width
                continue

            if current_line:
                lines.append(BrokenLine(text=current_line, width=current_width))

            # Start a new line with this word; an overlong word still gets its own line
            current_line = word
            current_width = self._width(word, font)
            if current_width > max_width:
                logger.debug("Word %r (%.1f) wider than line (%.1f)", word, current_width, max_width)
                lines.append(BrokenLine(text=word, width=current_width, forced=True))
                current_line = ""
                current_width = 0.0

        if current_line:
            lines.append(BrokenLine(text=current_line, width=current_width))

        return lines

    def _width(self, text: str, font: FontSpec) -> float:
        return self.metrics.measure(text, font).width
