"""
Spot detector - finds the open rectangles left around laid-out text.

The text lines define the rows of the canvas. Walking the non-empty lines top
to bottom, each line contributes an optional spot on its left and on its
right; whatever is left below the last line becomes one trailing spot.

Spot ids are assigned 1..N in exactly that emission order (left, right per
line, then trailing). Restoration relies on this order being stable.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..config import SpotLayoutConfig, validate_min_size
from ..models.spot import Spot
from .geometry import Padding, Rect, Size
from .text_layout import Line

logger = logging.getLogger(__name__)


class SpotDetector:
    """Text-driven open space detection."""

    def __init__(self, config: Optional[SpotLayoutConfig] = None, debugging: bool = False):
        self.config = config or SpotLayoutConfig()
        self.debugging = debugging
        self.debug_steps: List[str] = []

    def detect(
        self,
        canvas_size: Size,
        lines: Sequence[Line],
        padding: Optional[Padding] = None,
        min_size: Optional[Size] = None,
    ) -> List[Spot]:
        """
        Detect open spots around the given lines.

        Args:
            canvas_size: Canvas width and height
            lines: Laid-out lines in top-to-bottom order
            padding: Canvas insets no spot may enter
            min_size: Minimum spot width and height (defaults to the config)

        Returns:
            Non-overlapping spots with ids 1..N

        Raises:
            ConfigurationError: If ``min_size`` is negative or not numeric
        """
        padding = padding or Padding()
        min_size = validate_min_size(min_size if min_size is not None else self.config.min_spot_size)
        self.debug_steps = []

        text_lines = [line for line in lines if not line.is_empty]
        self._trace("Filtered to %d non-empty line(s) of %d", len(text_lines), len(lines))

        candidates: List[Rect] = []
        current_y = padding.top
        inner_bottom = canvas_size.height - padding.bottom

        for line in text_lines:
            # Overflowing text never pushes a row past the bottom inset
            row_bottom = min(line.bottom, inner_bottom)
            row_height = row_bottom - current_y

            left = Rect(padding.left, current_y, line.x - padding.left, row_height)
            if self._fits(left, min_size):
                candidates.append(left)
                self._trace("Left of %r: %.0fx%.0f", line.text, left.width, left.height)

            right_x = line.right
            right = Rect(right_x, current_y, canvas_size.width - padding.right - right_x, row_height)
            if self._fits(right, min_size):
                candidates.append(right)
                self._trace("Right of %r: %.0fx%.0f", line.text, right.width, right.height)

            current_y = max(current_y, row_bottom)

        trailing = Rect(
            padding.left,
            current_y,
            canvas_size.width - padding.left - padding.right,
            inner_bottom - current_y,
        )
        if self._fits(trailing, min_size):
            candidates.append(trailing)
            self._trace("Trailing space: %.0fx%.0f", trailing.width, trailing.height)

        spots = [Spot(id=index, rect=rect) for index, rect in enumerate(candidates, start=1)]
        logger.debug("Detected %d spot(s) on %.0fx%.0f canvas", len(spots), canvas_size.width, canvas_size.height)
        return spots

    @staticmethod
    def _fits(rect: Rect, min_size: Size) -> bool:
        return rect.width >= min_size.width and rect.height >= min_size.height and rect.width > 0 and rect.height > 0

    def _trace(self, message: str, *args: Any) -> None:
        if self.debugging:
            self.debug_steps.append(message % args)
        logger.debug(message, *args)

    @staticmethod
    def statistics(spots: Iterable[Spot], lines: Iterable[Line], canvas_size: Size) -> Dict[str, Any]:
        """
        Coverage figures for a detection pass.

        Returns:
            Dict with spot count, areas and coverage percentages
        """
        spots = list(spots)
        canvas_area = canvas_size.width * canvas_size.height
        text_area = sum(line.width * line.height for line in lines if not line.is_empty)
        areas = [spot.area for spot in spots]
        spot_area = sum(areas)

        def percent(value: float) -> float:
            return round(value / canvas_area * 100, 1) if canvas_area else 0.0

        return {
            "total_spots": len(spots),
            "total_canvas_area": canvas_area,
            "total_text_area": text_area,
            "total_spot_area": spot_area,
            "text_coverage": percent(text_area),
            "spot_coverage": percent(spot_area),
            "average_spot_size": round(spot_area / len(spots)) if spots else 0,
            "largest_spot": max(areas, default=0.0),
            "smallest_spot": min(areas, default=0.0),
        }
