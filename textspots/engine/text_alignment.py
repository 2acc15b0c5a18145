"""
TextAlignmentEngine - positioning the text block and each of its lines
inside the padded content box.

Two orthogonal settings are involved:
- block anchor: 3x3 position of the whole block (left/center/right x
  top/middle/bottom); decides where the block starts vertically and which
  vertical line ``center`` aligned lines are centred on
- line alignment: left/center/right per physical line
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigurationError
from .geometry import Point, Rect

LEFT = "left"
CENTER = "center"
RIGHT = "right"
TOP = "top"
MIDDLE = "middle"
BOTTOM = "bottom"

HORIZONTAL_ALIGNMENTS = (LEFT, CENTER, RIGHT)
VERTICAL_ALIGNMENTS = (TOP, MIDDLE, BOTTOM)

_HORIZONTAL_ALIASES = {
    "left": LEFT, "start": LEFT, "l": LEFT,
    "center": CENTER, "centre": CENTER, "middle": CENTER, "c": CENTER,
    "right": RIGHT, "end": RIGHT, "r": RIGHT,
}
_VERTICAL_ALIASES = {
    "top": TOP, "t": TOP,
    "middle": MIDDLE, "center": MIDDLE, "centre": MIDDLE, "m": MIDDLE,
    "bottom": BOTTOM, "b": BOTTOM,
}


def normalize_alignment(value: Optional[str]) -> str:
    """Map alignment spellings onto left/center/right; unknown values are an error."""
    key = str(value).strip().lower() if value is not None else ""
    try:
        return _HORIZONTAL_ALIASES[key]
    except KeyError:
        raise ConfigurationError("Unknown horizontal alignment", repr(value)) from None


def normalize_vertical(value: Optional[str]) -> str:
    key = str(value).strip().lower() if value is not None else ""
    try:
        return _VERTICAL_ALIASES[key]
    except KeyError:
        raise ConfigurationError("Unknown vertical alignment", repr(value)) from None


@dataclass(slots=True, frozen=True)
class BlockAnchor:
    """Where the whole text block sits in its padded container."""

    horizontal: str = CENTER
    vertical: str = MIDDLE

    def __post_init__(self):
        object.__setattr__(self, "horizontal", normalize_alignment(self.horizontal))
        object.__setattr__(self, "vertical", normalize_vertical(self.vertical))

    def to_dict(self) -> Dict[str, str]:
        return {"horizontal": self.horizontal, "vertical": self.vertical}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BlockAnchor":
        return cls(horizontal=data.get("horizontal", CENTER), vertical=data.get("vertical", MIDDLE))


class TextAlignmentEngine:
    """
    Calculates block origins and per-line X positions.
    """

    @staticmethod
    def block_origin(content_box: Rect, anchor: BlockAnchor, total_height: float) -> Point:
        """
        Calculates the anchor point of the text block.

        Args:
            content_box: Padded content box of the container
            anchor: Block anchor
            total_height: Height of all lines including spacing

        Returns:
            Point whose x is the horizontal anchor line and y is the top of the
            first line
        """
        if anchor.horizontal == LEFT:
            x = content_box.x
        elif anchor.horizontal == RIGHT:
            x = content_box.x + content_box.width
        else:
            x = content_box.x + content_box.width / 2

        if anchor.vertical == TOP:
            y = content_box.y
        elif anchor.vertical == BOTTOM:
            y = content_box.y + content_box.height - total_height
        else:
            y = content_box.y + (content_box.height - total_height) / 2

        return Point(x, y)

    @staticmethod
    def calculate_x(content_box: Rect, anchor_x: float, line_width: float, alignment: str = CENTER) -> float:
        """
        Calculates X position of a line based on its alignment.

        Left and right lines hug the content box edges; centred lines are
        centred on the block anchor line.

        Args:
            content_box: Padded content box
            anchor_x: Horizontal anchor line from ``block_origin``
            line_width: Measured width of the line
            alignment: "left", "center" or "right"

        Returns:
            Left edge of the line
        """
        if alignment == LEFT:
            return content_box.x
        if alignment == RIGHT:
            return content_box.x + content_box.width - line_width
        return anchor_x - line_width / 2
