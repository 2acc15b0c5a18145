"""Geometry primitives and helpers for canvas layout calculations.

Coordinates follow the canvas convention: origin at the top-left corner,
``y`` grows downward.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

from ..exceptions import ConfigurationError, GeometryError


@dataclass(slots=True, frozen=True)
class Point:
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(slots=True, frozen=True)
class Size:
    width: float
    height: float

    @classmethod
    def from_tuple(cls, value: Iterable[float]) -> "Size":
        width, height = value
        return cls(float(width), float(height))

    @classmethod
    def from_value(cls, value: Union["Size", Mapping[str, Any], Iterable[float], float]) -> "Size":
        """Build a Size from another Size, a mapping, a pair or a single number."""
        if isinstance(value, Size):
            return value
        try:
            if isinstance(value, Mapping):
                return cls(float(value["width"]), float(value["height"]))
            if isinstance(value, (int, float)):
                return cls(float(value), float(value))
            return cls.from_tuple(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise GeometryError("Malformed size", repr(value)) from exc

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass(slots=True, frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        if self.height == 0:
            return 0.0
        return self.width / self.height

    def contains(self, x: float, y: float) -> bool:
        """Check whether a point lies inside the rectangle (edges included)."""
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def intersects(self, other: "Rect") -> bool:
        """Check if this rectangle overlaps another rectangle.

        Rectangles that only share an edge do not intersect.

        Args:
            other: Another Rect object

        Returns:
            True if rectangles overlap, False otherwise
        """
        return not (
            self.right <= other.left or
            other.right <= self.left or
            self.bottom <= other.top or
            other.bottom <= self.top
        )

    def union(self, other: "Rect") -> "Rect":
        """Calculate the bounding rectangle that contains both rectangles.

        Args:
            other: Another Rect object

        Returns:
            New Rect that contains both rectangles
        """
        left = min(self.left, other.left)
        right = max(self.right, other.right)
        top = min(self.top, other.top)
        bottom = max(self.bottom, other.bottom)
        return Rect(x=left, y=top, width=right - left, height=bottom - top)

    def inset(self, padding: "Padding") -> "Rect":
        """Return the content box left after removing padding from every side."""
        return Rect(
            x=self.x + padding.left,
            y=self.y + padding.top,
            width=self.width - padding.left - padding.right,
            height=self.height - padding.top - padding.bottom,
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rect":
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise GeometryError("Malformed rectangle", repr(data)) from exc

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(slots=True, frozen=True)
class Padding:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __post_init__(self):
        """Reject negative insets instead of clamping them."""
        for side in ("top", "right", "bottom", "left"):
            if getattr(self, side) < 0:
                raise ConfigurationError("Padding must be non-negative", f"{side}={getattr(self, side)}")

    @classmethod
    def uniform(cls, value: float) -> "Padding":
        return cls(value, value, value, value)

    @classmethod
    def from_value(cls, value: Union["Padding", Mapping[str, Any], float, None]) -> "Padding":
        """Build Padding from a Padding, a number or a ``{top,right,bottom,left}`` mapping."""
        if value is None:
            return cls()
        if isinstance(value, Padding):
            return value
        if isinstance(value, (int, float)):
            return cls.uniform(float(value))
        if not isinstance(value, Mapping):
            raise GeometryError("Malformed padding", repr(value))
        try:
            sides = {side: float(value.get(side, 0.0)) for side in ("top", "right", "bottom", "left")}
        except (TypeError, ValueError) as exc:
            raise GeometryError("Malformed padding", repr(value)) from exc
        return cls(**sides)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom

    def __add__(self, other: "Padding") -> "Padding":
        """Add two paddings together (sum corresponding sides).

        Args:
            other: Another Padding object

        Returns:
            New Padding with summed values
        """
        return Padding(
            top=self.top + other.top,
            right=self.right + other.right,
            bottom=self.bottom + other.bottom,
            left=self.left + other.left,
        )

    def to_dict(self) -> Dict[str, float]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}
