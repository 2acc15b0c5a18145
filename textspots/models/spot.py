"""
Spot models.

A spot is an open rectangle around the main text that can hold an image,
secondary text or a mask reveal. Spots are recreated on every detection pass;
``SavedSpotSnapshot`` carries authored content across passes.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from PIL import Image

from ..engine.geometry import Point, Rect
from ..exceptions import ConfigurationError, MediaError
from ..media.image_codec import encode_image

logger = logging.getLogger(__name__)

IMAGE_KEY = "image"
IMAGE_DATA_URL_KEY = "image_data_url"
DEFAULT_MASK_OPACITY = 0.5


class SpotType(str, Enum):
    EMPTY = "empty"
    IMAGE = "image"
    TEXT = "text"
    MASK = "mask"

    @classmethod
    def coerce(cls, value: Union["SpotType", str]) -> "SpotType":
        if isinstance(value, SpotType):
            return value
        key = str(value).strip().lower()
        if key == "media":
            return cls.IMAGE
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError("Unknown spot type", repr(value)) from None


@dataclass(slots=True)
class Spot:
    """
    Represents a detected open region.

    ``rect`` never changes after detection; ``type``, ``content`` and
    ``opacity`` are edited by the user or by restoration.
    """

    id: int
    rect: Rect
    type: SpotType = SpotType.EMPTY
    content: Optional[Dict[str, Any]] = None
    opacity: float = 1.0

    @property
    def is_empty(self) -> bool:
        return self.type is SpotType.EMPTY

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def area(self) -> float:
        return self.rect.area

    def contains(self, x: float, y: float) -> bool:
        return self.rect.contains(x, y)

    def set_type(self, spot_type: Union[SpotType, str]) -> None:
        """
        Set the type of content this spot holds.

        Content is reset; mask spots start half transparent.
        """
        self.type = SpotType.coerce(spot_type)
        self.content = None
        if self.type is SpotType.MASK:
            self.opacity = DEFAULT_MASK_OPACITY

    def set_content(self, content: Optional[Mapping[str, Any]]) -> None:
        self.content = dict(content) if content is not None else None

    def set_opacity(self, opacity: float) -> None:
        self.opacity = max(0.0, min(1.0, float(opacity)))

    def clear(self) -> None:
        self.type = SpotType.EMPTY
        self.content = None
        self.opacity = 1.0

    def to_dict(self) -> Dict[str, Any]:
        """Describe the spot without its decoded image handle."""
        content = None
        if self.content is not None:
            content = {key: value for key, value in self.content.items() if key != IMAGE_KEY}
            if self.type is SpotType.IMAGE:
                content["has_image"] = self.content.get(IMAGE_KEY) is not None
        return {
            "id": self.id,
            "rect": self.rect.to_dict(),
            "type": self.type.value,
            "content": content,
            "opacity": self.opacity,
        }

    def __str__(self) -> str:
        r = self.rect
        return f"Spot {self.id} ({self.type.value}): {r.width:.0f}x{r.height:.0f} at ({r.x:.0f}, {r.y:.0f})"


@dataclass(slots=True)
class SavedSpotSnapshot:
    """Serializable copy of a non-empty spot, taken before a detection pass."""

    rect: Rect
    type: SpotType
    content: Optional[Dict[str, Any]] = None
    original_id: Optional[int] = None
    opacity: float = 1.0

    @property
    def center(self) -> Point:
        return self.rect.center

    @classmethod
    def from_spot(cls, spot: Spot) -> "SavedSpotSnapshot":
        """
        Snapshot a spot's content.

        Decoded PIL images are replaced by a PNG data URL; an image that cannot
        be encoded is dropped with a warning and the rest of the content kept.
        Other image references (paths, URLs, asset ids) are copied as they are.
        """
        if spot.is_empty:
            raise ConfigurationError("Empty spots are not snapshotted", f"spot {spot.id}")

        content = None
        if spot.content is not None:
            content = {key: copy.deepcopy(value) for key, value in spot.content.items() if key != IMAGE_KEY}
            image = spot.content.get(IMAGE_KEY)
            if isinstance(image, Image.Image):
                try:
                    content[IMAGE_DATA_URL_KEY] = encode_image(image)
                except MediaError as exc:
                    logger.warning("Could not serialize image of spot %s: %s", spot.id, exc)
            elif IMAGE_KEY in spot.content:
                content[IMAGE_KEY] = copy.deepcopy(image)

        return cls(
            rect=spot.rect,
            type=spot.type,
            content=content,
            original_id=spot.id,
            opacity=spot.opacity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rect": self.rect.to_dict(),
            "type": self.type.value,
            "content": copy.deepcopy(self.content),
            "original_id": self.original_id,
            "opacity": self.opacity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavedSpotSnapshot":
        return cls(
            rect=Rect.from_dict(data["rect"]),
            type=SpotType.coerce(data["type"]),
            content=copy.deepcopy(data.get("content")),
            original_id=data.get("original_id"),
            opacity=float(data.get("opacity", 1.0)),
        )
