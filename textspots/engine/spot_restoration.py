"""
Spot restoration - re-attaches previously authored content to a new spot set.

Three greedy phases, in this order:
1. Proximity: each new spot (detection order) claims the nearest unclaimed
   snapshot whose centre lies closer than ``match_distance``.
2. Fill: remaining empty spots take the remaining snapshots FIFO.
3. Carry forward: whatever is still unclaimed becomes the waiting queue.

Matching is greedy per spot rather than a minimum-cost assignment, so a spot
early in detection order can take a snapshot a later spot was closer to.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from PIL import Image

from ..config import SpotLayoutConfig
from ..exceptions import MediaError, RestorationError
from ..media.image_codec import decode_image
from ..models.spot import IMAGE_DATA_URL_KEY, IMAGE_KEY, SavedSpotSnapshot, Spot, SpotType

logger = logging.getLogger(__name__)

PROXIMITY = "proximity"
FILL = "fill"

ImageDecoder = Callable[[str], Image.Image]


@dataclass(slots=True, frozen=True)
class SpotMatch:
    """One snapshot placed onto one spot."""

    spot: Spot
    snapshot: SavedSpotSnapshot
    phase: str
    distance: float


@dataclass(slots=True)
class RestorationResult:
    restored: List[Spot]
    waiting: List[SavedSpotSnapshot] = field(default_factory=list)
    matches: List[SpotMatch] = field(default_factory=list)

    @property
    def claimed_count(self) -> int:
        return len(self.matches)


def center_distance(spot: Spot, snapshot: SavedSpotSnapshot) -> float:
    return spot.center.distance_to(snapshot.center)


class SpotRestorer:
    """Greedy restoration of saved spot content onto freshly detected spots."""

    def __init__(self, config: Optional[SpotLayoutConfig] = None, image_decoder: Optional[ImageDecoder] = None):
        self.config = config or SpotLayoutConfig()
        self.image_decoder = image_decoder or decode_image

    def restore(self, new_spots: Sequence[Spot], saved_snapshots: Sequence[SavedSpotSnapshot]) -> RestorationResult:
        """
        Restore saved content onto ``new_spots`` in place.

        Only ``type``, ``content`` and ``opacity`` of the spots change; their
        rects never do.

        Args:
            new_spots: Spots from the latest detection pass, in id order
            saved_snapshots: Previous waiting queue followed by the snapshots
                of the spots the detection pass replaced

        Returns:
            RestorationResult with the spot list, the new waiting queue and
            every placement made

        Raises:
            RestorationError: If a snapshot of an empty spot is passed in
        """
        for snapshot in saved_snapshots:
            if snapshot.type is SpotType.EMPTY:
                raise RestorationError("Snapshots must hold content", f"original id {snapshot.original_id}")

        remaining = list(saved_snapshots)
        matches: List[SpotMatch] = []

        # Phase 1: proximity
        for spot in new_spots:
            if not remaining:
                break
            best_index: Optional[int] = None
            best_distance = math.inf
            for index, snapshot in enumerate(remaining):
                distance = center_distance(spot, snapshot)
                if distance < self.config.match_distance and distance < best_distance:
                    best_index = index
                    best_distance = distance
            if best_index is not None:
                snapshot = remaining.pop(best_index)
                self._apply(spot, snapshot)
                matches.append(SpotMatch(spot, snapshot, PROXIMITY, best_distance))

        # Phase 2: fill empty spots FIFO
        for spot in new_spots:
            if not remaining:
                break
            if spot.type is not SpotType.EMPTY:
                continue
            snapshot = remaining.pop(0)
            self._apply(spot, snapshot)
            matches.append(SpotMatch(spot, snapshot, FILL, center_distance(spot, snapshot)))

        # Phase 3: carry forward
        if remaining:
            logger.info("%d saved spot(s) could not be placed, keeping them waiting", len(remaining))
        logger.debug(
            "Restored %d of %d saved spot(s) onto %d spot(s)",
            len(matches), len(saved_snapshots), len(new_spots),
        )
        return RestorationResult(restored=list(new_spots), waiting=remaining, matches=matches)

    def _apply(self, spot: Spot, snapshot: SavedSpotSnapshot) -> None:
        spot.type = snapshot.type
        spot.opacity = snapshot.opacity
        if snapshot.content is None:
            spot.content = None
            return

        content = copy.deepcopy(snapshot.content)
        data_url = content.pop(IMAGE_DATA_URL_KEY, None)
        if data_url is not None:
            content[IMAGE_KEY] = self._resolve_image(spot, data_url)
        elif snapshot.type is SpotType.IMAGE and content.get(IMAGE_KEY) is None:
            logger.warning("No image data saved for spot %s", spot.id)
        spot.content = content

    def _resolve_image(self, spot: Spot, data_url: str) -> Optional[Image.Image]:
        try:
            return self.image_decoder(data_url)
        except MediaError as exc:
            logger.warning("Failed to load image for spot %s: %s", spot.id, exc)
            return None
