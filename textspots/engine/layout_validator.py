"""
Layout validator - integrity checks for a detection pass.

Checks:
- spots stay inside the canvas
- spots have positive dimensions and meet the minimum size
- spots do not overlap each other or any text line
- spot ids run 1..N
"""

from typing import List, Sequence, Tuple

from ..models.spot import Spot
from .geometry import Size
from .text_layout import Line


class LayoutValidator:
    """Validator for spots produced by SpotDetector."""

    def __init__(self, canvas_size: Size, spots: Sequence[Spot], lines: Sequence[Line], min_size: Size):
        """
        Args:
            canvas_size: Canvas the spots were detected on
            spots: Detected spots
            lines: Lines the spots were detected around
            min_size: Minimum size the detector was asked for
        """
        self.canvas_size = canvas_size
        self.spots = list(spots)
        self.lines = [line for line in lines if not line.is_empty]
        self.min_size = min_size
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate(self) -> Tuple[bool, List[str], List[str]]:
        """
        Runs every check.

        Returns:
            Tuple (is_valid, errors, warnings)
        """
        self.errors.clear()
        self.warnings.clear()

        self._validate_ids()
        self._validate_spots_in_bounds()
        self._validate_min_size()
        self._validate_spot_overlap()
        self._validate_text_overlap()
        self._validate_text_in_bounds()

        is_valid = len(self.errors) == 0
        return is_valid, self.errors.copy(), self.warnings.copy()

    def _validate_ids(self) -> None:
        ids = [spot.id for spot in self.spots]
        if ids != list(range(1, len(ids) + 1)):
            self.errors.append(f"Spot ids are not sequential from 1: {ids}")

    def _validate_spots_in_bounds(self) -> None:
        for spot in self.spots:
            rect = spot.rect
            if rect.x < 0 or rect.y < 0:
                self.errors.append(f"Spot {spot.id} starts outside the canvas at ({rect.x}, {rect.y})")
            if rect.right > self.canvas_size.width or rect.bottom > self.canvas_size.height:
                self.errors.append(
                    f"Spot {spot.id} extends past the canvas "
                    f"(right={rect.right}, bottom={rect.bottom}, canvas={self.canvas_size.width}x{self.canvas_size.height})"
                )
            if rect.width <= 0 or rect.height <= 0:
                self.errors.append(f"Spot {spot.id} has non-positive size {rect.width}x{rect.height}")

    def _validate_min_size(self) -> None:
        for spot in self.spots:
            if spot.rect.width < self.min_size.width or spot.rect.height < self.min_size.height:
                self.errors.append(
                    f"Spot {spot.id} is smaller than the minimum "
                    f"({spot.rect.width}x{spot.rect.height} < {self.min_size.width}x{self.min_size.height})"
                )

    def _validate_spot_overlap(self) -> None:
        for index, spot in enumerate(self.spots):
            for other in self.spots[index + 1:]:
                if spot.rect.intersects(other.rect):
                    self.errors.append(f"Spots {spot.id} and {other.id} overlap")

    def _validate_text_overlap(self) -> None:
        for spot in self.spots:
            for line in self.lines:
                if spot.rect.intersects(line.rect):
                    self.errors.append(f"Spot {spot.id} overlaps text line {line.index} ({line.text!r})")

    def _validate_text_in_bounds(self) -> None:
        for line in self.lines:
            if line.x < 0 or line.right > self.canvas_size.width:
                self.warnings.append(f"Text line {line.index} ({line.text!r}) overflows the canvas horizontally")
            if line.y < 0 or line.bottom > self.canvas_size.height:
                self.warnings.append(f"Text line {line.index} ({line.text!r}) overflows the canvas vertically")
