"""
Text layout engine - wraps a TextBlock into physical lines, resolves the
auto-fit font size and computes the absolute bounding box of every line.

Flow for one ``layout`` call:
1. Padded content box = container minus padding (degenerate box -> no lines)
2. Font size: fixed, or the largest auto-fit candidate whose wrapped lines fit
3. Block origin from the 3x3 block anchor
4. Per-line X from each line's own alignment

Wrapped lines and the resolved size are cached on the block and reused until
the block's version counter changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import SpotLayoutConfig
from ..exceptions import LayoutError
from .geometry import Padding, Point, Rect
from .line_breaker import BrokenLine, LineBreaker
from .text_alignment import CENTER, BlockAnchor, TextAlignmentEngine, normalize_alignment
from .text_metrics import FontSpec, TextMetricsProvider

logger = logging.getLogger(__name__)

# Assigning any of these on a TextBlock invalidates cached wrapping/sizing
LAYOUT_FIELDS = frozenset({"content", "font", "line_spacing", "wrap_enabled", "container", "padding"})


def line_key(text: str) -> str:
    """Key used to remember a line's alignment across rewraps."""
    return text.strip()


@dataclass(slots=True, frozen=True)
class _FitCacheEntry:
    key: Tuple[Any, ...]
    font_size: float
    lines: Tuple[BrokenLine, ...]


@dataclass(slots=True, eq=False)
class TextBlock:
    """Input and working state for one text layout."""

    content: str = ""
    font: FontSpec = field(default_factory=FontSpec)
    line_spacing: float = 0.0
    wrap_enabled: bool = True
    container: Rect = field(default_factory=lambda: Rect(0.0, 0.0, 800.0, 800.0))
    padding: Padding = field(default_factory=lambda: Padding.uniform(20.0))
    block_anchor: BlockAnchor = field(default_factory=BlockAnchor)
    default_alignment: str = CENTER
    # Index keyed; only meaningful for the wrap result they were set against
    line_alignment_overrides: Dict[int, str] = field(default_factory=dict)
    # Keyed by trimmed line text; survives rewraps
    line_alignments: Dict[str, str] = field(default_factory=dict)
    version: int = field(default=0, init=False)
    _fit_cache: Optional[_FitCacheEntry] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.default_alignment = normalize_alignment(self.default_alignment)

    def __setattr__(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)
        if name in LAYOUT_FIELDS:
            object.__setattr__(self, "version", getattr(self, "version", 0) + 1)

    def touch(self) -> int:
        """Bump the version counter after an in-place change the block cannot see."""
        self.version += 1
        return self.version

    @property
    def content_box(self) -> Rect:
        return self.container.inset(self.padding)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "font": self.font.to_dict(),
            "line_spacing": self.line_spacing,
            "wrap_enabled": self.wrap_enabled,
            "container": self.container.to_dict(),
            "padding": self.padding.to_dict(),
            "block_anchor": self.block_anchor.to_dict(),
            "default_alignment": self.default_alignment,
            "line_alignment_overrides": {str(k): v for k, v in self.line_alignment_overrides.items()},
            "line_alignments": dict(self.line_alignments),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextBlock":
        block = cls(
            content=data.get("content", ""),
            font=FontSpec.from_dict(data.get("font", {})),
            line_spacing=float(data.get("line_spacing", 0.0)),
            wrap_enabled=bool(data.get("wrap_enabled", True)),
            padding=Padding.from_value(data.get("padding")),
            block_anchor=BlockAnchor.from_dict(data.get("block_anchor", {})),
            default_alignment=data.get("default_alignment", CENTER),
            line_alignment_overrides={
                int(k): normalize_alignment(v) for k, v in data.get("line_alignment_overrides", {}).items()
            },
            line_alignments={k: normalize_alignment(v) for k, v in data.get("line_alignments", {}).items()},
        )
        if "container" in data:
            block.container = Rect.from_dict(data["container"])
        return block


@dataclass(slots=True, frozen=True)
class Line:
    """One positioned physical line. Produced fresh on every layout pass."""

    text: str
    x: float
    y: float
    width: float
    height: float
    alignment: str = CENTER
    index: int = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "alignment": self.alignment,
            "index": self.index,
        }


@dataclass(slots=True)
class LayoutResult:
    """Lines of one layout pass plus the sizing that produced them."""

    lines: List[Line]
    font_size_used: float
    content_box: Rect
    total_height: float = 0.0
    anchor: Optional[Point] = None

    @property
    def is_empty(self) -> bool:
        """True when nothing is rendered (degenerate box or blank text)."""
        return not any(not line.is_empty for line in self.lines)

    def non_empty_lines(self) -> List[Line]:
        return [line for line in self.lines if not line.is_empty]

    def hit_test(self, x: float, y: float) -> Optional[Line]:
        """Return the non-empty line whose box contains the point, if any."""
        for line in self.non_empty_lines():
            if line.rect.contains(x, y):
                return line
        return None

    def statistics(self) -> Dict[str, Any]:
        non_empty = self.non_empty_lines()
        widths = [line.width for line in self.lines]
        return {
            "total_lines": len(self.lines),
            "non_empty_lines": len(non_empty),
            "total_area": sum(line.width * line.height for line in non_empty),
            "max_line_width": max(widths, default=0.0),
            "average_line_width": sum(widths) / len(widths) if widths else 0.0,
            "font_size": self.font_size_used,
        }


class TextLayoutEngine:
    """
    Lays out TextBlocks using an injected text metrics provider.
    """

    def __init__(self, metrics: TextMetricsProvider, config: Optional[SpotLayoutConfig] = None):
        self.metrics = metrics
        self.config = (config or SpotLayoutConfig()).validate()
        self.line_breaker = LineBreaker(metrics)
        self.alignment = TextAlignmentEngine()

    def layout(self, block: TextBlock) -> LayoutResult:
        """
        Computes wrapped, sized and positioned lines for a block.

        Args:
            block: Text block to lay out

        Returns:
            LayoutResult; ``lines`` is empty for a degenerate content box or
            blank content
        """
        content_box = block.content_box
        if content_box.width <= 0 or content_box.height <= 0:
            logger.debug("Degenerate content box %s, no lines laid out", content_box)
            fallback = self.config.autofit_min_size if block.font.is_auto else float(block.font.size)
            return LayoutResult(lines=[], font_size_used=fallback, content_box=content_box)

        font_size, broken = self._resolve_lines(block, content_box)

        if not any(not line.is_empty for line in broken):
            return LayoutResult(lines=[], font_size_used=font_size, content_box=content_box)

        count = len(broken)
        total_height = count * font_size + (count - 1) * block.line_spacing
        origin = self.alignment.block_origin(content_box, block.block_anchor, total_height)

        stale = [index for index in block.line_alignment_overrides if index >= count or index < 0]
        if stale:
            logger.debug("Ignoring alignment overrides for missing lines %s (have %d)", sorted(stale), count)

        lines: List[Line] = []
        for index, broken_line in enumerate(broken):
            alignment = self.resolve_line_alignment(block, index, broken_line.text)
            x = self.alignment.calculate_x(content_box, origin.x, broken_line.width, alignment)
            y = origin.y + index * (font_size + block.line_spacing)
            lines.append(
                Line(
                    text=broken_line.text,
                    x=x,
                    y=y,
                    width=broken_line.width,
                    height=font_size,
                    alignment=alignment,
                    index=index,
                )
            )

        return LayoutResult(
            lines=lines,
            font_size_used=font_size,
            content_box=content_box,
            total_height=total_height,
            anchor=origin,
        )

    def resolve_line_alignment(self, block: TextBlock, index: int, text: str) -> str:
        """Index override first, then the text-keyed preference, then the block default."""
        override = block.line_alignment_overrides.get(index)
        if override is not None:
            return normalize_alignment(override)
        keyed = block.line_alignments.get(line_key(text)) if text.strip() else None
        if keyed is not None:
            return normalize_alignment(keyed)
        return block.default_alignment

    def pin_line_alignment(self, block: TextBlock, result: LayoutResult, index: int, alignment: str) -> str:
        """
        Remember an alignment for line ``index`` of ``result`` by its text.

        Empty lines have no text to key on and fall back to an index override.

        Returns:
            The key the alignment was stored under
        """
        if not 0 <= index < len(result.lines):
            raise LayoutError("Line index out of range", f"{index} (have {len(result.lines)})")

        alignment = normalize_alignment(alignment)
        line = result.lines[index]
        if line.is_empty:
            block.line_alignment_overrides[index] = alignment
            return str(index)

        key = line_key(line.text)
        block.line_alignments[key] = alignment
        block.line_alignment_overrides.pop(index, None)
        return key

    def remap_overrides(self, block: TextBlock, result: LayoutResult) -> int:
        """
        Convert index overrides into text-keyed alignments before a rewrap.

        Overrides pointing past the end of ``result`` are dropped.

        Returns:
            Number of overrides converted
        """
        converted = 0
        remaining: Dict[int, str] = {}
        for index, alignment in block.line_alignment_overrides.items():
            if not 0 <= index < len(result.lines):
                logger.debug("Dropping stale alignment override for line %d", index)
                continue
            line = result.lines[index]
            if line.is_empty:
                remaining[index] = alignment
                continue
            block.line_alignments[line_key(line.text)] = normalize_alignment(alignment)
            converted += 1
        block.line_alignment_overrides = remaining
        return converted

    def _resolve_lines(self, block: TextBlock, content_box: Rect) -> Tuple[float, Tuple[BrokenLine, ...]]:
        key = (
            block.version,
            id(self.metrics),
            self.config.autofit_max_size,
            self.config.autofit_min_size,
            self.config.autofit_step,
        )
        cached = block._fit_cache
        if cached is not None and cached.key == key:
            return cached.font_size, cached.lines

        if block.font.is_auto:
            font_size, lines = self._auto_fit(block, content_box)
            logger.debug("Auto-fit resolved font size %.1f for %d line(s)", font_size, len(lines))
        else:
            font_size = float(block.font.size)
            lines = self._wrap(block, content_box, font_size)

        block._fit_cache = _FitCacheEntry(key=key, font_size=font_size, lines=lines)
        return font_size, lines

    def _auto_fit(self, block: TextBlock, content_box: Rect) -> Tuple[float, Tuple[BrokenLine, ...]]:
        available_width = content_box.width
        available_height = content_box.height
        size = min(available_height, self.config.autofit_max_size)

        while size >= self.config.autofit_min_size:
            lines = self._wrap(block, content_box, size)
            count = len(lines)
            total_height = count * size + (count - 1) * block.line_spacing
            if total_height <= available_height and all(line.width <= available_width for line in lines):
                return size, lines
            size -= self.config.autofit_step

        floor = self.config.autofit_min_size
        logger.debug("No auto-fit candidate fits, using floor size %.1f", floor)
        return floor, self._wrap(block, content_box, floor)

    def _wrap(self, block: TextBlock, content_box: Rect, font_size: float) -> Tuple[BrokenLine, ...]:
        return tuple(
            self.line_breaker.wrap(
                block.content,
                content_box.width,
                block.font.with_size(font_size),
                wrap_enabled=block.wrap_enabled,
            )
        )
