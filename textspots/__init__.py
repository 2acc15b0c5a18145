"""
textspots - text layout and open-space detection for canvas compositions.

Lays out multi-line text inside a rectangular canvas, finds the open
rectangles ("spots") left around it and keeps user content attached to those
spots while the text, and therefore the spot layout, changes.

Main Components:
- TextLayoutEngine: wrapping, auto-fit sizing and per-line alignment
- SpotDetector: deterministic spot detection from line geometry
- SpotRestorer: re-attaches saved spot content to new spots
- SpotPipeline: debounced text -> layout -> detect -> restore orchestration
"""

from .exceptions import (
    ConfigurationError,
    GeometryError,
    LayoutError,
    MediaError,
    RestorationError,
    TextSpotsError,
)
from .engine.geometry import Padding, Point, Rect, Size
from .config import SpotLayoutConfig, load_config
from .engine.text_metrics import (
    AUTO_SIZE,
    FixedAdvanceTextMetrics,
    FontSpec,
    ReportLabTextMetrics,
    TextMeasurement,
    TextMetricsProvider,
)
from .engine.text_alignment import BlockAnchor
from .engine.text_layout import LayoutResult, Line, TextBlock, TextLayoutEngine
from .models.spot import SavedSpotSnapshot, Spot, SpotType
from .engine.spot_detector import SpotDetector
from .engine.spot_restoration import RestorationResult, SpotMatch, SpotRestorer
from .engine.scheduler import DebouncedScheduler
from .engine.pipeline import PipelineResult, SpotPipeline

__version__ = "0.1.0"

__all__ = [
    "TextSpotsError",
    "LayoutError",
    "GeometryError",
    "ConfigurationError",
    "RestorationError",
    "MediaError",
    "Point",
    "Size",
    "Rect",
    "Padding",
    "SpotLayoutConfig",
    "load_config",
    "AUTO_SIZE",
    "FontSpec",
    "TextMeasurement",
    "TextMetricsProvider",
    "ReportLabTextMetrics",
    "FixedAdvanceTextMetrics",
    "BlockAnchor",
    "TextBlock",
    "Line",
    "LayoutResult",
    "TextLayoutEngine",
    "SpotType",
    "Spot",
    "SavedSpotSnapshot",
    "SpotDetector",
    "SpotMatch",
    "RestorationResult",
    "SpotRestorer",
    "DebouncedScheduler",
    "PipelineResult",
    "SpotPipeline",
]
