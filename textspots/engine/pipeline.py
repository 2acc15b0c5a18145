"""
Spot pipeline - main entry point for the text -> spots workflow.

Example:
    from textspots.engine.pipeline import SpotPipeline
    from textspots.config import SpotLayoutConfig

    pipeline = SpotPipeline(SpotLayoutConfig())
    pipeline.set_text("Join\\nour team")   # schedules a debounced run
    pipeline.poll()                         # from the caller's loop, or flush()
    pipeline.set_spot_content(1, "text", {"text": "Apply now"})

Flow of one run:
1. Snapshot non-empty live spots (after any still-waiting snapshots)
2. TextBlock -> TextLayoutEngine -> LayoutResult
3. LayoutResult -> SpotDetector -> fresh spots
4. Fresh spots + snapshots -> SpotRestorer -> restored spots + waiting queue
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..config import SpotLayoutConfig
from ..exceptions import ConfigurationError, TextSpotsError
from ..models.spot import SavedSpotSnapshot, Spot, SpotType
from .geometry import Rect
from .layout_validator import LayoutValidator
from .scheduler import DebouncedScheduler
from .spot_detector import SpotDetector
from .spot_restoration import ImageDecoder, SpotMatch, SpotRestorer
from .text_layout import LayoutResult, TextBlock, TextLayoutEngine
from .text_metrics import ReportLabTextMetrics, TextMetricsProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineResult:
    layout: LayoutResult
    spots: List[Spot]
    waiting: List[SavedSpotSnapshot] = field(default_factory=list)
    matches: List[SpotMatch] = field(default_factory=list)


class SpotPipeline:
    """
    Orchestrates layout, detection and restoration for one canvas.

    The pipeline owns the live spot list, the waiting queue and the text
    block between runs. Runs are synchronous; ``set_text`` only schedules one
    through the single-slot debouncer, whose default timers fire on the
    caller's thread (see ``scheduler.caller_thread_timer_factory``).
    """

    def __init__(
        self,
        config: Optional[SpotLayoutConfig] = None,
        metrics: Optional[TextMetricsProvider] = None,
        *,
        block: Optional[TextBlock] = None,
        scheduler: Optional[DebouncedScheduler] = None,
        image_decoder: Optional[ImageDecoder] = None,
        on_update: Optional[Callable[[PipelineResult], None]] = None,
    ):
        """
        Args:
            config: Pipeline configuration
            metrics: Text metrics provider (ReportLab metrics by default)
            block: Initial text block; defaults to a block filling the canvas
            scheduler: Debouncer (inject one with a fake timer in tests)
            image_decoder: Decoder for saved image data URLs
            on_update: Called with every successful PipelineResult
        """
        self.config = (config or SpotLayoutConfig()).validate()
        self.metrics = metrics or ReportLabTextMetrics()
        canvas = self.config.canvas_size
        self.block = block or TextBlock(
            container=Rect(0.0, 0.0, canvas.width, canvas.height),
            padding=self.config.padding,
        )
        self.layout_engine = TextLayoutEngine(self.metrics, self.config)
        self.detector = SpotDetector(self.config)
        self.restorer = SpotRestorer(self.config, image_decoder)
        self.scheduler = scheduler or DebouncedScheduler()
        self.auto_detect = self.config.auto_detect
        self.on_update = on_update

        self.spots: List[Spot] = []
        self.waiting: List[SavedSpotSnapshot] = []
        self.last_layout: Optional[LayoutResult] = None
        self.last_result: Optional[PipelineResult] = None

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Replace the text and schedule a debounced run."""
        if self.last_layout is not None and self.block.line_alignment_overrides:
            self.layout_engine.remap_overrides(self.block, self.last_layout)
        self.block.content = text
        if self.auto_detect and text.strip():
            self.scheduler.schedule(self.config.debounce_delay, self.run)

    def set_auto_detect(self, enabled: bool) -> None:
        self.auto_detect = enabled
        if enabled:
            self.scheduler.schedule(self.config.immediate_delay, self.run)
        else:
            self.scheduler.cancel()

    def set_line_alignment(self, index: int, alignment: str) -> str:
        """
        Align one line of the last layout; the choice follows the line's text
        across rewraps.

        Returns:
            Key the alignment was stored under
        """
        if self.last_layout is None:
            self.last_layout = self.layout_engine.layout(self.block)
        key = self.layout_engine.pin_line_alignment(self.block, self.last_layout, index, alignment)
        if self.auto_detect:
            self.scheduler.schedule(self.config.immediate_delay, self.run)
        return key

    def get_spot(self, spot_id: int) -> Spot:
        for spot in self.spots:
            if spot.id == spot_id:
                return spot
        raise ConfigurationError("Unknown spot id", str(spot_id))

    def spot_at(self, x: float, y: float) -> Optional[Spot]:
        for spot in self.spots:
            if spot.contains(x, y):
                return spot
        return None

    def set_spot_content(
        self,
        spot_id: int,
        spot_type: Union[SpotType, str],
        content: Optional[Mapping[str, Any]] = None,
        opacity: Optional[float] = None,
    ) -> Spot:
        spot = self.get_spot(spot_id)
        spot.set_type(spot_type)
        spot.set_content(content)
        if opacity is not None:
            spot.set_opacity(opacity)
        return spot

    def clear_spot(self, spot_id: int) -> Spot:
        spot = self.get_spot(spot_id)
        spot.clear()
        return spot

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def flush(self) -> bool:
        """Run a pending debounced pass now. Returns True if one was pending."""
        return self.scheduler.flush()

    def poll(self) -> bool:
        """Run the pending pass if its debounce delay has elapsed. Returns True if it ran."""
        return self.scheduler.poll()

    def run(self) -> Optional[PipelineResult]:
        """
        Lays out the text, detects spots and restores saved content.

        A pass that fails with a TextSpotsError is logged and leaves the
        previous spots, layout and waiting queue untouched.

        Returns:
            PipelineResult, or None if the pass failed
        """
        saved = list(self.waiting) + [SavedSpotSnapshot.from_spot(spot) for spot in self.spots if not spot.is_empty]

        try:
            layout = self.layout_engine.layout(self.block)
            spots = self.detector.detect(
                self.config.canvas_size,
                layout.lines,
                self.block.padding,
                self.config.min_spot_size,
            )
            restoration = self.restorer.restore(spots, saved)
        except TextSpotsError:
            logger.exception("Spot pipeline run failed, keeping previous layout")
            return None

        self.spots = restoration.restored
        self.waiting = restoration.waiting
        self.last_layout = layout

        result = PipelineResult(
            layout=layout,
            spots=self.spots,
            waiting=self.waiting,
            matches=restoration.matches,
        )
        self.last_result = result
        logger.info(
            "Pipeline run: %d line(s) at %.0fpx, %d spot(s), %d waiting",
            len(layout.lines), layout.font_size_used, len(self.spots), len(self.waiting),
        )
        if self.on_update is not None:
            self.on_update(result)
        return result

    def validate(self) -> tuple[bool, List[str], List[str]]:
        """Validate the current spots against the last layout."""
        lines = self.last_layout.lines if self.last_layout is not None else []
        validator = LayoutValidator(self.config.canvas_size, self.spots, lines, self.config.min_spot_size)
        return validator.validate()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def export_state(self) -> Dict[str, Any]:
        """JSON-safe snapshot of the block, authored spots and waiting queue."""
        return {
            "config": self.config.to_dict(),
            "block": self.block.to_dict(),
            "spots": [SavedSpotSnapshot.from_spot(spot).to_dict() for spot in self.spots if not spot.is_empty],
            "waiting": [snapshot.to_dict() for snapshot in self.waiting],
        }

    def import_state(self, state: Mapping[str, Any]) -> Optional[PipelineResult]:
        """
        Load a state produced by ``export_state`` and run immediately.

        The configuration of this pipeline is kept; only content is imported.
        """
        self.scheduler.cancel()
        self.block = TextBlock.from_dict(state.get("block", {}))
        waiting = [SavedSpotSnapshot.from_dict(item) for item in state.get("waiting", [])]
        authored = [SavedSpotSnapshot.from_dict(item) for item in state.get("spots", [])]
        self.spots = []
        self.waiting = waiting + authored
        self.last_layout = None
        return self.run()
