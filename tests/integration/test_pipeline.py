"""End-to-end tests for SpotPipeline."""

import json
import logging
import threading
from unittest.mock import Mock

import pytest

from textspots.config import SpotLayoutConfig
from textspots.engine.geometry import Padding, Rect, Size
from textspots.engine.pipeline import PipelineResult, SpotPipeline
from textspots.engine.scheduler import DebouncedScheduler
from textspots.engine.text_alignment import BlockAnchor
from textspots.engine.text_layout import TextBlock
from textspots.engine.text_metrics import FixedAdvanceTextMetrics, FontSpec
from textspots.exceptions import ConfigurationError, LayoutError
from textspots.models.spot import SpotType

pytestmark = pytest.mark.integration


def make_block(content=""):
    return TextBlock(
        content=content,
        font=FontSpec(size=100),
        container=Rect(0, 0, 800, 800),
        padding=Padding(),
        block_anchor=BlockAnchor("center", "top"),
    )


@pytest.fixture
def widths():
    return {"Love": 400.0, "Lovely": 440.0, "Wide": 800.0}


@pytest.fixture
def pipeline(widths, timer_factory):
    config = SpotLayoutConfig(canvas_size=Size(800, 800), padding=Padding())
    return SpotPipeline(
        config,
        FixedAdvanceTextMetrics(advance=0.5, overrides=widths),
        block=make_block(),
        scheduler=DebouncedScheduler(timer_factory),
    )


def rects(spots):
    return [spot.rect for spot in spots]


class TestScheduling:
    """Test suite for debounced runs."""

    def test_set_text_schedules_debounced_run(self, pipeline, timer_factory):
        """Test text edits run only when the debounce timer fires."""
        pipeline.set_text("Love")

        assert pipeline.spots == []
        assert timer_factory.last.delay == 0.5

        timer_factory.last.fire()

        assert rects(pipeline.spots) == [Rect(0, 0, 200, 100), Rect(600, 0, 200, 100), Rect(0, 100, 800, 700)]

    def test_only_latest_text_is_processed(self, pipeline, timer_factory):
        """Test rapid edits collapse into one run of the latest text."""
        on_update = Mock()
        pipeline.on_update = on_update

        pipeline.set_text("Wide")
        pipeline.set_text("Love")
        for timer in timer_factory.timers:
            timer.fire()

        on_update.assert_called_once()
        result = on_update.call_args[0][0]
        assert isinstance(result, PipelineResult)
        assert result.layout.lines[0].text == "Love"

    def test_blank_text_does_not_schedule(self, pipeline, timer_factory):
        """Test blank text never schedules detection."""
        pipeline.set_text("   ")

        assert timer_factory.timers == []

    def test_auto_detect_off(self, pipeline, timer_factory):
        """Test edits are not scheduled with auto-detect disabled."""
        pipeline.set_auto_detect(False)
        pipeline.set_text("Love")

        assert timer_factory.live() == []

        pipeline.set_auto_detect(True)

        assert timer_factory.last.delay == 0.05
        timer_factory.last.fire()
        assert len(pipeline.spots) == 3

    def test_flush(self, pipeline):
        """Test flush runs the pending pass synchronously."""
        pipeline.set_text("Love")

        assert pipeline.flush() is True
        assert len(pipeline.spots) == 3

    def test_default_scheduler_runs_on_caller_thread(self, widths):
        """Test debounced runs execute on the thread that polls the pipeline."""
        threads = []
        pipeline = SpotPipeline(
            SpotLayoutConfig(canvas_size=Size(800, 800), padding=Padding(), debounce_delay=0.0),
            FixedAdvanceTextMetrics(advance=0.5, overrides=widths),
            block=make_block(),
            on_update=lambda result: threads.append(threading.current_thread()),
        )

        pipeline.set_text("Love")

        assert threads == []
        assert pipeline.poll() is True
        assert threads == [threading.current_thread()]
        assert len(pipeline.spots) == 3

    def test_edit_between_schedule_and_poll_survives(self, widths):
        """Test spot edits made while a run is pending are carried into it."""
        pipeline = SpotPipeline(
            SpotLayoutConfig(canvas_size=Size(800, 800), padding=Padding(), debounce_delay=0.0),
            FixedAdvanceTextMetrics(advance=0.5, overrides=widths),
            block=make_block(),
        )
        pipeline.set_text("Love")
        pipeline.poll()

        pipeline.set_text("Lovely")
        pipeline.set_spot_content(2, "text", {"text": "Apply"})
        pipeline.poll()

        assert pipeline.get_spot(2).content == {"text": "Apply"}


class TestRestorationFlow:
    """Test suite for content surviving text edits."""

    def test_shifted_spot_keeps_content(self, pipeline):
        """Test a right spot that moves a little keeps its text."""
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(2, "text", {"text": "Join us"})

        pipeline.set_text("Lovely")
        pipeline.flush()
        result = pipeline.last_result

        assert pipeline.get_spot(2).rect == Rect(620, 0, 180, 100)
        assert pipeline.get_spot(2).type is SpotType.TEXT
        assert pipeline.get_spot(2).content == {"text": "Join us"}
        assert result.waiting == []

    def test_waiting_queue_carries_content_forward(self, pipeline):
        """Test content without room waits and comes back when room reappears."""
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(1, "text", {"text": "left"})
        pipeline.set_spot_content(2, "mask", {"shape": "circle"})

        pipeline.set_text("Wide")
        pipeline.flush()

        assert len(pipeline.spots) == 1
        assert pipeline.spots[0].content == {"text": "left"}
        assert len(pipeline.waiting) == 1
        assert pipeline.waiting[0].content == {"shape": "circle"}

        pipeline.set_text("Love")
        pipeline.flush()

        assert pipeline.waiting == []
        assert pipeline.get_spot(1).is_empty
        assert pipeline.get_spot(2).type is SpotType.MASK
        assert pipeline.get_spot(2).opacity == 0.5
        assert pipeline.get_spot(3).content == {"text": "left"}

    def test_failed_run_keeps_previous_state(self, widths, timer_factory, caplog):
        """Test a layout failure is logged and the previous spots survive."""
        metrics = Mock(wraps=FixedAdvanceTextMetrics(advance=0.5, overrides=widths))
        pipeline = SpotPipeline(
            SpotLayoutConfig(padding=Padding()),
            metrics,
            block=make_block(),
            scheduler=DebouncedScheduler(timer_factory),
        )
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(2, "text", {"text": "Join us"})
        before = list(pipeline.spots)

        metrics.measure.side_effect = LayoutError("measurement failed")
        pipeline.set_text("Lovely")
        with caplog.at_level(logging.ERROR):
            pipeline.flush()

        assert pipeline.spots == before
        assert pipeline.get_spot(2).content == {"text": "Join us"}
        assert pipeline.last_layout.lines[0].text == "Love"
        assert "Spot pipeline run failed" in caplog.text


class TestEditing:
    """Test suite for spot and line edits."""

    def test_set_spot_content(self, pipeline):
        """Test typing a spot and giving it content."""
        pipeline.set_text("Love")
        pipeline.flush()

        spot = pipeline.set_spot_content(3, "mask", {"shape": "circle"}, opacity=0.8)

        assert spot.type is SpotType.MASK
        assert spot.content == {"shape": "circle"}
        assert spot.opacity == 0.8

    def test_clear_spot(self, pipeline):
        """Test clearing a spot."""
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(1, "text", {"text": "x"})

        assert pipeline.clear_spot(1).is_empty

    def test_unknown_spot(self, pipeline):
        """Test unknown ids raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            pipeline.get_spot(42)

    def test_spot_at(self, pipeline):
        """Test finding the spot under a point."""
        pipeline.set_text("Love")
        pipeline.flush()

        assert pipeline.spot_at(700, 50).id == 2
        assert pipeline.spot_at(400, 50) is None

    def test_set_line_alignment(self, pipeline, timer_factory):
        """Test aligning a line re-runs detection around its new position."""
        pipeline.set_text("Love")
        pipeline.flush()

        key = pipeline.set_line_alignment(0, "left")

        assert key == "Love"
        assert timer_factory.last.delay == 0.05
        timer_factory.last.fire()
        assert pipeline.last_layout.lines[0].x == 0.0
        assert rects(pipeline.spots) == [Rect(400, 0, 400, 100), Rect(0, 100, 800, 700)]

    def test_validate(self, pipeline):
        """Test the current spots validate against the last layout."""
        pipeline.set_text("Love")
        pipeline.flush()

        is_valid, errors, _ = pipeline.validate()

        assert is_valid
        assert errors == []


class TestState:
    """Test suite for export_state / import_state."""

    def test_export_is_json_safe(self, pipeline):
        """Test exported state serializes to JSON."""
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(2, "text", {"text": "Join us"})

        state = json.loads(json.dumps(pipeline.export_state()))

        assert state["block"]["content"] == "Love"
        assert len(state["spots"]) == 1
        assert state["spots"][0]["original_id"] == 2
        assert state["waiting"] == []

    def test_import_restores_content(self, pipeline, widths, timer_factory):
        """Test importing into a fresh pipeline restores spots and content."""
        pipeline.set_text("Love")
        pipeline.flush()
        pipeline.set_spot_content(2, "text", {"text": "Join us"})
        state = json.loads(json.dumps(pipeline.export_state()))

        other = SpotPipeline(
            SpotLayoutConfig(padding=Padding()),
            FixedAdvanceTextMetrics(advance=0.5, overrides=widths),
            scheduler=DebouncedScheduler(timer_factory),
        )
        result = other.import_state(state)

        assert result is not None
        assert other.block.content == "Love"
        assert other.get_spot(2).content == {"text": "Join us"}
        assert other.waiting == []


class TestDefaultPipeline:
    """Test suite for the pipeline with real font metrics."""

    def test_reportlab_metrics(self):
        """Test a default pipeline lays out text and finds valid spots."""
        pipeline = SpotPipeline(scheduler=DebouncedScheduler(Mock()))
        pipeline.block.content = "Join\nour team"

        result = pipeline.run()

        assert result is not None
        assert [line.text for line in result.layout.lines] == ["Join", "our team"]
        assert result.layout.font_size_used <= 120.0
        assert pipeline.validate()[0]
