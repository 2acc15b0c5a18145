"""
Pytest configuration for textspots
"""

import logging
import sys

import pytest

from textspots.config import SpotLayoutConfig
from textspots.engine.geometry import Padding, Rect, Size
from textspots.engine.scheduler import DebouncedScheduler
from textspots.engine.text_layout import Line
from textspots.engine.text_metrics import FixedAdvanceTextMetrics


class ManualTimer:
    """Timer handle that only fires when the test says so."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.callback()


class ManualTimerFactory:
    """Records every timer created so tests can fire them deterministically."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]

    def live(self):
        return [timer for timer in self.timers if timer.started and not timer.cancelled]


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def metrics():
    """Deterministic metrics: 0.5 x font size per character, "Love" is always 400 wide."""
    return FixedAdvanceTextMetrics(advance=0.5, overrides={"Love": 400.0})


@pytest.fixture
def layout_config():
    """Unpadded 800x800 canvas with the default 50x50 minimum spot size."""
    return SpotLayoutConfig(canvas_size=Size(800.0, 800.0), padding=Padding())


@pytest.fixture
def canvas():
    return Size(800.0, 800.0)


@pytest.fixture
def love_line():
    """The single centred "Love" line: x=200, width=400, height=100, top of canvas."""
    return Line(text="Love", x=200.0, y=0.0, width=400.0, height=100.0, index=0)


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


@pytest.fixture
def scheduler(timer_factory):
    return DebouncedScheduler(timer_factory)


@pytest.fixture
def full_canvas():
    return Rect(0.0, 0.0, 800.0, 800.0)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    logging.raiseExceptions = False
