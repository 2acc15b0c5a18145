"""
Single-slot debounced scheduling.

Every ``schedule`` call cancels the pending run (if any) and replaces it, so at
most one pipeline run is pending and only the latest state is processed.

The timer implementation is injected. The default fires on the scheduling
thread: through ``loop.call_later`` when an asyncio loop is running there,
otherwise once its deadline has passed and the owner calls ``poll()`` (or
``flush()``). ``threading_timer_factory`` is available for callers that accept
running the callback on a timer thread.
"""

import asyncio
import logging
import threading
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class DeadlineTimer:
    """Timer that fires from ``DebouncedScheduler.poll`` once its delay has elapsed."""

    def __init__(self, delay: float, callback: Callable[[], None], clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self.callback = callback
        self.deadline: Optional[float] = None
        self.cancelled = False
        self._clock = clock

    def start(self) -> None:
        self.deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def due(self) -> bool:
        return not self.cancelled and self.deadline is not None and self._clock() >= self.deadline


class LoopTimer:
    """Timer backed by ``call_later`` on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    def start(self) -> None:
        self._handle = self._loop.call_later(self.delay, self.callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()


def caller_thread_timer_factory(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Default factory: the callback always runs on the thread that scheduled it."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return DeadlineTimer(delay, callback)
    return LoopTimer(loop, delay, callback)


def threading_timer_factory(delay: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class DebouncedScheduler:
    """Owns one timer handle; scheduling replaces it."""

    def __init__(self, timer_factory: Optional[TimerFactory] = None):
        self._timer_factory = timer_factory or caller_thread_timer_factory
        self._handle: Optional[TimerHandle] = None
        self._callback: Optional[Callable[[], None]] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        """
        Run ``callback`` after ``delay`` seconds unless superseded.

        Args:
            delay: Delay in seconds
            callback: Work to run; replaces any pending callback
        """
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            self._callback = callback
            self._handle = self._timer_factory(delay, lambda: self._fire(generation))
            handle = self._handle
        handle.start()
        logger.debug("Scheduled run #%d in %.3fs", generation, delay)

    def cancel(self) -> bool:
        """Cancel the pending run. Returns True if one was pending."""
        with self._lock:
            return self._cancel_locked()

    def flush(self) -> bool:
        """Run the pending callback now. Returns True if one was pending."""
        with self._lock:
            callback = self._callback
            had_pending = self._cancel_locked()
        if had_pending and callback is not None:
            callback()
        return had_pending

    def poll(self) -> bool:
        """
        Fire a pending ``DeadlineTimer`` whose delay has elapsed.

        Call this from the owner's event loop or idle handler. Other timer
        kinds fire on their own and are ignored here.

        Returns:
            True if a callback ran
        """
        with self._lock:
            handle = self._handle
        if isinstance(handle, DeadlineTimer) and handle.due:
            handle.callback()
            return True
        return False

    def _cancel_locked(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._callback = None
        return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._handle is None:
                # Superseded after the timer had already fired
                return
            callback = self._callback
            self._handle = None
            self._callback = None
        if callback is not None:
            callback()
