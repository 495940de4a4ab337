"""
scheduler.py — Frame-driven tick gate.

The host calls the engine once per display frame; this class decides
whether enough time has passed since the last committed tick. It never
sleeps and never owns a thread, so cancelling it is just flipping a flag:
a cancelled scheduler refuses every later frame until it is started again.
"""

import logging

logger = logging.getLogger(__name__)


class FrameScheduler:
    """Accumulates frame time and reports when a tick is due."""

    def __init__(self):
        self.running: bool = False
        self.paused: bool = False
        self.baseline: float = 0.0
        self.ticks: int = 0

    @property
    def active(self) -> bool:
        return self.running and not self.paused

    def start(self, now_ms: float) -> None:
        self.running = True
        self.paused = False
        self.baseline = now_ms
        self.ticks = 0

    def cancel(self) -> None:
        if self.running:
            logger.debug("scheduler cancelled after %d ticks", self.ticks)
        self.running = False
        self.paused = False

    def pause(self) -> None:
        if self.running:
            self.paused = True

    def resume(self, now_ms: float) -> None:
        # Time spent paused never counts towards the next tick.
        if self.running and self.paused:
            self.paused = False
            self.baseline = now_ms

    def due(self, now_ms: float, interval_ms: float) -> bool:
        return self.active and now_ms - self.baseline >= interval_ms

    def commit(self, now_ms: float) -> None:
        """Mark a tick as done at ``now_ms``; leftover time is dropped."""
        self.baseline = now_ms
        self.ticks += 1
