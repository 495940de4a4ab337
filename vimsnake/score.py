"""
score.py — Derived score view.

Follows the engine's status to keep a wall-clock timer and to freeze the
final score on the first terminal status. Holds no game rules.
"""

import logging
from typing import Optional, Sized

from .config import STATUS_STARTED, STATUS_WAITING, TERMINAL_STATUSES

logger = logging.getLogger(__name__)


class Timer:
    """Start/stop/reset stopwatch driven by explicit millisecond timestamps."""

    def __init__(self):
        self._accumulated: float = 0.0
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self, now_ms: float) -> None:
        if self._started_at is None:
            self._started_at = now_ms

    def stop(self, now_ms: float) -> None:
        if self._started_at is not None:
            self._accumulated += max(0.0, now_ms - self._started_at)
            self._started_at = None

    def reset(self) -> None:
        self._accumulated = 0.0
        self._started_at = None

    def elapsed(self, now_ms: float) -> float:
        if self._started_at is None:
            return self._accumulated
        return self._accumulated + max(0.0, now_ms - self._started_at)


class ScoreTracker:
    """
    Elapsed time, keystroke count and final score for one game.

    ``key_log`` is any sized container; only its length is read.
    """

    def __init__(self, key_log: Sized):
        self.key_log = key_log
        self.timer = Timer()
        self.final_score: Optional[int] = None

    @property
    def total_keystrokes(self) -> int:
        return len(self.key_log)

    def elapsed_ms(self, now_ms: float) -> float:
        return self.timer.elapsed(now_ms)

    def on_status(self, status: str, score: int, now_ms: float) -> None:
        """Follow a status transition of the engine."""
        if status == STATUS_STARTED:
            self.timer.reset()
            self.timer.start(now_ms)
            self.final_score = None
        elif status in TERMINAL_STATUSES:
            self.timer.stop(now_ms)
            if self.final_score is None:
                self.final_score = score
                logger.info("final score %d after %.1fs", score, self.timer.elapsed(now_ms) / 1000)
        elif status == STATUS_WAITING:
            self.timer.stop(now_ms)
            self.timer.reset()
            self.final_score = None
