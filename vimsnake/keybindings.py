"""
keybindings.py — Input command buffer.

Turns raw key strings into engine commands. Direction keys use the vi
motions (h/j/k/l, either case). Every key the game accepts while running is
recorded in the key log; anything else is dropped without a trace.
"""

import logging
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from .config import (
    KEY_LEFT, KEY_DOWN, KEY_UP, KEY_RIGHT,
    KEY_PAUSE, KEY_QUIT, KEY_START,
    STATUS_WAITING, STATUS_STARTED, TERMINAL_STATUSES,
)
from .model import Direction

logger = logging.getLogger(__name__)

DIRECTION_KEYS = {
    KEY_LEFT:  Direction.LEFT,
    KEY_DOWN:  Direction.DOWN,
    KEY_UP:    Direction.UP,
    KEY_RIGHT: Direction.RIGHT,
}


class KeyLogEntry(NamedTuple):
    key: str
    timestamp_ms: float


class KeyLog:
    """Append-only record of accepted keystrokes."""

    def __init__(self):
        self._entries: List[KeyLogEntry] = []

    def record(self, key: str, timestamp_ms: float) -> KeyLogEntry:
        # Timestamps never run backwards, even if the host clock does.
        if self._entries:
            timestamp_ms = max(timestamp_ms, self._entries[-1].timestamp_ms)
        entry = KeyLogEntry(key, timestamp_ms)
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        self._entries = []

    def entries(self) -> Tuple[KeyLogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KeyLogEntry]:
        return iter(tuple(self._entries))


class KeyBindings:
    """
    Routes key presses to a GameEngine, gated by its status.

    While the game waits or has ended only the start key does anything.
    While it runs, direction, pause and quit keys are logged and forwarded.
    """

    def __init__(self, engine, clock: Optional[Callable[[], float]] = None):
        self.engine = engine
        self.clock = clock or engine.clock

    @property
    def key_log(self) -> KeyLog:
        return self.engine.key_log

    def handle_key(self, key: str, now_ms: Optional[float] = None) -> bool:
        """Process one key. Returns True when the key was acted on."""
        if not key:
            return False
        now = self.clock() if now_ms is None else now_ms
        status = self.engine.status

        if status == STATUS_WAITING or status in TERMINAL_STATUSES:
            if key == KEY_START:
                self.engine.start_game(now)
                return True
            logger.debug("ignored key %r while %s", key, status)
            return False

        if status != STATUS_STARTED:
            return False

        lowered = key.lower()
        if lowered in DIRECTION_KEYS:
            self.key_log.record(key, now)
            self.engine.set_pending_direction(DIRECTION_KEYS[lowered])
            return True
        if lowered == KEY_PAUSE:
            self.key_log.record(key, now)
            self.engine.toggle_pause(now)
            return True
        if lowered == KEY_QUIT:
            self.key_log.record(key, now)
            self.engine.quit_game(now)
            return True

        logger.debug("ignored key %r", key)
        return False
