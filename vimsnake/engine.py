"""
engine.py — Game loop controller.

Owns the status state machine, the SimulationState and the frame-driven
scheduler. The host calls frame() once per display frame; a tick is
committed whenever 1000 / level milliseconds have passed since the last
one, so the tick rate in ticks per second equals the current level.

Tick order: buffered direction -> move -> food -> score/level -> status.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple

from .config import (
    GameOptions,
    STATUS_WAITING, STATUS_STARTED, STATUS_OVER, STATUS_WON, TERMINAL_STATUSES,
)
from .keybindings import KeyLog, KeyLogEntry
from .model import (
    Direction, FoodField, Grid, Position, SimulationState, Snake,
    STEP_CONTINUE,
)
from .scheduler import FrameScheduler
from .score import ScoreTracker

logger = logging.getLogger(__name__)

Listener = Callable[["GameSnapshot"], None]


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of one engine at one instant, handed to renderers."""
    status: str
    cols: int
    rows: int
    snake_body: Tuple[Position, ...]
    food: FrozenSet[Position]
    score: int
    level: int
    key_log: Tuple[KeyLogEntry, ...]
    final_score: Optional[int]
    paused: bool
    direction: Direction
    head_orientation: Direction
    tail_orientation: Direction
    elapsed_ms: float
    total_keystrokes: int
    tick_interval_ms: float
    collision_pending: bool

    @property
    def head(self) -> Optional[Position]:
        return self.snake_body[0] if self.snake_body else None

    @property
    def tail(self) -> Optional[Position]:
        return self.snake_body[-1] if self.snake_body else None


class GameEngine:
    """
    Top-level simulation.  Owns all mutable game state.

    ``rng`` feeds food placement (defaults to ``random.Random(options.seed)``);
    ``clock`` returns milliseconds and is used whenever a method is called
    without an explicit ``now_ms``.
    """

    def __init__(
        self,
        options: Optional[GameOptions] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.options = options or GameOptions()
        self.clock = clock or monotonic_ms
        self.grid = Grid(self.options.rows, self.options.cols)
        self.state = SimulationState(level=self.options.starting_level)
        self.snake = Snake(self.grid, self.state, self.options.initial_snake_size)
        self.food = FoodField(
            self.grid, self.state,
            rng if rng is not None else random.Random(self.options.seed),
        )
        self.key_log = KeyLog()
        self.scores = ScoreTracker(self.key_log)
        self.scheduler = FrameScheduler()
        self.status: str = STATUS_WAITING
        self._listeners: List[Listener] = []

    # ── Read access ──────────────────────────────────────────────
    @property
    def score(self) -> int:
        return self.state.score

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def paused(self) -> bool:
        return self.scheduler.paused

    @property
    def final_score(self) -> Optional[int]:
        return self.scores.final_score

    @property
    def tick_interval_ms(self) -> float:
        return 1000.0 / self.state.level

    def snapshot(self, now_ms: Optional[float] = None) -> GameSnapshot:
        now = self._now(now_ms)
        return GameSnapshot(
            status=self.status,
            cols=self.grid.cols,
            rows=self.grid.rows,
            snake_body=tuple(self.state.body),
            food=frozenset(self.state.food),
            score=self.state.score,
            level=self.state.level,
            key_log=self.key_log.entries(),
            final_score=self.scores.final_score,
            paused=self.scheduler.paused,
            direction=self.state.direction,
            head_orientation=self.snake.head_orientation,
            tail_orientation=self.snake.tail_orientation,
            elapsed_ms=self.scores.elapsed_ms(now),
            total_keystrokes=self.scores.total_keystrokes,
            tick_interval_ms=self.tick_interval_ms,
            collision_pending=self.state.collision_pending,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every tick and transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Public API ───────────────────────────────────────────────
    def start_game(self, now_ms: Optional[float] = None) -> bool:
        if self.status == STATUS_STARTED:
            logger.debug("start_game ignored: game already running")
            return False
        now = self._now(now_ms)
        if self.status in TERMINAL_STATUSES:
            self.stop_game(now)

        self._reset_progress()
        self.key_log.clear()
        self.snake.init()
        self.food.spawn(self.state.body, self.options.initial_food_count)

        self.status = STATUS_STARTED
        self.scheduler.start(now)
        self.scores.on_status(self.status, self.state.score, now)
        logger.info(
            "game started: %dx%d board, level %d",
            self.grid.cols, self.grid.rows, self.state.level,
        )
        self._notify(now)
        return True

    def stop_game(self, now_ms: Optional[float] = None) -> bool:
        if self.status == STATUS_WAITING:
            return False
        now = self._now(now_ms)
        self.scheduler.cancel()
        self.snake.clear()
        self.food.clear()
        self._reset_progress()
        self.status = STATUS_WAITING
        self.scores.on_status(self.status, self.state.score, now)
        logger.info("game stopped")
        self._notify(now)
        return True

    def quit_game(self, now_ms: Optional[float] = None) -> bool:
        return self.stop_game(now_ms)

    def toggle_pause(self, now_ms: Optional[float] = None) -> bool:
        """Pause or resume ticking. Returns the new paused flag."""
        if self.status != STATUS_STARTED:
            return self.scheduler.paused
        now = self._now(now_ms)
        if self.scheduler.paused:
            self.scheduler.resume(now)
            logger.info("game resumed")
        else:
            self.scheduler.pause()
            logger.info("game paused")
        self._notify(now)
        return self.scheduler.paused

    def set_pending_direction(self, direction: Direction) -> bool:
        return self.snake.request_direction(direction)

    def frame(self, now_ms: Optional[float] = None) -> bool:
        """
        Called once per display frame.
        Returns True if a tick was committed on this frame.
        """
        if self.status != STATUS_STARTED:
            return False
        now = self._now(now_ms)
        if not self.scheduler.due(now, self.tick_interval_ms):
            return False
        self._tick(now)
        if self.scheduler.running:
            self.scheduler.commit(now)
        self._notify(now)
        return True

    # ── Private helpers ──────────────────────────────────────────
    def _now(self, now_ms: Optional[float]) -> float:
        return self.clock() if now_ms is None else now_ms

    def _reset_progress(self) -> None:
        self.state.score = 0
        self.state.level = self.options.starting_level
        self.state.foods_eaten_this_level = 0
        self.state.should_grow = False
        self.state.collision_pending = False

    def _tick(self, now: float) -> None:
        state = self.state
        result = self.snake.step(grow=state.should_grow)

        if result != STEP_CONTINUE:
            if self.options.collision_grace and not state.collision_pending:
                state.collision_pending = True
                logger.debug("%s pending at %s", result, self.snake.head)
                return
            logger.info("%s at level %d, score %d", result, state.level, state.score)
            self._finish(STATUS_OVER, now)
            return

        state.collision_pending = False
        state.should_grow = False

        head = self.snake.head
        if head is not None and self.food.consume(head):
            self._on_food_eaten()

        if self._has_won():
            self._finish(STATUS_WON, now)

    def _on_food_eaten(self) -> None:
        state = self.state
        # The segment is added by the next step.
        state.should_grow = True
        state.foods_eaten_this_level += 1
        # Points use the level the food was eaten at, before any level-up.
        state.score += state.level
        if (state.foods_eaten_this_level >= self.options.foods_per_level
                and state.level < self.options.max_level):
            state.level += 1
            state.foods_eaten_this_level = 0
            logger.info("level up: %d", state.level)
        self.food.top_up(state.body, 1)

    def _has_won(self) -> bool:
        target = self.options.target_score
        if target is not None and self.state.score >= target:
            return True
        return self.options.win_on_full_board and len(self.state.body) >= self.grid.area

    def _finish(self, status: str, now: float) -> None:
        self.scheduler.cancel()
        self.status = status
        self.scores.on_status(status, self.state.score, now)
        logger.info("%s with score %d", status, self.state.score)

    def _notify(self, now: float) -> None:
        if not self._listeners:
            return
        snap = self.snapshot(now)
        for listener in list(self._listeners):
            listener(snap)
