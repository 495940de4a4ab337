"""
model.py — Model layer.

Owns the board geometry and the rules that move the snake and place food.
Zero rendering, zero input handling, zero timing.

Classes:
    Direction        — immutable (dr, dc) value object
    Position         — (r, c) grid cell
    Grid             — board geometry
    SimulationState  — the one mutable state record owned by the engine
    Snake            — body, direction, buffered direction, movement
    FoodField        — food placement and consumption
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Set

logger = logging.getLogger(__name__)

STEP_CONTINUE = "continue"
STEP_WALL     = "wall-collision"
STEP_SELF     = "self-collision"


# ─────────────────────────── Direction ───────────────────────────
class Direction:
    """Immutable grid direction; rows grow downwards."""
    UP    = None  # filled below after class definition
    DOWN  = None
    LEFT  = None
    RIGHT = None

    def __init__(self, name: str, dr: int, dc: int):
        self.name = name
        self.dr = dr
        self.dc = dc

    def is_opposite(self, other: "Direction") -> bool:
        return self.dr == -other.dr and self.dc == -other.dc

    @property
    def opposite(self) -> "Direction":
        return _BY_OFFSET[(-self.dr, -self.dc)]

    @classmethod
    def from_name(cls, name: str) -> "Direction":
        return _BY_NAME[name.lower()]

    def __eq__(self, other):
        return isinstance(other, Direction) and self.dr == other.dr and self.dc == other.dc

    def __hash__(self):
        return hash((self.dr, self.dc))

    def __repr__(self):
        return f"Direction.{self.name.upper()}"


Direction.UP    = Direction("up",    -1,  0)
Direction.DOWN  = Direction("down",   1,  0)
Direction.LEFT  = Direction("left",   0, -1)
Direction.RIGHT = Direction("right",  0,  1)
ALL_DIRS = [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]
_BY_NAME = {d.name: d for d in ALL_DIRS}
_BY_OFFSET = {(d.dr, d.dc): d for d in ALL_DIRS}


class Position(NamedTuple):
    r: int
    c: int

    def moved(self, direction: Direction) -> "Position":
        return Position(self.r + direction.dr, self.c + direction.dc)


# ──────────────────────────── Grid ───────────────────────────────
class Grid:
    """Static board geometry: ``rows`` x ``cols`` cells."""

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols

    @property
    def area(self) -> int:
        return self.rows * self.cols

    @property
    def center(self) -> Position:
        return Position(self.rows // 2, self.cols // 2)

    def contains(self, pos: Position) -> bool:
        return 0 <= pos.r < self.rows and 0 <= pos.c < self.cols

    def cells(self) -> Iterable[Position]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield Position(r, c)


# ─────────────────────── SimulationState ─────────────────────────
@dataclass
class SimulationState:
    """
    Everything a tick reads or writes.

    Ownership is split by field: ``body``, ``direction`` and ``pending`` are
    written only by Snake, ``food`` only by FoodField, the rest only by the
    engine.
    """
    body: List[Position] = field(default_factory=list)
    direction: Direction = Direction.UP
    pending: Optional[Direction] = None
    food: Set[Position] = field(default_factory=set)
    score: int = 0
    level: int = 1
    foods_eaten_this_level: int = 0
    should_grow: bool = False
    collision_pending: bool = False


# ──────────────────────────── Snake ──────────────────────────────
class Snake:
    """
    Movement rules for the snake stored in a SimulationState.
    No rendering. No input handling.
    """

    def __init__(self, grid: Grid, state: SimulationState, initial_size: int = 3):
        self.grid = grid
        self.state = state
        self.initial_size = initial_size

    # ── Accessors ────────────────────────────────────────────────
    @property
    def body(self) -> List[Position]:
        return self.state.body

    @property
    def head(self) -> Optional[Position]:
        return self.state.body[0] if self.state.body else None

    @property
    def direction(self) -> Direction:
        return self.state.direction

    @property
    def head_orientation(self) -> Direction:
        return self.state.direction

    @property
    def tail_orientation(self) -> Direction:
        """Direction pointing from the segment before the tail to the tail."""
        body = self.state.body
        if len(body) < 2:
            return self.state.direction
        before, tail = body[-2], body[-1]
        return _BY_OFFSET.get((tail.r - before.r, tail.c - before.c), self.state.direction)

    # ── Commands ─────────────────────────────────────────────────
    def init(self) -> None:
        """Place a straight body hanging down from the board centre, heading up."""
        center = self.grid.center
        self.state.body = [Position(center.r + i, center.c) for i in range(self.initial_size)]
        self.state.direction = Direction.UP
        self.state.pending = None

    def clear(self) -> None:
        self.state.body = []
        self.state.direction = Direction.UP
        self.state.pending = None

    def request_direction(self, new_dir: Direction) -> bool:
        """Buffer a direction change (ignored if it would reverse the snake)."""
        if new_dir.is_opposite(self.state.direction):
            logger.debug("rejected reversal %s while heading %s", new_dir, self.state.direction)
            return False
        self.state.pending = new_dir
        return True

    def step(self, grow: bool = False) -> str:
        """
        Apply the buffered direction, then advance one cell.

        Returns STEP_CONTINUE on success, STEP_WALL or STEP_SELF when the
        move would collide. A collision leaves the body untouched.
        """
        self._apply_pending()

        body = self.state.body
        if not body:
            return STEP_CONTINUE

        new_head = body[0].moved(self.state.direction)
        if not self.grid.contains(new_head):
            return STEP_WALL

        # The tail cell vacates this tick unless the snake is growing.
        kept = body if grow else body[:-1]
        if new_head in kept:
            return STEP_SELF

        self.state.body = [new_head] + kept
        return STEP_CONTINUE

    # ── Private helpers ──────────────────────────────────────────
    def _apply_pending(self) -> None:
        if self.state.pending is not None:
            self.state.direction = self.state.pending
            self.state.pending = None


# ─────────────────────────── FoodField ───────────────────────────
class FoodField:
    """Places and removes food on cells the snake does not occupy."""

    def __init__(self, grid: Grid, state: SimulationState, rng: Optional[random.Random] = None):
        self.grid = grid
        self.state = state
        self.rng = rng if rng is not None else random.Random()

    @property
    def positions(self) -> Set[Position]:
        return self.state.food

    def spawn(self, occupied: Iterable[Position], count: int = 1) -> Set[Position]:
        """Replace the food set with up to ``count`` random free cells."""
        self.state.food = set(self._pick(set(occupied), count))
        return self.state.food

    def top_up(self, occupied: Iterable[Position], count: int = 1) -> Set[Position]:
        """Add up to ``count`` items on cells that hold neither snake nor food."""
        blocked = set(occupied) | self.state.food
        self.state.food = self.state.food | set(self._pick(blocked, count))
        return self.state.food

    def consume(self, pos: Position) -> bool:
        if pos not in self.state.food:
            return False
        self.state.food = self.state.food - {pos}
        return True

    def at(self, pos: Position) -> bool:
        return pos in self.state.food

    def clear(self) -> None:
        self.state.food = set()

    def _pick(self, blocked: Set[Position], count: int) -> List[Position]:
        free = [cell for cell in self.grid.cells() if cell not in blocked]
        if len(free) < count:
            logger.debug("only %d free cells for %d food items", len(free), count)
        return self.rng.sample(free, max(0, min(count, len(free))))
