"""
config.py — Shared constants and game options.
No logic beyond option validation, no imports from internal modules.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# ── Window & Grid ─────────────────────────────────────────────────
CELL            = 20
PANEL_H         = 60
MARGIN          = 10
FPS             = 60

# ── Colors ────────────────────────────────────────────────────────
BG          = (10,  10,  15)
GRID_COL    = (15,  20,  32)
SNAKE_COL   = (0,   255, 136)
SNAKE_DIM   = (0,   140, 80)
CRASH_COL   = (255, 51,  102)
FOOD_COL    = (255, 228, 77)
UI_COL      = (120, 120, 170)
BLACK       = (0,   0,   0)
PANEL_BG    = (12,  12,  20)
BORDER_COL  = (26,  26,  62)

# ── Keys ──────────────────────────────────────────────────────────
KEY_LEFT    = "h"
KEY_DOWN    = "j"
KEY_UP      = "k"
KEY_RIGHT   = "l"
KEY_PAUSE   = "p"
KEY_QUIT    = "q"
KEY_START   = " "

# ── Game Status ───────────────────────────────────────────────────
STATUS_WAITING  = "waiting"
STATUS_STARTED  = "started"
STATUS_OVER     = "game-over"
STATUS_WON      = "game-won"
TERMINAL_STATUSES = (STATUS_OVER, STATUS_WON)


# ─────────────────────────── Options ─────────────────────────────
@dataclass
class GameOptions:
    """
    Construction-time options for one engine.

    Board size and the snake's start length are rejected when they cannot
    produce a playable board; the starting level is clamped into
    ``[1, max_level]``.
    """
    cols: int = 30
    rows: int = 20
    starting_level: int = 1
    foods_per_level: int = 10
    max_level: int = 25
    initial_snake_size: int = 3
    initial_food_count: int = 1
    collision_grace: bool = False
    target_score: Optional[int] = None
    win_on_full_board: bool = False
    seed: Optional[int] = None

    def __post_init__(self):
        if self.cols < 1 or self.rows < 1:
            raise ValueError(f"board must be at least 1x1, got {self.cols}x{self.rows}")
        if self.max_level < 1:
            raise ValueError(f"max_level must be >= 1, got {self.max_level}")
        if self.foods_per_level < 1:
            raise ValueError(f"foods_per_level must be >= 1, got {self.foods_per_level}")
        if self.initial_snake_size < 1:
            raise ValueError(f"initial_snake_size must be >= 1, got {self.initial_snake_size}")
        # Body hangs straight down from the centre row.
        room = self.rows - self.rows // 2
        if self.initial_snake_size > room:
            raise ValueError(
                f"initial_snake_size {self.initial_snake_size} does not fit "
                f"below the centre of a {self.rows}-row board (max {room})"
            )
        if self.initial_food_count < 0:
            raise ValueError(f"initial_food_count must be >= 0, got {self.initial_food_count}")
        if self.target_score is not None and self.target_score < 1:
            raise ValueError(f"target_score must be >= 1, got {self.target_score}")

        clamped = max(1, min(self.starting_level, self.max_level))
        if clamped != self.starting_level:
            logger.warning(
                "starting_level %d outside [1, %d]; clamped to %d",
                self.starting_level, self.max_level, clamped,
            )
            self.starting_level = clamped

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "GameOptions":
        """Build options from a mapping using snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unknown game option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


_ALIASES = {
    "startingLevel":    "starting_level",
    "foodsPerLevel":    "foods_per_level",
    "maxLevel":         "max_level",
    "initialSnakeSize": "initial_snake_size",
    "initialFoodCount": "initial_food_count",
    "collisionGrace":   "collision_grace",
    "targetScore":      "target_score",
    "winOnFullBoard":   "win_on_full_board",
}
