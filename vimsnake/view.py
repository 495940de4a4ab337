"""
view.py — View layer.

Projects a GameSnapshot onto a pygame surface. Reads the snapshot only;
nothing here reaches back into the engine.

  - Pre-rendered grid surface (drawn once per board size, blitted every frame)
  - CRT scanline overlay
  - Head / body / tail segments, tail tapering towards its orientation
  - Pulsing food cells
  - HUD with score, level, elapsed time and keystrokes
  - Overlays for waiting, paused, game-over and game-won

Public API:
    window_size(cols, rows)     — pixel size needed for a board
    GameView(screen, cols, rows) — bind to a pygame surface
    view.render(snapshot)       — draw the current frame
"""

import math
from typing import Tuple

import pygame

from .config import (
    CELL, PANEL_H, MARGIN,
    BG, GRID_COL, SNAKE_COL, SNAKE_DIM, CRASH_COL, FOOD_COL, UI_COL, BLACK,
    PANEL_BG, BORDER_COL,
    STATUS_WAITING, STATUS_STARTED, STATUS_OVER, STATUS_WON,
)
from .engine import GameSnapshot
from .model import Direction, Position


def window_size(cols: int, rows: int) -> Tuple[int, int]:
    return cols * CELL + 2 * MARGIN, rows * CELL + PANEL_H + 2 * MARGIN


# ─────────────────────── colour helpers ──────────────────────────
def _lerp_color(c1: tuple, c2: tuple, t: float) -> tuple:
    t = max(0.0, min(1.0, t))
    return tuple(int(c1[i] + (c2[i] - c1[i]) * t) for i in range(3))


def _with_alpha(color: tuple, alpha: int) -> tuple:
    return (*color[:3], max(0, min(255, alpha)))


def _brighten(color: tuple, factor: float) -> tuple:
    return tuple(min(255, int(c * factor)) for c in color[:3])


def _format_time(ms: float) -> str:
    seconds = int(ms // 1000)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


# ─────────────────────────── GameView ────────────────────────────
class GameView:
    """Renders the complete game frame from a GameSnapshot."""

    # ── Construction ─────────────────────────────────────────────
    def __init__(self, screen: pygame.Surface, cols: int, rows: int):
        self.screen = screen
        self.cols = cols
        self.rows = rows
        self.width, self.height = window_size(cols, rows)
        self.game_w = cols * CELL
        self.game_h = rows * CELL
        self.ox = MARGIN
        self.oy = PANEL_H + MARGIN
        self._init_fonts()
        self._build_static_surfaces()

        self._high_score: int = 0
        self._anim_tick: int = 0

    # ── Main entry ───────────────────────────────────────────────
    def render(self, snap: GameSnapshot) -> None:
        self._anim_tick += 1
        if snap.final_score is not None and snap.final_score > self._high_score:
            self._high_score = snap.final_score

        # ── Base layers
        self.screen.fill(BG)
        self.screen.blit(self._grid_surf, (self.ox, self.oy))

        # ── Game content
        for pos in snap.food:
            self._draw_food(pos)
        if snap.snake_body:
            self._draw_snake(snap)

        self.screen.blit(self._scanline_surf, (0, 0))

        # ── Chrome
        self._draw_border()
        self._draw_panel(snap)

        # ── State overlays
        if snap.status == STATUS_WAITING:
            self._draw_waiting_overlay()
        elif snap.status == STATUS_STARTED and snap.paused:
            self._draw_paused_overlay()
        elif snap.status in (STATUS_OVER, STATUS_WON):
            self._draw_finished_overlay(snap)

        pygame.display.flip()

    # ── Static surface pre-builds ─────────────────────────────────
    def _build_static_surfaces(self) -> None:
        self._grid_surf = pygame.Surface((self.game_w, self.game_h), pygame.SRCALPHA)
        for c in range(self.cols + 1):
            pygame.draw.line(self._grid_surf, (*GRID_COL, 160),
                             (c * CELL, 0), (c * CELL, self.game_h))
        for r in range(self.rows + 1):
            pygame.draw.line(self._grid_surf, (*GRID_COL, 160),
                             (0, r * CELL), (self.game_w, r * CELL))

        self._scanline_surf = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        for y in range(0, self.height, 2):
            pygame.draw.line(self._scanline_surf, (0, 0, 0, 18), (0, y), (self.width, y))

    def _cell_rect(self, pos: Position, inset: int = 0) -> pygame.Rect:
        return pygame.Rect(
            self.ox + pos.c * CELL + inset,
            self.oy + pos.r * CELL + inset,
            CELL - inset * 2,
            CELL - inset * 2,
        )

    # ── Food ─────────────────────────────────────────────────────
    def _draw_food(self, pos: Position) -> None:
        pulse = 0.70 + 0.30 * math.sin(self._anim_tick * 0.10)
        r = max(2, int((CELL / 2 - 1) * pulse))
        rect = self._cell_rect(pos)
        x, y = rect.center

        glow_r = r + 6
        glow = pygame.Surface((glow_r * 2, glow_r * 2), pygame.SRCALPHA)
        for gr in range(glow_r, r, -1):
            a = int(90 * (1 - (gr - r) / (glow_r - r)) * pulse)
            pygame.draw.circle(glow, _with_alpha(FOOD_COL, a), (glow_r, glow_r), gr)
        self.screen.blit(glow, (x - glow_r, y - glow_r))

        pygame.draw.circle(self.screen, FOOD_COL, (x, y), r)
        pygame.draw.circle(self.screen, (255, 255, 220),
                           (x - max(1, r // 3), y - max(1, r // 3)),
                           max(1, r // 3))

    # ── Snake ────────────────────────────────────────────────────
    def _draw_snake(self, snap: GameSnapshot) -> None:
        crashed = snap.status == STATUS_OVER or snap.collision_pending
        bright = CRASH_COL if crashed else SNAKE_COL
        length = len(snap.snake_body)

        for i, pos in enumerate(snap.snake_body):
            t = 1.0 - (i / max(length - 1, 1)) * 0.72
            color = _lerp_color(SNAKE_DIM, bright, t)
            if i == 0:
                rect = self._cell_rect(pos, 1)
                pygame.draw.rect(self.screen, color, rect, border_radius=rect.width // 2 - 1)
                hi = pygame.Rect(rect.x + 3, rect.y + 3, max(1, rect.w - 6), max(2, rect.h // 3))
                pygame.draw.rect(self.screen, _brighten(color, 1.6), hi, border_radius=2)
            elif i == length - 1:
                self._draw_tail(pos, snap.tail_orientation, color)
            else:
                rect = self._cell_rect(pos, 2)
                pygame.draw.rect(self.screen, color, rect, border_radius=rect.width // 4)

        self._draw_eyes(snap.snake_body[0], snap.head_orientation)

    def _draw_tail(self, pos: Position, orientation: Direction, color: tuple) -> None:
        """Triangle pointing away from the body."""
        rect = self._cell_rect(pos, 2)
        cx, cy = rect.center
        half = rect.width // 2
        tip = (cx + orientation.dc * half, cy + orientation.dr * half)
        # Base sits on the edge shared with the rest of the body.
        bx, by = cx - orientation.dc * half, cy - orientation.dr * half
        px, py = -orientation.dr * half, orientation.dc * half
        pygame.draw.polygon(self.screen, color, [tip, (bx + px, by + py), (bx - px, by - py)])

    def _draw_eyes(self, head: Position, orientation: Direction) -> None:
        cx, cy = self._cell_rect(head).center
        dx, dy = orientation.dc, orientation.dr
        px, py = -dy, dx  # perpendicular

        for sign in (+1, -1):
            ex = int(cx + dx * 4 + sign * px * 4)
            ey = int(cy + dy * 4 + sign * py * 4)
            pygame.draw.rect(self.screen, (220, 220, 220), (ex - 2, ey - 2, 4, 4))
            pygame.draw.rect(self.screen, BLACK,           (ex - 1, ey - 1, 2, 2))

    # ── Border ───────────────────────────────────────────────────
    def _draw_border(self) -> None:
        ox, oy = self.ox, self.oy
        pygame.draw.rect(self.screen, BORDER_COL,
                         (ox - 1, oy - 1, self.game_w + 2, self.game_h + 2), 1)
        size = 14
        right, bottom = ox + self.game_w, oy + self.game_h
        for pts in [
            [(ox - 1, oy + size),     (ox - 1, oy - 1),   (ox + size, oy - 1)],
            [(ox - 1, bottom - size), (ox - 1, bottom),   (ox + size, bottom)],
            [(right - size, oy - 1),  (right, oy - 1),    (right, oy + size)],
            [(right - size, bottom),  (right, bottom),    (right, bottom - size)],
        ]:
            pygame.draw.lines(self.screen, SNAKE_COL, False, pts, 2)

    # ── HUD Panel ─────────────────────────────────────────────────
    def _draw_panel(self, snap: GameSnapshot) -> None:
        pygame.draw.rect(self.screen, PANEL_BG, (0, 0, self.width, PANEL_H))
        pygame.draw.line(self.screen, BORDER_COL,
                         (0, PANEL_H - 1), (self.width, PANEL_H - 1), 1)

        # Score (left)
        self.screen.blit(self.font_small.render("SCORE", True, SNAKE_COL), (16, 6))
        self.screen.blit(self.font_big.render(str(snap.score), True, SNAKE_COL), (16, 24))

        # Level (centre)
        mid = self.width // 2
        lvl = self.font_big.render(f"LV {snap.level}", True, FOOD_COL)
        self.screen.blit(lvl, lvl.get_rect(center=(mid, 22)))
        speed = self.font_tiny.render(f"{snap.level} TICKS/S", True, UI_COL)
        self.screen.blit(speed, speed.get_rect(center=(mid, 44)))

        # Time and keystrokes (right)
        right = self.width - 16
        t = self.font_small.render(_format_time(snap.elapsed_ms), True, UI_COL)
        self.screen.blit(t, t.get_rect(topright=(right, 8)))
        keys = self.font_small.render(f"KEYS {snap.total_keystrokes}", True, UI_COL)
        self.screen.blit(keys, keys.get_rect(topright=(right, 28)))

        if self._high_score > 0:
            hs = self.font_tiny.render(f"BEST {self._high_score}",
                                       True, _lerp_color(UI_COL, FOOD_COL, 0.35))
            self.screen.blit(hs, hs.get_rect(topright=(right, 44)))

    # ── Overlay infrastructure ────────────────────────────────────
    def _draw_overlay_base(self) -> None:
        surf = pygame.Surface((self.game_w, self.game_h), pygame.SRCALPHA)
        surf.fill((5, 5, 12, 215))
        self.screen.blit(surf, (self.ox, self.oy))
        pygame.draw.rect(self.screen, _lerp_color(BG, UI_COL, 0.12),
                         (self.ox + 8, self.oy + 8, self.game_w - 16, self.game_h - 16), 1)

    def _draw_animated_title(self, title: str, color: tuple,
                             cy: int, font: pygame.font.Font) -> int:
        pulse = 0.82 + 0.18 * math.sin(self._anim_tick * 0.05)
        surf = font.render(title, True, _brighten(color, pulse))
        gw, gh = surf.get_width() + 50, surf.get_height() + 16
        glow = pygame.Surface((gw, gh), pygame.SRCALPHA)
        glow.fill(_with_alpha(color, int(35 * pulse)))
        self.screen.blit(glow, (self.width // 2 - gw // 2, cy - 8))
        self.screen.blit(surf, surf.get_rect(center=(self.width // 2, cy + surf.get_height() // 2)))
        return cy + surf.get_height() + 14

    def _draw_text_line(self, text: str, color: tuple,
                        cy: int, font: pygame.font.Font) -> int:
        surf = font.render(text, True, color)
        self.screen.blit(surf, surf.get_rect(center=(self.width // 2, cy)))
        return cy + surf.get_height() + 8

    def _draw_button(self, label: str, color: tuple, cy: int) -> int:
        btn_w = max(260, self.font_small.size(label)[0] + 40)
        btn_h = 38
        bx = self.width // 2 - btn_w // 2
        bg = pygame.Surface((btn_w, btn_h), pygame.SRCALPHA)
        bg.fill(_with_alpha(color, 22))
        self.screen.blit(bg, (bx, cy))
        pygame.draw.rect(self.screen, color, (bx, cy, btn_w, btn_h), 2, border_radius=4)
        txt = self.font_small.render(label, True, color)
        self.screen.blit(txt, txt.get_rect(center=(self.width // 2, cy + btn_h // 2)))
        return cy + btn_h + 10

    def _draw_controls_hint(self, cy: int) -> None:
        hints = [("H J K L", "MOVE"), ("P", "PAUSE"), ("Q", "QUIT"), ("ESC", "EXIT")]
        step = min(108, self.game_w // len(hints))
        sx = self.width // 2 - (len(hints) * step) // 2
        for i, (key, action) in enumerate(hints):
            x = sx + i * step + step // 2
            k_surf = self.font_tiny.render(key,    True, (200, 200, 255))
            a_surf = self.font_tiny.render(action, True, UI_COL)
            kw = k_surf.get_width() + 12
            kh = k_surf.get_height() + 4
            pygame.draw.rect(self.screen, (28, 28, 48),
                             (x - kw // 2, cy, kw, kh), border_radius=3)
            pygame.draw.rect(self.screen, (55, 55, 88),
                             (x - kw // 2, cy, kw, kh), 1, border_radius=3)
            self.screen.blit(k_surf, k_surf.get_rect(center=(x, cy + kh // 2)))
            self.screen.blit(a_surf, a_surf.get_rect(center=(x, cy + kh + 10)))

    # ── State overlays ────────────────────────────────────────────
    def _draw_waiting_overlay(self) -> None:
        self._draw_overlay_base()
        cy = self.oy + 28
        cy = self._draw_animated_title("VIMAZING SNAKE", SNAKE_COL, cy, self.font_title)
        cy = self._draw_text_line("EAT, GROW, SPEED UP", UI_COL, cy, self.font_med)
        cy += 18
        cy = self._draw_button("SPACE — START GAME", SNAKE_COL, cy)
        cy += 6
        self._draw_controls_hint(cy)

    def _draw_paused_overlay(self) -> None:
        self._draw_overlay_base()
        cy = self.oy + self.game_h // 2 - 36
        cy = self._draw_animated_title("PAUSED", FOOD_COL, cy, self.font_title)
        cy += 6
        self._draw_text_line("PRESS  P  TO RESUME", UI_COL, cy, self.font_med)

    def _draw_finished_overlay(self, snap: GameSnapshot) -> None:
        self._draw_overlay_base()
        if snap.status == STATUS_WON:
            title, color = "YOU WIN!", SNAKE_COL
        else:
            title, color = "GAME OVER", CRASH_COL

        cy = self.oy + 26
        cy = self._draw_animated_title(title, color, cy, self.font_title)
        cy = self._draw_text_line(f"FINAL SCORE  {snap.final_score}", FOOD_COL, cy, self.font_med)
        cy = self._draw_text_line(
            f"LEVEL {snap.level}   |   {_format_time(snap.elapsed_ms)}   |   "
            f"{snap.total_keystrokes} KEYS",
            UI_COL, cy, self.font_tiny,
        )
        cy += 4
        if snap.final_score and snap.final_score >= self._high_score:
            cy = self._draw_text_line("★  NEW HIGH SCORE  ★", FOOD_COL, cy, self.font_small)
        else:
            cy = self._draw_text_line(f"BEST: {self._high_score}", UI_COL, cy, self.font_tiny)
        cy += 10
        self._draw_button("SPACE — PLAY AGAIN", color, cy)

    # ── Font init ─────────────────────────────────────────────────
    def _init_fonts(self) -> None:
        specs = [
            ("font_title", "courier", 36, True),
            ("font_big",   "courier", 26, True),
            ("font_med",   "courier", 17, False),
            ("font_small", "courier", 13, True),
            ("font_tiny",  "courier", 11, False),
        ]
        for attr, name, size, bold in specs:
            try:
                setattr(self, attr, pygame.font.SysFont(name, size, bold=bold))
            except (pygame.error, OSError):
                setattr(self, attr, pygame.font.SysFont(None, size))
