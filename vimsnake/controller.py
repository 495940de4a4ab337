"""
controller.py — Controller layer.

Responsibilities:
  - Own the pygame window, clock and event loop.
  - Translate raw keyboard events into key strings for KeyBindings.
  - Drive the engine once per frame and hand its snapshot to the view.
  - Know nothing about rendering details (that's the View's job).
  - Know nothing about game rules (that's the engine's job).

The controller is the only layer that reads pygame events.
"""

import logging
from typing import Optional

import pygame

from .config import FPS, GameOptions
from .engine import GameEngine
from .keybindings import KeyBindings
from .view import GameView, window_size

logger = logging.getLogger(__name__)


class GameController:
    """
    Owns the main loop.
    Glues engine <-> view without them knowing about each other.
    """

    def __init__(self, options: Optional[GameOptions] = None):
        pygame.init()
        self.engine   = GameEngine(options, clock=pygame.time.get_ticks)
        self.keys     = KeyBindings(self.engine)
        cols, rows    = self.engine.grid.cols, self.engine.grid.rows
        self.screen   = pygame.display.set_mode(window_size(cols, rows))
        pygame.display.set_caption("VIMazing Snake")
        self.clock    = pygame.time.Clock()
        self.view     = GameView(self.screen, cols, rows)
        self._running = False

    # ── Public entry point ────────────────────────────────────────
    def run(self) -> None:
        """Run the game loop until the window is closed or Esc is pressed."""
        self._running = True
        logger.info("window open, %d fps", FPS)
        try:
            while self._running:
                self.clock.tick(FPS)
                self._handle_events()
                now = pygame.time.get_ticks()
                self.engine.frame(now)
                self.view.render(self.engine.snapshot(now))
        finally:
            pygame.quit()

    # ── Event dispatch ────────────────────────────────────────────
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        if event.key == pygame.K_ESCAPE:
            self._running = False
            return
        key = self._key_text(event)
        if key:
            self.keys.handle_key(key, pygame.time.get_ticks())

    @staticmethod
    def _key_text(event: pygame.event.Event) -> str:
        """Printable character for a KEYDOWN, falling back to the key name."""
        if event.key == pygame.K_SPACE:
            return " "
        if event.unicode and event.unicode.isprintable():
            return event.unicode
        name = pygame.key.name(event.key)
        return name if len(name) == 1 else ""
