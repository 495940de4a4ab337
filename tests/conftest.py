"""Shared fixtures for the engine tests."""

import pytest

from vimsnake.config import GameOptions
from vimsnake.engine import GameEngine


class LastCellRng:
    """Stand-in for random.Random whose sample() takes the last free cells."""

    def sample(self, population, k):
        population = list(population)
        return population[len(population) - k:] if k else []


@pytest.fixture
def make_engine():
    """Build an engine with predictable food placement (bottom-right corner)."""
    def _make(**overrides):
        return GameEngine(GameOptions(**overrides), rng=LastCellRng(), clock=lambda: 0.0)
    return _make
