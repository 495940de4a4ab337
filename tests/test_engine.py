"""Tests for the game loop controller: status machine, scheduling, scoring."""

import dataclasses
import random

import pytest

from vimsnake.config import (
    GameOptions, STATUS_WAITING, STATUS_STARTED, STATUS_OVER, STATUS_WON,
)
from vimsnake.engine import GameEngine
from vimsnake.model import ALL_DIRS, Direction, Position


def place_food(engine, *cells):
    engine.state.food = {Position(*cell) for cell in cells}


def run_ticks(engine, count, start_ms=0.0):
    """Commit ``count`` ticks one interval apart, returning the last timestamp."""
    now = start_ms
    for _ in range(count):
        now += engine.tick_interval_ms
        assert engine.frame(now) is True
    return now


class TestLifecycle:

    def test_new_engine_is_waiting(self, make_engine):
        engine = make_engine()
        assert engine.status == STATUS_WAITING
        assert engine.frame(5000) is False
        assert engine.final_score is None

    def test_start_game_resets_state(self, make_engine):
        engine = make_engine(starting_level=3)
        assert engine.start_game(0) is True
        assert engine.status == STATUS_STARTED
        assert engine.score == 0
        assert engine.level == 3
        assert engine.state.body == [Position(10, 15), Position(11, 15), Position(12, 15)]
        assert engine.state.food == {Position(19, 29)}
        assert engine.final_score is None

    def test_initial_food_count(self, make_engine):
        engine = make_engine(initial_food_count=3)
        engine.start_game(0)
        assert len(engine.state.food) == 3
        assert engine.state.food.isdisjoint(engine.state.body)

    def test_start_while_running_is_ignored(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        engine.frame(1000)
        assert engine.start_game(1500) is False
        assert engine.state.body[0] == Position(9, 15)

    def test_quit_clears_board(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        engine.frame(1000)
        assert engine.quit_game(1200) is True
        assert engine.status == STATUS_WAITING
        assert engine.state.body == []
        assert engine.state.food == set()
        assert engine.score == 0
        assert engine.frame(5000) is False

    def test_stop_is_idempotent(self, make_engine):
        engine = make_engine()
        assert engine.stop_game(0) is False
        engine.start_game(0)
        assert engine.stop_game(10) is True
        assert engine.stop_game(20) is False
        assert engine.status == STATUS_WAITING

    def test_restart_from_game_over(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (9, 15))
        run_ticks(engine, 11)
        assert engine.status == STATUS_OVER
        assert engine.start_game(20000) is True
        assert engine.status == STATUS_STARTED
        assert engine.score == 0
        assert engine.final_score is None
        assert len(engine.state.body) == 3


class TestScheduling:

    def test_no_tick_before_interval(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        assert engine.frame(16) is False
        assert engine.frame(999) is False
        assert engine.state.body[0] == Position(10, 15)
        assert engine.frame(1000) is True
        assert engine.state.body[0] == Position(9, 15)

    def test_tick_rate_equals_level(self, make_engine):
        engine = make_engine(starting_level=4)
        engine.start_game(0)
        assert engine.tick_interval_ms == 250
        assert engine.frame(249) is False
        assert engine.frame(250) is True

    def test_leftover_time_is_dropped(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        assert engine.frame(1500) is True
        assert engine.frame(2400) is False
        assert engine.frame(2500) is True

    def test_one_tick_per_frame_even_after_a_stall(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        assert engine.frame(5000) is True
        assert engine.state.body[0] == Position(9, 15)

    def test_no_tick_after_game_over(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        now = run_ticks(engine, 11)
        assert engine.status == STATUS_OVER
        body = list(engine.state.body)
        assert engine.frame(now + 1000) is False
        assert engine.frame(now + 50000) is False
        assert engine.state.body == body


class TestPause:

    def test_pause_halts_ticks(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        assert engine.toggle_pause(500) is True
        for now in range(1000, 6000, 16):
            assert engine.frame(now) is False
        assert engine.state.body[0] == Position(10, 15)
        assert engine.status == STATUS_STARTED

    def test_resume_restarts_the_interval(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        engine.toggle_pause(500)
        assert engine.toggle_pause(6000) is False
        assert engine.frame(6500) is False
        assert engine.frame(7000) is True
        assert engine.state.body[0] == Position(9, 15)

    def test_direction_buffered_while_paused(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        engine.toggle_pause(100)
        engine.set_pending_direction(Direction.LEFT)
        engine.frame(2000)
        assert engine.state.body[0] == Position(10, 15)
        engine.toggle_pause(3000)
        engine.frame(4000)
        assert engine.state.body[0] == Position(10, 14)

    def test_pause_outside_started_is_noop(self, make_engine):
        engine = make_engine()
        assert engine.toggle_pause(0) is False
        assert engine.paused is False


class TestScoring:

    def test_points_equal_level(self, make_engine):
        engine = make_engine(starting_level=5)
        engine.start_game(0)
        place_food(engine, (9, 15))
        run_ticks(engine, 1)
        assert engine.score == 5

    def test_growth_is_delayed_one_tick(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (9, 15))
        now = run_ticks(engine, 1)
        assert len(engine.state.body) == 3
        run_ticks(engine, 1, now)
        assert len(engine.state.body) == 4
        run_ticks(engine, 1, now + 1000)
        assert len(engine.state.body) == 4

    def test_eaten_food_is_replaced(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (9, 15))
        run_ticks(engine, 1)
        assert engine.state.food == {Position(19, 29)}

    def test_level_up_scores_at_old_level(self, make_engine):
        """The food that triggers a level-up still scores at the old level."""
        engine = make_engine(foods_per_level=2)
        engine.start_game(0)
        place_food(engine, (9, 15), (8, 15))

        now = run_ticks(engine, 1)
        assert (engine.score, engine.level) == (1, 1)
        assert engine.state.foods_eaten_this_level == 1

        now = run_ticks(engine, 1, now)
        assert (engine.score, engine.level) == (2, 2)
        assert engine.state.foods_eaten_this_level == 0
        assert engine.tick_interval_ms == 500

    def test_level_capped_at_max(self, make_engine):
        engine = make_engine(foods_per_level=1, max_level=2)
        engine.start_game(0)
        place_food(engine, (9, 15), (8, 15), (7, 15))
        run_ticks(engine, 3)
        assert engine.level == 2
        assert engine.score == 1 + 2 + 2

    def test_clamped_starting_level_never_exceeds_max(self, make_engine):
        engine = make_engine(starting_level=40, max_level=10)
        engine.start_game(0)
        assert engine.level == 10


class TestGameOver:

    def test_wall_collision_ends_game(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (5, 15))
        run_ticks(engine, 10)
        assert engine.state.body[0] == Position(0, 15)
        assert engine.status == STATUS_STARTED
        assert engine.final_score is None

        engine.frame(11000)
        assert engine.status == STATUS_OVER
        assert engine.final_score == 1
        assert engine.state.body[0] == Position(0, 15)

    def test_final_score_frozen_until_restart(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (5, 15))
        run_ticks(engine, 11)
        engine.state.score = 99
        assert engine.final_score == 1

    def test_self_collision_ends_game(self, make_engine):
        engine = make_engine(initial_snake_size=5)
        engine.start_game(0)
        engine.state.body = [Position(*cell) for cell in
                             [(5, 5), (5, 6), (6, 6), (6, 5), (7, 5)]]
        engine.state.direction = Direction.LEFT
        engine.set_pending_direction(Direction.DOWN)
        engine.frame(1000)
        assert engine.status == STATUS_OVER


class TestCollisionGrace:

    def test_first_collision_is_pending(self, make_engine):
        engine = make_engine(collision_grace=True)
        engine.start_game(0)
        now = run_ticks(engine, 11)
        assert engine.status == STATUS_STARTED
        assert engine.state.collision_pending is True
        assert engine.state.body[0] == Position(0, 15)

        engine.frame(now + 1000)
        assert engine.status == STATUS_OVER

    def test_turning_away_clears_pending_collision(self, make_engine):
        engine = make_engine(collision_grace=True)
        engine.start_game(0)
        now = run_ticks(engine, 11)
        engine.set_pending_direction(Direction.LEFT)
        assert engine.frame(now + 1000) is True
        assert engine.status == STATUS_STARTED
        assert engine.state.collision_pending is False
        assert engine.state.body[0] == Position(0, 14)

    def test_growth_survives_pending_collision(self, make_engine):
        engine = make_engine(collision_grace=True)
        engine.start_game(0)
        place_food(engine, (0, 15))
        now = run_ticks(engine, 10)
        assert engine.state.should_grow is True
        run_ticks(engine, 1, now)
        assert engine.state.should_grow is True
        engine.set_pending_direction(Direction.RIGHT)
        run_ticks(engine, 1, now + 1000)
        assert len(engine.state.body) == 4


class TestWinConditions:

    def test_target_score_wins(self, make_engine):
        engine = make_engine(target_score=1)
        engine.start_game(0)
        place_food(engine, (9, 15))
        engine.frame(1000)
        assert engine.status == STATUS_WON
        assert engine.final_score == 1
        assert engine.frame(2000) is False

    def test_full_board_wins(self, make_engine):
        engine = make_engine(cols=2, rows=2, initial_snake_size=1,
                             initial_food_count=0, win_on_full_board=True)
        engine.start_game(0)
        engine.state.body = [Position(0, 1), Position(1, 1), Position(1, 0)]
        engine.state.should_grow = True
        engine.set_pending_direction(Direction.LEFT)
        engine.frame(1000)
        assert len(engine.state.body) == 4
        assert engine.status == STATUS_WON

    def test_no_win_condition_configured(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        place_food(engine, (9, 15))
        engine.frame(1000)
        assert engine.status == STATUS_STARTED


class TestSnapshots:

    def test_snapshot_contents(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        snap = engine.snapshot(0)
        assert snap.status == STATUS_STARTED
        assert snap.snake_body == (Position(10, 15), Position(11, 15), Position(12, 15))
        assert snap.head == Position(10, 15)
        assert snap.tail == Position(12, 15)
        assert snap.food == frozenset({Position(19, 29)})
        assert snap.head_orientation is Direction.UP
        assert snap.tail_orientation is Direction.DOWN
        assert snap.final_score is None
        assert (snap.cols, snap.rows) == (30, 20)

    def test_snapshot_is_immutable(self, make_engine):
        engine = make_engine()
        engine.start_game(0)
        snap = engine.snapshot(0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.score = 10
        engine.frame(1000)
        assert snap.snake_body[0] == Position(10, 15)

    def test_listeners_receive_every_tick(self, make_engine):
        engine = make_engine()
        seen = []
        unsubscribe = engine.subscribe(seen.append)
        engine.start_game(0)
        run_ticks(engine, 2)
        assert [s.snake_body[0] for s in seen] == [
            Position(10, 15), Position(9, 15), Position(8, 15),
        ]
        unsubscribe()
        engine.frame(3000)
        assert len(seen) == 3


class TestRandomPlay:

    def test_food_never_overlaps_body(self):
        """Random play on a seeded engine keeps food and body disjoint."""
        engine = GameEngine(GameOptions(rows=10, cols=10, initial_food_count=3,
                                        foods_per_level=2, seed=3))
        moves = random.Random(5)
        checked = []

        def check(snap):
            assert snap.food.isdisjoint(snap.snake_body)
            assert snap.level <= engine.options.max_level
            checked.append(snap)

        engine.subscribe(check)
        for game in range(5):
            now = game * 1_000_000.0
            engine.start_game(now)
            while engine.status == STATUS_STARTED:
                engine.set_pending_direction(moves.choice(ALL_DIRS))
                now += 1000
                before = len(engine.state.body)
                grow = engine.state.should_grow
                engine.frame(now)
                if engine.status == STATUS_STARTED and not engine.state.collision_pending:
                    assert len(engine.state.body) == before + (1 if grow else 0)
        assert len(checked) > 5
