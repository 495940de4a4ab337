"""
main.py — Entry point.

Run with:
    python main.py [--cols 30] [--rows 20] [--starting-level 1] ...

Requires:
    pip install pygame
"""

import argparse
import logging

from vimsnake.config import GameOptions


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="VIMazing Snake — hjkl snake")
    parser.add_argument("--cols", type=int, default=30)
    parser.add_argument("--rows", type=int, default=20)
    parser.add_argument("--starting-level", type=int, default=1)
    parser.add_argument("--foods-per-level", type=int, default=10)
    parser.add_argument("--max-level", type=int, default=25)
    parser.add_argument("--initial-snake-size", type=int, default=3)
    parser.add_argument("--initial-food-count", type=int, default=1)
    parser.add_argument("--collision-grace", action="store_true",
                        help="survive the first colliding tick")
    parser.add_argument("--target-score", type=int, default=None,
                        help="win once the score reaches this value")
    parser.add_argument("--win-on-full-board", action="store_true")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> GameOptions:
    return GameOptions(
        cols=args.cols,
        rows=args.rows,
        starting_level=args.starting_level,
        foods_per_level=args.foods_per_level,
        max_level=args.max_level,
        initial_snake_size=args.initial_snake_size,
        initial_food_count=args.initial_food_count,
        collision_grace=args.collision_grace,
        target_score=args.target_score,
        win_on_full_board=args.win_on_full_board,
        seed=args.seed,
    )


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        options = build_options(args)
    except ValueError as exc:
        raise SystemExit(f"invalid game options: {exc}")

    # pygame is only needed once a window is opened.
    from vimsnake.controller import GameController

    GameController(options).run()


if __name__ == "__main__":
    main()
