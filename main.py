"""CLI entrypoint for the Light Up puzzle engine."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from lightup.core.constants import GameState, Outcome
from lightup.core.exceptions import BoardLayoutError, GenerationExhaustedError
from lightup.engine.board import Board
from lightup.engine.game import GameConfig, LightUpGame
from lightup.utils.logger import configure_logging, parse_log_level
from lightup.utils.pretty import pretty_print_board, print_game_stats


def parse_puzzle_file(path: Path) -> List[str]:
    """Read a board layout, one row per line. Lines starting with ``;`` are comments."""
    rows: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith(";"):
            continue
        rows.append(line)
    return rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate, solve and play Light Up (Akari) puzzles",
    )
    parser.add_argument("--rows", type=int, default=7, help="Board height in cells")
    parser.add_argument("--cols", type=int, default=7, help="Board width in cells")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--puzzle",
        type=Path,
        metavar="FILE",
        help="Load a layout instead of generating one ('.' blank, '#' wall, 0-4 numbered, '*' bulb, 'x' mark)",
    )
    parser.add_argument("--solve", action="store_true", help="Run the solver on the board")
    parser.add_argument(
        "--play",
        type=int,
        default=0,
        metavar="N",
        help="Let the engine play up to N consecutive turns",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=50,
        help="Generation retry cap (default 50)",
    )
    parser.add_argument(
        "--require-unique",
        action="store_true",
        help="Only accept generated puzzles with exactly one solution (checked with CP-SAT)",
    )
    parser.add_argument(
        "--max-nodes",
        type=int,
        default=None,
        help="Search node budget per solve; exhausted searches report 'undecided'",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of the text board")
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        default=logging.INFO,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def build_payload(game: LightUpGame, seed: int | None) -> Dict[str, Any]:
    return {
        "rows": game.board.rows,
        "cols": game.board.cols,
        "seed": seed,
        "layout": game.board.to_rows(),
        "board": game.board.to_jsonable(),
        "state": game.state.value,
        "status": game.status,
        "last_outcome": game.last_outcome.value,
        "moves": game.move_count,
        "team_win": game.team_win,
        "validation": game.board.validate().reason,
    }


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.rows < 1 or args.cols < 1:
        parser.error("--rows and --cols must be positive")
    if args.play < 0:
        parser.error("--play must be non-negative")

    config = GameConfig(
        rows=args.rows,
        cols=args.cols,
        seed=args.seed,
        max_attempts=args.max_attempts,
        require_unique=args.require_unique,
        max_nodes=args.max_nodes,
    )

    board = None
    if args.puzzle:
        try:
            board = Board.from_rows(parse_puzzle_file(args.puzzle))
        except BoardLayoutError as exc:
            parser.error(f"invalid puzzle file: {exc}")

    try:
        game = LightUpGame(config, board=board)
    except GenerationExhaustedError as exc:
        parser.exit(2, f"error: {exc}\n")

    if not args.json:
        pretty_print_board(game.board, label="Puzzle:")

    for _ in range(args.play):
        if game.state == GameState.SOLVED:
            break
        outcome = game.pass_turn()
        if not args.json:
            print(game.status)
        if outcome == Outcome.NO_SAFE_MOVE:
            break

    if args.solve:
        game.request_solve()

    payload = build_payload(game, args.seed)
    if args.json or args.output:
        output_text = json.dumps(payload, ensure_ascii=False, indent=2)
        if args.output:
            args.output.write_text(output_text, encoding="utf-8")
        else:
            print(output_text)
    if not args.json:
        print()
        print_game_stats(game)


if __name__ == "__main__":  # pragma: no cover
    main()
