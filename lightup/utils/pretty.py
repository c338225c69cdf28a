"""Pretty-print helpers for Light Up boards."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ..core.constants import BLANK_SYMBOL, BULB_SYMBOL, LIT_SYMBOL, MARK_SYMBOL, WALL_SYMBOL, CellKind

if TYPE_CHECKING:
    from ..engine.board import Board
    from ..engine.game import LightUpGame


def cell_symbol(cell, show_lit: bool = True) -> str:
    if cell.kind == CellKind.WALL:
        return WALL_SYMBOL
    if cell.kind == CellKind.NUMBER:
        return str(cell.number)
    if cell.bulb:
        return BULB_SYMBOL
    if cell.mark:
        return MARK_SYMBOL
    if show_lit and cell.lit:
        return LIT_SYMBOL
    return BLANK_SYMBOL


def format_board(board: Board, show_lit: bool = True) -> str:
    width = board.cols
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r in range(board.rows):
        row_cells = [cell_symbol(board.cell(r, c), show_lit) for c in range(width)]
        row_render = " ".join(f"{symbol:>2}" for symbol in row_cells)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def pretty_print_board(board: Board, *, label: str | None = None, show_lit: bool = True, stream=None) -> None:
    """Print the board in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_board(board, show_lit), file=stream)


def print_game_stats(game: LightUpGame, *, stream=None) -> None:
    """Print board + session stats for a game in progress or finished."""

    stream = stream or sys.stdout
    board = game.board
    print(format_board(board), file=stream)

    blanks = len(board.blank_positions())
    walls = board.rows * board.cols - blanks
    numbered = len(board.numbered_positions())
    print(file=stream)
    print("--- Board ---", file=stream)
    print(f"  Size:          {board.rows} x {board.cols} ({board.rows * board.cols} cells)", file=stream)
    print(f"  Walls:         {walls} ({numbered} numbered)", file=stream)
    print(f"  Bulbs:         {len(board.bulb_positions())}", file=stream)
    print(f"  Unlit blanks:  {board.unlit_blank_count()} of {blanks}", file=stream)
    print(f"  Graph:         {len(game.graph)} nodes, {game.graph.edge_count()} edges", file=stream)

    print(file=stream)
    print("--- Session ---", file=stream)
    print(f"  State:         {game.state.value}", file=stream)
    print(f"  Moves:         {game.move_count}", file=stream)
    print(f"  Oracle calls:  {game.oracle.calls}", file=stream)
    print(f"  Last outcome:  {game.last_outcome.value}", file=stream)
    print(f"  Status:        {game.status}", file=stream)
    if game.team_win is not None:
        print(f"  Team win:      {game.team_win}", file=stream)
