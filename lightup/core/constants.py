"""Shared constants and enumerations for the Light Up engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class CellKind(str, Enum):
    """All supported cell kinds on the board."""

    WALL = "WALL"
    NUMBER = "NUMBER"
    BLANK = "BLANK"


class GameState(str, Enum):
    """Turn-state machine states."""

    WAITING_FOR_HUMAN = "WAITING_FOR_HUMAN"
    ENGINE_THINKING = "ENGINE_THINKING"
    SOLVED = "SOLVED"


class Actor(str, Enum):
    """Who committed a move or finished the puzzle."""

    HUMAN = "HUMAN"
    ENGINE = "ENGINE"
    SOLVER = "SOLVER"


class MoveKind(str, Enum):
    """The single mutation a move applies to one cell."""

    PLACE_BULB = "PLACE_BULB"
    REMOVE_BULB = "REMOVE_BULB"
    PLACE_MARK = "PLACE_MARK"
    REMOVE_MARK = "REMOVE_MARK"


class MoveReason(str, Enum):
    """Why the engine picked its move."""

    HUMAN = "HUMAN"
    REPAIR = "REPAIR"
    FORCED_NUMBER = "FORCED_NUMBER"
    FORCED_LIGHT = "FORCED_LIGHT"
    SCORED = "SCORED"
    FALLBACK_MARK = "FALLBACK_MARK"


class Outcome(str, Enum):
    """Result taxonomy returned to the host for every operation."""

    OK = "OK"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    INFEASIBLE_STATE = "INFEASIBLE_STATE"
    UNDECIDED = "UNDECIDED"
    NO_SAFE_MOVE = "NO_SAFE_MOVE"
    SOLVED = "SOLVED"
    NOTHING_TO_UNDO = "NOTHING_TO_UNDO"
    NOTHING_TO_REDO = "NOTHING_TO_REDO"
    BUSY = "BUSY"


class SolveOutcome(str, Enum):
    """Verdict of the backtracking solver."""

    SOLVED = "SOLVED"
    UNSOLVABLE = "UNSOLVABLE"
    UNKNOWN = "UNKNOWN"


# Down, up, right, left. Every row-major scan in the engine walks rays in this order.
ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
KING_STEPS: Tuple[Tuple[int, int], ...] = ORTHOGONAL_STEPS + DIAGONAL_STEPS

MAX_WALL_NUMBER = 4

# Text layout symbols.
BLANK_SYMBOL = "."
WALL_SYMBOL = "#"
BULB_SYMBOL = "*"
MARK_SYMBOL = "x"
LIT_SYMBOL = "+"


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
