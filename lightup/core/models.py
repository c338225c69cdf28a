"""Data models supporting the Light Up engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import Actor, CellKind, MoveKind, MoveReason

Position = Tuple[int, int]
BoolGrid = Tuple[Tuple[bool, ...], ...]


@dataclass
class Cell:
    """Represents a board cell with its mutable annotations."""

    row: int
    col: int
    kind: CellKind = CellKind.BLANK
    number: Optional[int] = None
    bulb: bool = False
    mark: bool = False
    lit: bool = False

    def is_wall(self) -> bool:
        return self.kind in {CellKind.WALL, CellKind.NUMBER}

    def is_blank(self) -> bool:
        return self.kind == CellKind.BLANK

    def is_numbered(self) -> bool:
        return self.kind == CellKind.NUMBER

    def is_open(self) -> bool:
        """Blank cell carrying neither a bulb nor a mark."""
        return self.kind == CellKind.BLANK and not self.bulb and not self.mark

    @property
    def position(self) -> Position:
        return (self.row, self.col)


@dataclass(frozen=True)
class CellView:
    """Read-only view of a cell handed to rendering collaborators."""

    row: int
    col: int
    kind: CellKind
    number: Optional[int]
    bulb: bool
    mark: bool
    lit: bool
    violating: bool = False


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable copy of every mutable flag of a game in progress."""

    bulbs: BoolGrid
    marks: BoolGrid
    human_turn: bool = True
    human_contributed: bool = False
    engine_contributed: bool = False
    last_engine_move: Optional[Position] = None
    solved_by: Optional[Actor] = None
    team_win: Optional[bool] = None


@dataclass(frozen=True)
class Move:
    """A single committed mutation of one cell."""

    actor: Actor
    kind: MoveKind
    row: int
    col: int
    reason: MoveReason = MoveReason.HUMAN
    score: Optional[float] = None

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    def describe(self) -> str:
        noun = "bulb" if self.kind in {MoveKind.PLACE_BULB, MoveKind.REMOVE_BULB} else "mark"
        verb = "placed" if self.kind in {MoveKind.PLACE_BULB, MoveKind.PLACE_MARK} else "removed"
        return f"{self.actor.value.lower()} {verb} {noun} at ({self.row},{self.col})"


@dataclass
class ValidationResult:
    """Verdict of a full-board check, with the cells that caused a failure."""

    solved: bool
    reason: str
    positions: List[Position] = field(default_factory=list)
