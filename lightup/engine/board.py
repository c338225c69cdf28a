"""Board representation and the Light Up rule engine."""

from __future__ import annotations

import copy
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.constants import (
    BLANK_SYMBOL,
    BULB_SYMBOL,
    LIT_SYMBOL,
    MARK_SYMBOL,
    MAX_WALL_NUMBER,
    ORTHOGONAL_STEPS,
    WALL_SYMBOL,
    Bounds,
    CellKind,
)
from ..core.exceptions import BoardLayoutError
from ..core.models import BoolGrid, Cell, CellView, Position, ValidationResult
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

SOLVED_REASON = "Puzzle solved"


class Board:
    """Encapsulates the puzzle grid with lighting and legality helpers."""

    def __init__(self, rows: int, cols: int) -> None:
        if rows < 1 or cols < 1:
            raise BoardLayoutError(f"Board dimensions must be positive, got {rows}x{cols}")
        self.bounds = Bounds(rows=rows, cols=cols)
        self.cells: List[List[Cell]] = [
            [Cell(row=r, col=c) for c in range(cols)] for r in range(rows)
        ]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def blank(cls, rows: int, cols: int) -> "Board":
        return cls(rows, cols)

    @classmethod
    def from_rows(cls, lines: Sequence[str]) -> "Board":
        """Parse a text layout.

        ``.`` blank, ``#`` wall, ``0``-``4`` numbered wall, ``*`` bulb and
        ``x`` mark (both on blank cells). Whitespace inside a line is ignored.
        """

        rows = ["".join(line.split()) for line in lines if line.strip()]
        if not rows:
            raise BoardLayoutError("Empty board layout")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise BoardLayoutError("Board layout rows have different lengths")

        board = cls(len(rows), width)
        for r, row in enumerate(rows):
            for c, symbol in enumerate(row):
                cell = board.cells[r][c]
                if symbol == BLANK_SYMBOL:
                    continue
                if symbol == WALL_SYMBOL:
                    cell.kind = CellKind.WALL
                elif symbol in "0123456789":
                    number = int(symbol)
                    if number > MAX_WALL_NUMBER:
                        raise BoardLayoutError(f"Wall number {number} at ({r},{c}) exceeds {MAX_WALL_NUMBER}")
                    cell.kind = CellKind.NUMBER
                    cell.number = number
                elif symbol == BULB_SYMBOL:
                    cell.bulb = True
                elif symbol.lower() == MARK_SYMBOL:
                    cell.mark = True
                else:
                    raise BoardLayoutError(f"Unknown symbol {symbol!r} at ({r},{c})")
        board.recompute_lighting()
        return board

    def set_wall(self, row: int, col: int, number: Optional[int] = None) -> None:
        """Turn a cell into a plain or numbered wall, dropping its annotations."""

        cell = self.cells[row][col]
        if number is not None and not 0 <= number <= MAX_WALL_NUMBER:
            raise BoardLayoutError(f"Wall number {number} out of range")
        cell.kind = CellKind.WALL if number is None else CellKind.NUMBER
        cell.number = number
        cell.bulb = False
        cell.mark = False
        cell.lit = False

    def copy(self) -> "Board":
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def contains(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col)

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def blank_positions(self) -> List[Position]:
        return [cell.position for cell in self.iter_cells() if cell.is_blank()]

    def bulb_positions(self) -> List[Position]:
        return [cell.position for cell in self.iter_cells() if cell.bulb]

    def numbered_positions(self) -> List[Position]:
        return [cell.position for cell in self.iter_cells() if cell.is_numbered()]

    def neighbors(self, row: int, col: int) -> Iterable[Position]:
        for dr, dc in ORTHOGONAL_STEPS:
            nr, nc = row + dr, col + dc
            if self.bounds.contains(nr, nc):
                yield nr, nc

    def adjacent_numbers(self, row: int, col: int) -> List[Position]:
        return [(nr, nc) for nr, nc in self.neighbors(row, col) if self.cells[nr][nc].is_numbered()]

    def adjacent_bulb_count(self, row: int, col: int) -> int:
        return sum(1 for nr, nc in self.neighbors(row, col) if self.cells[nr][nc].bulb)

    def number_candidates(self, row: int, col: int) -> List[Position]:
        """Open blanks adjacent to a numbered wall."""
        return [(nr, nc) for nr, nc in self.neighbors(row, col) if self.cells[nr][nc].is_open()]

    def number_deficit(self, row: int, col: int) -> int:
        """Bulbs still missing around a numbered wall (negative when over-full)."""
        cell = self.cells[row][col]
        return (cell.number or 0) - self.adjacent_bulb_count(row, col)

    def ray(self, row: int, col: int, step: Tuple[int, int]) -> Iterator[Position]:
        """Cells visible from (row, col) along one direction, stopping at a wall."""

        dr, dc = step
        r, c = row + dr, col + dc
        while self.bounds.contains(r, c) and not self.cells[r][c].is_wall():
            yield r, c
            r += dr
            c += dc

    def visible_cells(self, row: int, col: int) -> List[Position]:
        visible: List[Position] = []
        for step in ORTHOGONAL_STEPS:
            visible.extend(self.ray(row, col, step))
        return visible

    def seen_bulb(self, row: int, col: int) -> Optional[Position]:
        """First other bulb visible from (row, col), scanning down, up, right, left."""

        for step in ORTHOGONAL_STEPS:
            for r, c in self.ray(row, col, step):
                if self.cells[r][c].bulb:
                    return r, c
        return None

    # ------------------------------------------------------------------
    # Lighting and legality
    # ------------------------------------------------------------------
    def recompute_lighting(self) -> None:
        for cell in self.iter_cells():
            cell.lit = False
        for cell in self.iter_cells():
            if not cell.bulb:
                continue
            cell.lit = True
            for r, c in self.visible_cells(cell.row, cell.col):
                self.cells[r][c].lit = True

    def is_legal_bulb(self, row: int, col: int) -> bool:
        cell = self.cells[row][col]
        if not cell.is_open():
            return False
        if self.seen_bulb(row, col) is not None:
            return False
        for nr, nc in self.adjacent_numbers(row, col):
            if self.adjacent_bulb_count(nr, nc) + 1 > (self.cells[nr][nc].number or 0):
                return False
        return True

    def is_violating(self, row: int, col: int) -> bool:
        if not self.cells[row][col].bulb:
            return False
        if self.seen_bulb(row, col) is not None:
            return True
        return any(self.number_deficit(nr, nc) < 0 for nr, nc in self.adjacent_numbers(row, col))

    def violating_bulbs(self) -> List[Position]:
        return [pos for pos in self.bulb_positions() if self.is_violating(*pos)]

    def possible_lighters(self, row: int, col: int) -> List[Position]:
        """Legal bulb positions that would light (row, col), the cell itself included."""

        lighters: List[Position] = []
        if self.is_legal_bulb(row, col):
            lighters.append((row, col))
        for r, c in self.visible_cells(row, col):
            if self.is_legal_bulb(r, c):
                lighters.append((r, c))
        return lighters

    def numbered_mismatch(self) -> int:
        return sum(abs(self.number_deficit(r, c)) for r, c in self.numbered_positions())

    def unlit_blank_count(self) -> int:
        return sum(1 for cell in self.iter_cells() if cell.is_blank() and not cell.lit)

    def validate(self) -> ValidationResult:
        """Report the first broken rule in a deterministic row-major scan."""

        for cell in self.iter_cells():
            if cell.is_blank() and not cell.lit:
                return ValidationResult(
                    solved=False,
                    reason=f"Unlit cell at ({cell.row},{cell.col})",
                    positions=[cell.position],
                )
        for r, c in self.bulb_positions():
            other = self.seen_bulb(r, c)
            if other is not None:
                return ValidationResult(
                    solved=False,
                    reason=f"Bulbs see each other at ({r},{c}) & ({other[0]},{other[1]})",
                    positions=[(r, c), other],
                )
        for r, c in self.numbered_positions():
            if self.number_deficit(r, c) != 0:
                return ValidationResult(
                    solved=False,
                    reason=f"Number mismatch at ({r},{c})",
                    positions=[(r, c)],
                )
        return ValidationResult(solved=True, reason=SOLVED_REASON)

    def is_solved(self) -> bool:
        return self.validate().solved

    # ------------------------------------------------------------------
    # Annotation mutation
    # ------------------------------------------------------------------
    def set_bulb(self, row: int, col: int, value: bool = True) -> None:
        cell = self.cells[row][col]
        if not cell.is_blank():
            raise BoardLayoutError(f"Cannot place a bulb on {cell.kind.value} at ({row},{col})")
        cell.bulb = value
        if value:
            cell.mark = False

    def set_mark(self, row: int, col: int, value: bool = True) -> None:
        cell = self.cells[row][col]
        if not cell.is_blank():
            raise BoardLayoutError(f"Cannot mark {cell.kind.value} at ({row},{col})")
        cell.mark = value
        if value:
            cell.bulb = False

    def capture(self) -> Tuple[BoolGrid, BoolGrid]:
        """Immutable copy of the bulb and mark grids."""

        bulbs = tuple(tuple(cell.bulb for cell in row) for row in self.cells)
        marks = tuple(tuple(cell.mark for cell in row) for row in self.cells)
        return bulbs, marks

    def restore(self, bulbs: BoolGrid, marks: BoolGrid) -> None:
        if len(bulbs) != self.rows or len(marks) != self.rows or any(
            len(row) != self.cols for row in (*bulbs, *marks)
        ):
            raise BoardLayoutError("Snapshot dimensions do not match the board")
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                cell.bulb = bulbs[r][c] and cell.is_blank()
                cell.mark = marks[r][c] and cell.is_blank()
        self.recompute_lighting()

    def clear_annotations(self) -> None:
        for cell in self.iter_cells():
            cell.bulb = False
            cell.mark = False
        self.recompute_lighting()

    def wall_signature(self) -> Tuple[Tuple[Optional[int], ...], ...]:
        """Structural fingerprint of the wall layout (-1 for plain walls, None for blanks)."""

        return tuple(
            tuple(
                None if cell.is_blank() else (-1 if cell.number is None else cell.number)
                for cell in row
            )
            for row in self.cells
        )

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def view(self, row: int, col: int) -> CellView:
        cell = self.cells[row][col]
        return CellView(
            row=row,
            col=col,
            kind=cell.kind,
            number=cell.number,
            bulb=cell.bulb,
            mark=cell.mark,
            lit=cell.lit,
            violating=self.is_violating(row, col),
        )

    def to_rows(self, show_lit: bool = False) -> List[str]:
        lines: List[str] = []
        for row in self.cells:
            symbols: List[str] = []
            for cell in row:
                if cell.kind == CellKind.WALL:
                    symbols.append(WALL_SYMBOL)
                elif cell.kind == CellKind.NUMBER:
                    symbols.append(str(cell.number))
                elif cell.bulb:
                    symbols.append(BULB_SYMBOL)
                elif cell.mark:
                    symbols.append(MARK_SYMBOL)
                elif show_lit and cell.lit:
                    symbols.append(LIT_SYMBOL)
                else:
                    symbols.append(BLANK_SYMBOL)
            lines.append("".join(symbols))
        return lines

    def to_jsonable(self) -> List[List[dict]]:
        return [
            [
                {
                    "kind": cell.kind.value,
                    "number": cell.number,
                    "bulb": cell.bulb,
                    "mark": cell.mark,
                    "lit": cell.lit,
                }
                for cell in row
            ]
            for row in self.cells
        ]
