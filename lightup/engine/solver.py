"""Divide-and-conquer Light Up solver and the feasibility oracle built on it.

The solver works in place on a :class:`Board`: it first runs local
deductions to a fixpoint, then splits the blanks into regions and runs a
memoized backtracking search per region. Existing bulbs and marks are
treated as fixed, so a successful solve is always an extension of the
position it was given.

Because solving mutates the board, every caller that only wants a verdict
goes through :class:`FeasibilityOracle`, which restores bulbs and marks
whatever the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..core.constants import SolveOutcome
from ..core.models import Position
from ..utils.logger import get_logger
from .board import Board
from .regions import Region, couple_regions, decompose_regions, sort_regions_by_size


LOGGER = get_logger(__name__)


@dataclass
class SolverConfig:
    """Search limits. ``max_nodes`` of ``None`` means unbounded."""

    max_nodes: Optional[int] = None


@dataclass(frozen=True)
class SolutionRecord:
    bulbs: FrozenSet[Position]
    wall_signature: Tuple


class _Contradiction(Exception):
    """Internal signal: the current position has no completion."""


class _BudgetExhausted(Exception):
    """Internal signal: the node budget ran out before a verdict."""


class BoardSolver:
    """Deductions, region decomposition and per-region backtracking."""

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()
        self.solution: Optional[SolutionRecord] = None
        self.nodes_visited = 0

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def solve(self, board: Board) -> SolveOutcome:
        """Complete ``board`` in place. Leaves partial work behind on failure."""

        self.nodes_visited = 0
        board.recompute_lighting()
        try:
            self.deduce(board)
        except _Contradiction as exc:
            LOGGER.debug("Deductions hit a contradiction: %s", exc)
            return SolveOutcome.UNSOLVABLE

        regions = sort_regions_by_size(decompose_regions(board))
        for group in couple_regions(board, regions):
            outcome = self._solve_group(board, group)
            if outcome != SolveOutcome.SOLVED:
                return outcome

        board.recompute_lighting()
        result = board.validate()
        if not result.solved:
            LOGGER.warning("Region search accepted an invalid board: %s", result.reason)
            return SolveOutcome.UNSOLVABLE
        self.solution = SolutionRecord(
            bulbs=frozenset(board.bulb_positions()),
            wall_signature=board.wall_signature(),
        )
        LOGGER.debug("Solved board after %d search nodes", self.nodes_visited)
        return SolveOutcome.SOLVED

    def solve_region(self, board: Board, region: Region) -> SolveOutcome:
        """Solve one region in isolation, touching only its cells.

        Regions tied to ``region`` by a shared numbered wall are searched
        alongside it on a scratch copy; only ``region``'s own cells are
        written back to ``board``.
        """

        self.nodes_visited = 0
        board.recompute_lighting()
        regions = sort_regions_by_size(decompose_regions(board))
        group = next(
            (group for group in couple_regions(board, regions)
             if any(region.cells[0] in member for member in group)),
            [region],
        )

        work = board.copy()
        try:
            self.deduce(work, scope={cell for member in group for cell in member.cells})
        except _Contradiction as exc:
            LOGGER.debug("Region %d deductions hit a contradiction: %s", region.id, exc)
            return SolveOutcome.UNSOLVABLE
        outcome = self._solve_group(work, group)

        for r, c in region.cells:
            board.cell(r, c).bulb = work.cell(r, c).bulb
            board.cell(r, c).mark = work.cell(r, c).mark
        board.recompute_lighting()
        return outcome

    # ------------------------------------------------------------------
    # Deductions
    # ------------------------------------------------------------------
    def deduce(self, board: Board, scope: Optional[Set[Position]] = None) -> int:
        """Apply the local rules until nothing changes; returns the number of passes.

        Raises ``_Contradiction`` when the position cannot be completed.
        """

        passes = 0
        changed = True
        while changed:
            passes += 1
            changed = self._complete_numbers(board, scope)
            changed |= self._force_single_lighters(board, scope)
            changed |= self._forbid_illegal(board, scope)
        return passes

    def _complete_numbers(self, board: Board, scope: Optional[Set[Position]]) -> bool:
        changed = False
        for r, c in board.numbered_positions():
            neighbors = list(board.neighbors(r, c))
            if scope is not None and not any(pos in scope for pos in neighbors):
                continue
            deficit = board.number_deficit(r, c)
            candidates = board.number_candidates(r, c)
            if deficit < 0:
                raise _Contradiction(f"numbered wall ({r},{c}) is over-full")
            if deficit > len(candidates):
                raise _Contradiction(f"numbered wall ({r},{c}) cannot reach its count")
            if scope is not None:
                candidates_in_scope = [pos for pos in candidates if pos in scope]
            else:
                candidates_in_scope = candidates
            if deficit and deficit == len(candidates):
                for pr, pc in candidates_in_scope:
                    if not board.is_legal_bulb(pr, pc):
                        raise _Contradiction(f"forced bulb at ({pr},{pc}) is illegal")
                    board.set_bulb(pr, pc)
                    changed = True
            elif deficit == 0:
                for pr, pc in candidates_in_scope:
                    board.set_mark(pr, pc)
                    changed = True
        if changed:
            board.recompute_lighting()
        return changed

    def _force_single_lighters(self, board: Board, scope: Optional[Set[Position]]) -> bool:
        changed = False
        for r, c in board.blank_positions():
            if scope is not None and (r, c) not in scope:
                continue
            if board.cell(r, c).lit:
                continue
            lighters = board.possible_lighters(r, c)
            if not lighters:
                raise _Contradiction(f"({r},{c}) can no longer be lit")
            if len(lighters) == 1:
                board.set_bulb(*lighters[0])
                board.recompute_lighting()
                changed = True
        return changed

    def _forbid_illegal(self, board: Board, scope: Optional[Set[Position]]) -> bool:
        changed = False
        for r, c in board.blank_positions():
            if scope is not None and (r, c) not in scope:
                continue
            if board.cell(r, c).is_open() and not board.is_legal_bulb(r, c):
                board.set_mark(r, c)
                changed = True
        return changed

    # ------------------------------------------------------------------
    # Region search
    # ------------------------------------------------------------------
    def _solve_group(self, board: Board, group: List[Region]) -> SolveOutcome:
        order: List[Position] = [cell for region in group for cell in region.cells]
        search = _RegionSearch(board, order, self)
        try:
            found = search.run()
        except _BudgetExhausted:
            LOGGER.warning(
                "Search budget of %s nodes exhausted on regions %s",
                self.config.max_nodes,
                [region.id for region in group],
            )
            return SolveOutcome.UNKNOWN
        if not found:
            LOGGER.debug("Regions %s have no legal assignment", [region.id for region in group])
            return SolveOutcome.UNSOLVABLE
        return SolveOutcome.SOLVED

    def _visit(self) -> None:
        self.nodes_visited += 1
        limit = self.config.max_nodes
        if limit is not None and self.nodes_visited > limit:
            raise _BudgetExhausted()


class _RegionSearch:
    """Backtracking over one group of cells, bulb-or-not per cell in a fixed order.

    Failed states are memoized on ``(index, bulb bitmask)``. After each
    decision, cells whose last open lighter has been decided must be lit and
    numbered walls whose last open neighbour has been decided must be exact.
    """

    def __init__(self, board: Board, order: List[Position], solver: BoardSolver) -> None:
        self.board = board
        self.order = order
        self.solver = solver
        self.index: Dict[Position, int] = {pos: i for i, pos in enumerate(order)}
        self.lighting: Dict[Position, List[Position]] = {
            pos: [pos] + board.visible_cells(*pos) for pos in order
        }
        self.lit_count: Dict[Position, int] = {pos: 0 for pos in order}
        self.mask = 0
        self.failed: Set[Tuple[int, int]] = set()

        for i, pos in enumerate(order):
            if board.cell(*pos).bulb:
                self.mask |= 1 << i
                self._shine(pos, 1)

        self.upfront_cells: List[Position] = []
        self.cell_checks: Dict[int, List[Position]] = {}
        for pos in order:
            open_lighters = [self.index[p] for p in self.lighting[pos] if board.cell(*p).is_open()]
            if open_lighters:
                self.cell_checks.setdefault(max(open_lighters), []).append(pos)
            else:
                self.upfront_cells.append(pos)

        self.upfront_numbers: List[Position] = []
        self.number_checks: Dict[int, List[Position]] = {}
        for wall in self._enclosed_numbers():
            open_indices = [self.index[p] for p in board.number_candidates(*wall)]
            if open_indices:
                self.number_checks.setdefault(max(open_indices), []).append(wall)
            else:
                self.upfront_numbers.append(wall)

    def _enclosed_numbers(self) -> Iterable[Position]:
        """Numbered walls whose blank neighbours all belong to this group."""

        seen: Set[Position] = set()
        for pos in self.order:
            for wall in self.board.adjacent_numbers(*pos):
                if wall in seen:
                    continue
                seen.add(wall)
                blanks = [p for p in self.board.neighbors(*wall) if self.board.cell(*p).is_blank()]
                if all(p in self.index for p in blanks):
                    yield wall

    def _shine(self, pos: Position, delta: int) -> None:
        for target in self.lighting[pos]:
            self.lit_count[target] += delta

    def run(self) -> bool:
        for pos in self.order:
            if self.board.is_violating(*pos):
                return False
        if any(self.lit_count[pos] == 0 for pos in self.upfront_cells):
            return False
        if any(self.board.number_deficit(*wall) != 0 for wall in self.upfront_numbers):
            return False
        return self._search(0)

    def _checks_pass(self, i: int) -> bool:
        for pos in self.cell_checks.get(i, ()):
            if self.lit_count[pos] == 0:
                return False
        for wall in self.number_checks.get(i, ()):
            if self.board.number_deficit(*wall) != 0:
                return False
        return True

    def _accept(self) -> bool:
        for pos in self.order:
            if self.lit_count[pos] == 0:
                return False
            if self.board.is_violating(*pos):
                return False
        return True

    def _search(self, i: int) -> bool:
        self.solver._visit()
        if i == len(self.order):
            return self._accept()
        key = (i, self.mask)
        if key in self.failed:
            return False

        pos = self.order[i]
        cell = self.board.cell(*pos)
        if not cell.is_open():
            options: Tuple[bool, ...] = (False,)
        elif not self.board.is_legal_bulb(*pos):
            options = (False,)
        elif self.lit_count[pos] == 0:
            options = (True, False)
        else:
            options = (False, True)

        for place in options:
            if place:
                cell.bulb = True
                self.mask |= 1 << i
                self._shine(pos, 1)
            if self._checks_pass(i) and self._search(i + 1):
                return True
            if place:
                cell.bulb = False
                self.mask &= ~(1 << i)
                self._shine(pos, -1)

        self.failed.add(key)
        return False


class FeasibilityOracle:
    """Transactional wrapper: solve, read the verdict, restore bulbs and marks."""

    def __init__(self, solver: Optional[BoardSolver] = None) -> None:
        self.solver = solver or BoardSolver()
        self.calls = 0

    def check(self, board: Board) -> SolveOutcome:
        self.calls += 1
        bulbs, marks = board.capture()
        try:
            outcome = self.solver.solve(board)
        finally:
            board.restore(bulbs, marks)
        LOGGER.debug("Oracle check #%d: %s", self.calls, outcome.value)
        return outcome

    def is_feasible(self, board: Board) -> bool:
        """True unless the position is proven to have no completion."""
        return self.check(board) != SolveOutcome.UNSOLVABLE


def solve_board(board: Board, config: Optional[SolverConfig] = None) -> SolveOutcome:
    return BoardSolver(config).solve(board)
