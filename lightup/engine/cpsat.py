"""CP-SAT reference model of the Light Up rules using OR-Tools.

This is an independent encoding used to cross-check the backtracking
solver and to test generated puzzles for uniqueness. The engine's move path
never depends on it.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional

from ortools.sat.python import cp_model

from ..core.models import Position
from ..utils.logger import get_logger
from .board import Board

LOGGER = get_logger(__name__)

RUN_STEPS = ((1, 0), (0, 1))


def build_model(board: Board) -> tuple[cp_model.CpModel, Dict[Position, cp_model.IntVar]]:
    """Encode the board's current position.

    Existing bulbs are forced on and marked cells forced off, so the model
    asks the same question as the feasibility oracle.
    """

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: one boolean per blank
    # ------------------------------------------------------------------
    bulb_vars: Dict[Position, cp_model.IntVar] = {}
    for r, c in board.blank_positions():
        var = model.new_bool_var(f"B_{r}_{c}")
        bulb_vars[(r, c)] = var
        cell = board.cell(r, c)
        if cell.bulb:
            model.add(var == 1)
        elif cell.mark:
            model.add(var == 0)

    # ------------------------------------------------------------------
    # Step 2: at most one bulb per horizontal and vertical segment
    # ------------------------------------------------------------------
    for segment in _segments(board):
        if len(segment) > 1:
            model.add_at_most_one([bulb_vars[pos] for pos in segment])

    # ------------------------------------------------------------------
    # Step 3: every blank lit by itself or a cell along its rays
    # ------------------------------------------------------------------
    for r, c in board.blank_positions():
        lighters = [bulb_vars[(r, c)]] + [bulb_vars[pos] for pos in board.visible_cells(r, c)]
        model.add_bool_or(lighters)

    # ------------------------------------------------------------------
    # Step 4: exact counts on numbered walls
    # ------------------------------------------------------------------
    for r, c in board.numbered_positions():
        adjacent = [bulb_vars[pos] for pos in board.neighbors(r, c) if pos in bulb_vars]
        number = board.cell(r, c).number or 0
        if adjacent:
            model.add(sum(adjacent) == number)
        elif number:
            stranded = model.new_int_var(0, 0, f"N_{r}_{c}")
            model.add(stranded == number)

    return model, bulb_vars


def _segments(board: Board) -> List[List[Position]]:
    """Maximal horizontal and vertical runs of blanks."""

    segments: List[List[Position]] = []
    for dr, dc in RUN_STEPS:
        for r, c in board.blank_positions():
            pr, pc = r - dr, c - dc
            if board.contains(pr, pc) and board.cell(pr, pc).is_blank():
                continue  # not the start of a run
            segments.append([(r, c)] + list(board.ray(r, c, (dr, dc))))
    return segments


def solve_with_cpsat(board: Board, timeout: float = 10.0) -> Optional[FrozenSet[Position]]:
    """Return one completing bulb set, or ``None`` when infeasible or timed out."""

    model, bulb_vars = build_model(board)
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 4

    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.debug("CP-SAT: no solution (status=%s)", solver.status_name(status))
        return None
    return frozenset(pos for pos, var in bulb_vars.items() if solver.value(var))


class _SolutionCounter(cp_model.CpSolverSolutionCallback):
    def __init__(self, limit: int) -> None:
        super().__init__()
        self.limit = limit
        self.count = 0

    def on_solution_callback(self) -> None:
        self.count += 1
        if self.count >= self.limit:
            self.stop_search()


def count_solutions(board: Board, limit: int = 2, timeout: float = 10.0) -> int:
    """Count completions of the current position, stopping at ``limit``."""

    model, _ = build_model(board)
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.enumerate_all_solutions = True
    solver.parameters.num_workers = 1
    counter = _SolutionCounter(limit)
    solver.solve(model, counter)
    LOGGER.debug("CP-SAT: counted %d solution(s) (limit %d)", counter.count, limit)
    return counter.count
