"""Random puzzle generation with the solver as a solvability oracle."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

from ..core.constants import KING_STEPS, MAX_WALL_NUMBER, SolveOutcome
from ..core.exceptions import GenerationExhaustedError
from ..core.models import Position
from ..utils.logger import get_logger
from .board import Board
from .cpsat import count_solutions
from .solver import BoardSolver, FeasibilityOracle, SolverConfig


LOGGER = get_logger(__name__)


@dataclass
class GeneratorConfig:
    rows: int = 7
    cols: int = 7
    seed: Optional[int] = None
    wall_count_min: int = 8
    wall_count_max: int = 10
    numbered_min: int = 4
    numbered_max: int = 5
    max_attempts: int = 50
    wall_placement_attempts: int = 200
    require_unique: bool = False
    uniqueness_timeout: float = 10.0
    max_nodes: Optional[int] = None

    def to_solver_config(self) -> SolverConfig:
        return SolverConfig(max_nodes=self.max_nodes)


@dataclass
class GeneratedPuzzle:
    board: Board
    seed: Optional[int]
    attempts: int


class PuzzleGenerator:
    """Scatter walls, number some of them, keep the first solvable layout."""

    def __init__(self, config: Optional[GeneratorConfig] = None, oracle: Optional[FeasibilityOracle] = None) -> None:
        self.config = config or GeneratorConfig()
        self.rng = random.Random(self.config.seed)
        self.oracle = oracle or FeasibilityOracle(BoardSolver(self.config.to_solver_config()))

    def generate(self) -> GeneratedPuzzle:
        for attempt in range(1, self.config.max_attempts + 1):
            board = Board.blank(self.config.rows, self.config.cols)
            walls = self._place_walls(board)
            numbered = self._number_walls(board, walls)
            board.recompute_lighting()

            outcome = self.oracle.check(board)
            if outcome != SolveOutcome.SOLVED:
                LOGGER.debug(
                    "Attempt %s/%s rejected: %s (%d walls, %d numbered)",
                    attempt, self.config.max_attempts, outcome.value, len(walls), numbered,
                )
                continue
            if self.config.require_unique:
                solutions = count_solutions(board, limit=2, timeout=self.config.uniqueness_timeout)
                if solutions != 1:
                    LOGGER.debug("Attempt %s rejected: %d solutions", attempt, solutions)
                    continue
            LOGGER.info(
                "Generated %sx%s puzzle on attempt %s (%d walls, %d numbered)",
                self.config.rows, self.config.cols, attempt, len(walls), numbered,
            )
            return GeneratedPuzzle(board=board, seed=self.config.seed, attempts=attempt)
        raise GenerationExhaustedError(
            f"No solvable layout found after {self.config.max_attempts} attempts"
        )

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------
    def _place_walls(self, board: Board) -> List[Position]:
        target = self.rng.randint(self.config.wall_count_min, self.config.wall_count_max)
        walls: List[Position] = []
        attempts = 0
        while len(walls) < target and attempts < self.config.wall_placement_attempts:
            r = self.rng.randrange(board.rows)
            c = self.rng.randrange(board.cols)
            if (r, c) not in walls and not self._near_wall(board, r, c):
                board.set_wall(r, c)
                walls.append((r, c))
            attempts += 1
        return walls

    @staticmethod
    def _near_wall(board: Board, row: int, col: int) -> bool:
        for dr, dc in KING_STEPS:
            nr, nc = row + dr, col + dc
            if board.contains(nr, nc) and board.cell(nr, nc).is_wall():
                return True
        return False

    def _number_walls(self, board: Board, walls: List[Position]) -> int:
        shuffled = list(walls)
        self.rng.shuffle(shuffled)
        target = self.rng.randint(self.config.numbered_min, self.config.numbered_max)
        numbered = 0
        for r, c in shuffled:
            if numbered >= target:
                break
            blanks = sum(1 for pos in board.neighbors(r, c) if board.cell(*pos).is_blank())
            if blanks > 0:
                board.set_wall(r, c, self.rng.randint(0, min(MAX_WALL_NUMBER, blanks)))
                numbered += 1
        return numbered
