"""Light Up (Akari) puzzle engine.

This package exposes the public API surface via:

- ``lightup.engine.game.LightUpGame``: turn-based session with undo/redo.
- ``lightup.engine.solver.BoardSolver`` / ``FeasibilityOracle``: the
  divide-and-conquer solver and its transactional wrapper.
- ``lightup.engine.advisor.MoveAdvisor``: the engine's one-move-per-turn player.
- ``lightup.engine.generator.PuzzleGenerator``: random solvable layouts.
"""

from .engine.advisor import AdvisorWeights, MoveAdvisor
from .engine.board import Board
from .engine.game import GameConfig, LightUpGame
from .engine.generator import GeneratorConfig, PuzzleGenerator
from .engine.solver import BoardSolver, FeasibilityOracle, SolverConfig

__all__ = [
    "AdvisorWeights",
    "Board",
    "BoardSolver",
    "FeasibilityOracle",
    "GameConfig",
    "GeneratorConfig",
    "LightUpGame",
    "MoveAdvisor",
    "PuzzleGenerator",
    "SolverConfig",
]

__version__ = "0.1.0"
