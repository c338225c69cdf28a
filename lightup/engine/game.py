"""Turn-based game session: human moves, engine replies, undo and redo.

The session owns its board exclusively. Hosts (a GUI, the CLI, tests) call
the public methods below and read back immutable :class:`CellView` objects
plus an :class:`Outcome` and a status line; nothing here raises for routine
play.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.constants import Actor, GameState, MoveKind, Outcome, SolveOutcome
from ..core.models import BoardSnapshot, CellView, Move, Position
from ..utils.logger import get_logger
from .advisor import AdvisorResult, AdvisorWeights, MoveAdvisor
from .board import Board
from .generator import GeneratorConfig, PuzzleGenerator
from .graph import VisibilityGraph, build_visibility_graph
from .history import History
from .solver import BoardSolver, FeasibilityOracle, SolverConfig


LOGGER = get_logger(__name__)


@dataclass
class GameConfig:
    rows: int = 7
    cols: int = 7
    seed: Optional[int] = None
    auto_engine: bool = True
    engine_delay_ms: int = 300
    strict_placement: bool = True
    max_nodes: Optional[int] = None
    max_attempts: int = 50
    require_unique: bool = False
    weights: AdvisorWeights = field(default_factory=AdvisorWeights)

    def to_solver_config(self) -> SolverConfig:
        return SolverConfig(max_nodes=self.max_nodes)

    def to_generator_config(self, seed_override: Optional[int] = None) -> GeneratorConfig:
        return GeneratorConfig(
            rows=self.rows,
            cols=self.cols,
            seed=seed_override if seed_override is not None else self.seed,
            max_attempts=self.max_attempts,
            require_unique=self.require_unique,
            max_nodes=self.max_nodes,
        )


class LightUpGame:
    """Owns the board, the history and the whose-turn state machine."""

    def __init__(self, config: Optional[GameConfig] = None, board: Optional[Board] = None) -> None:
        self.config = config or GameConfig()
        self.solver = BoardSolver(self.config.to_solver_config())
        self.oracle = FeasibilityOracle(BoardSolver(self.config.to_solver_config()))
        self.advisor = MoveAdvisor(self.oracle, self.config.weights)
        self._lock = threading.Lock()

        self.state = GameState.WAITING_FOR_HUMAN
        self.status = ""
        self.last_outcome = Outcome.OK
        self.last_move: Optional[Move] = None
        self.last_engine_result: Optional[AdvisorResult] = None
        self.human_turn = True
        self.human_contributed = False
        self.engine_contributed = False
        self.last_engine_move: Optional[Position] = None
        self.solved_by: Optional[Actor] = None
        self.team_win: Optional[bool] = None

        if board is None:
            board = PuzzleGenerator(self.config.to_generator_config()).generate().board
        self._install(board)
        self.status = "Click cells to place bulbs"

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _install(self, board: Board) -> None:
        self.board = board
        self.board.recompute_lighting()
        self.initial_annotations = self.board.capture()
        self.graph: VisibilityGraph = build_visibility_graph(self.board)
        self._reset_turn_state()
        self.history = History(self.snapshot())

    def _reset_turn_state(self) -> None:
        self.state = GameState.WAITING_FOR_HUMAN
        self.human_turn = True
        self.human_contributed = False
        self.engine_contributed = False
        self.last_engine_move = None
        self.last_move = None
        self.last_engine_result = None
        self.solved_by = None
        self.team_win = None
        if self.board.is_solved():
            self.state = GameState.SOLVED

    def new_puzzle(self, seed: Optional[int] = None) -> Outcome:
        """Generate a fresh layout. ``GenerationExhaustedError`` propagates."""

        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            generated = PuzzleGenerator(self.config.to_generator_config(seed_override=seed)).generate()
            self._install(generated.board)
            LOGGER.info("New %sx%s puzzle installed", self.board.rows, self.board.cols)
            return self._report(Outcome.OK, "New game generated")

    def restart(self) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            self.board.restore(*self.initial_annotations)
            if not self.graph.is_current(self.board):
                self.graph = build_visibility_graph(self.board)
            self._reset_turn_state()
            self.history.reset(self.snapshot())
            return self._report(Outcome.OK, "Game restarted")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> BoardSnapshot:
        bulbs, marks = self.board.capture()
        return BoardSnapshot(
            bulbs=bulbs,
            marks=marks,
            human_turn=self.human_turn,
            human_contributed=self.human_contributed,
            engine_contributed=self.engine_contributed,
            last_engine_move=self.last_engine_move,
            solved_by=self.solved_by,
            team_win=self.team_win,
        )

    def _apply(self, snapshot: BoardSnapshot) -> None:
        self.board.restore(snapshot.bulbs, snapshot.marks)
        self.human_turn = snapshot.human_turn
        self.human_contributed = snapshot.human_contributed
        self.engine_contributed = snapshot.engine_contributed
        self.last_engine_move = snapshot.last_engine_move
        if self.board.is_solved():
            self.state = GameState.SOLVED
            self.solved_by = snapshot.solved_by
            self.team_win = snapshot.team_win
        else:
            self.state = GameState.WAITING_FOR_HUMAN if self.human_turn else GameState.ENGINE_THINKING
            self.solved_by = None
            self.team_win = None

    # ------------------------------------------------------------------
    # Human intents
    # ------------------------------------------------------------------
    def toggle_bulb(self, row: int, col: int) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            rejection = self._reject_human(row, col)
            if rejection is not None:
                return rejection
            cell = self.board.cell(row, col)
            if cell.bulb:
                kind = MoveKind.REMOVE_BULB
            elif cell.mark:
                return self._report(Outcome.ILLEGAL_MOVE, f"Cell ({row},{col}) is marked")
            elif self.config.strict_placement and not self.board.is_legal_bulb(row, col):
                return self._report(Outcome.ILLEGAL_MOVE, f"Bulb at ({row},{col}) would break a rule")
            else:
                kind = MoveKind.PLACE_BULB

            before = self.snapshot()
            self.board.set_bulb(row, col, kind == MoveKind.PLACE_BULB)
            return self._after_human_move(before, Move(Actor.HUMAN, kind, row, col))

    def toggle_mark(self, row: int, col: int) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            rejection = self._reject_human(row, col)
            if rejection is not None:
                return rejection
            cell = self.board.cell(row, col)
            kind = MoveKind.REMOVE_MARK if cell.mark else MoveKind.PLACE_MARK

            before = self.snapshot()
            self.board.set_mark(row, col, kind == MoveKind.PLACE_MARK)
            return self._after_human_move(before, Move(Actor.HUMAN, kind, row, col))

    def _reject_human(self, row: int, col: int) -> Optional[Outcome]:
        if not self.board.contains(row, col) or not self.board.cell(row, col).is_blank():
            return self._report(Outcome.ILLEGAL_MOVE, f"Cell ({row},{col}) is not a blank cell")
        if self.state == GameState.SOLVED:
            return self._report(Outcome.ILLEGAL_MOVE, "Puzzle already solved")
        return None

    def _after_human_move(self, before: BoardSnapshot, move: Move) -> Outcome:
        self.board.recompute_lighting()
        self.history.commit(before)
        self.human_contributed = True
        self.last_move = move
        LOGGER.info("Human move: %s", move.describe())
        self.status = move.describe().capitalize()

        if self.board.is_solved():
            return self._finish(Actor.HUMAN)

        self.human_turn = False
        self.state = GameState.ENGINE_THINKING
        if not self.config.auto_engine:
            return self._report(Outcome.OK, self.status)
        # The engine's own outcome stays readable through last_outcome and status.
        if self._engine_turn() == Outcome.SOLVED:
            return Outcome.SOLVED
        return Outcome.OK

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------
    @property
    def engine_pending(self) -> bool:
        """True when the host owes the engine a turn (after ``engine_delay_ms`` if it likes)."""
        return self.state == GameState.ENGINE_THINKING

    def pass_turn(self) -> Outcome:
        """Hand the move to the engine without touching the board."""

        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            if self.state == GameState.SOLVED:
                return self._report(Outcome.ILLEGAL_MOVE, "Puzzle already solved")
            self.human_turn = False
            self.state = GameState.ENGINE_THINKING
            if self.config.auto_engine:
                return self._engine_turn()
            return self._report(Outcome.OK, "Engine to move")

    def engine_turn(self) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            if self.state != GameState.ENGINE_THINKING:
                return self._report(Outcome.ILLEGAL_MOVE, "Not the engine's turn")
            return self._engine_turn()

    def _engine_turn(self) -> Outcome:
        before = self.snapshot()
        if not self.graph.is_current(self.board):
            self.graph = build_visibility_graph(self.board)
        result = self.advisor.play(self.board, self.graph)
        self.last_engine_result = result
        self.human_turn = True
        self.state = GameState.WAITING_FOR_HUMAN

        if result.move is None:
            return self._report(Outcome.NO_SAFE_MOVE, result.message)

        self.history.commit(before)
        self.engine_contributed = True
        self.last_engine_move = result.move.position
        self.last_move = result.move
        self.status = result.message
        if self.board.is_solved():
            return self._finish(Actor.ENGINE)
        return self._report(Outcome.OK, result.message)

    # ------------------------------------------------------------------
    # Solver
    # ------------------------------------------------------------------
    def request_solve(self) -> Outcome:
        """Solve the live board; keep the result only when it is a full solution."""

        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            if self.state == GameState.SOLVED:
                return self._report(Outcome.SOLVED, "Puzzle already solved")

            before = self.snapshot()
            outcome = self.solver.solve(self.board)
            if outcome != SolveOutcome.SOLVED:
                self.board.restore(before.bulbs, before.marks)
                if outcome == SolveOutcome.UNKNOWN:
                    return self._report(Outcome.UNDECIDED, "Solver gave up before reaching a verdict")
                return self._report(Outcome.INFEASIBLE_STATE, "No solution found")

            # Keep the solution's bulbs but only the marks that were there before.
            solved_bulbs, _ = self.board.capture()
            self.board.restore(solved_bulbs, before.marks)
            self.history.commit(before)
            self.state = GameState.SOLVED
            self.human_turn = True
            self.solved_by = Actor.SOLVER
            self.team_win = None
            LOGGER.info("Puzzle solved by the solver (%d search nodes)", self.solver.nodes_visited)
            return self._report(Outcome.SOLVED, "Puzzle solved (by solver)")

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def undo(self) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            previous = self.history.undo(self.snapshot())
            if previous is None:
                return self._report(Outcome.NOTHING_TO_UNDO, "Nothing to undo")
            self._apply(previous)
            return self._report(Outcome.OK, "Undo move")

    def redo(self) -> Outcome:
        with self._turn() as acquired:
            if not acquired:
                return self._report(Outcome.BUSY, "Busy")
            following = self.history.redo(self.snapshot())
            if following is None:
                return self._report(Outcome.NOTHING_TO_REDO, "Nothing to redo")
            self._apply(following)
            return self._report(Outcome.OK, "Redo move")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def cell_view(self, row: int, col: int) -> CellView:
        return self.board.view(row, col)

    def board_view(self) -> Tuple[Tuple[CellView, ...], ...]:
        return tuple(
            tuple(self.board.view(r, c) for c in range(self.board.cols))
            for r in range(self.board.rows)
        )

    @property
    def move_count(self) -> int:
        return self.history.depth

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _finish(self, actor: Actor) -> Outcome:
        self.state = GameState.SOLVED
        self.human_turn = True
        self.solved_by = actor
        self.team_win = self.human_contributed and self.engine_contributed
        LOGGER.info("Puzzle solved by %s (team win: %s)", actor.value.lower(), self.team_win)
        message = (
            "Team effort! Both players contributed to solving the puzzle."
            if self.team_win
            else "Puzzle solved"
        )
        return self._report(Outcome.SOLVED, message)

    def _report(self, outcome: Outcome, message: str) -> Outcome:
        self.last_outcome = outcome
        self.status = message
        return outcome

    def _turn(self) -> "_TurnLock":
        return _TurnLock(self._lock)


@dataclass
class _TurnLock:
    """Non-blocking hold on the board for one committed step."""

    lock: threading.Lock
    acquired: bool = False

    def __enter__(self) -> bool:
        self.acquired = self.lock.acquire(blocking=False)
        return self.acquired

    def __exit__(self, *exc_info) -> None:
        if self.acquired:
            self.lock.release()
            self.acquired = False
