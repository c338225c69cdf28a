"""Move recommendation engine: picks and plays exactly one safe move.

Priority order per turn:

1. repair: remove the first violating bulb (row-major) whose removal keeps
   the position completable;
2. forced: place a bulb a numbered wall or an unlit blank cannot do without;
3. scored: evaluate every legal placement, best score first, centrality
   ranking breaking ties;
4. fallback: mark a blank that legal bulbs could reach from several sides.

Every candidate is checked against the feasibility oracle before it is
kept; rejected candidates are rolled back before the next one is tried.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.constants import Actor, MoveKind, MoveReason, ORTHOGONAL_STEPS, Outcome
from ..core.models import Move, Position
from ..utils.logger import get_logger
from .board import Board
from .centrality import CentralityRanking, compute_centrality
from .graph import VisibilityGraph
from .solver import FeasibilityOracle


LOGGER = get_logger(__name__)


@dataclass
class AdvisorWeights:
    """Coefficients of the placement score."""

    light_gain: float = 2.0
    number_help: float = 20.0
    mismatch_penalty: float = 10.0
    unlit_penalty: float = 1.0
    unlit_bonus: float = 5.0
    degree: float = 1.0
    centrality: float = 0.1
    future_limit_penalty: float = 1.0


@dataclass
class ScoredCandidate:
    position: Position
    score: float
    rank: int
    centrality: float
    degree: int

    def sort_key(self) -> Tuple[float, int, float, int, int, int]:
        row, col = self.position
        return (-self.score, self.rank, -self.centrality, -self.degree, row, col)


@dataclass
class AdvisorResult:
    outcome: Outcome
    move: Optional[Move] = None
    message: str = ""
    oracle_calls: int = 0
    candidates: List[ScoredCandidate] = field(default_factory=list)


class MoveAdvisor:
    """Chooses the engine's single mutation for one turn."""

    def __init__(
        self,
        oracle: Optional[FeasibilityOracle] = None,
        weights: Optional[AdvisorWeights] = None,
    ) -> None:
        self.oracle = oracle or FeasibilityOracle()
        self.weights = weights or AdvisorWeights()

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def play(self, board: Board, graph: VisibilityGraph) -> AdvisorResult:
        """Apply one move to ``board`` and describe it, or report that none is safe."""

        calls_before = self.oracle.calls
        board.recompute_lighting()

        move = self._repair(board)
        candidates: List[ScoredCandidate] = []
        if move is None:
            move = self._forced_placement(board)
        if move is None:
            ranking = compute_centrality(graph)
            candidates = self.score_candidates(board, graph, ranking)
            move = self._best_scored(board, candidates)
        if move is None:
            move = self._fallback_mark(board)

        calls = self.oracle.calls - calls_before
        if move is None:
            LOGGER.info("Engine found no safe move (%d oracle calls)", calls)
            return AdvisorResult(
                outcome=Outcome.NO_SAFE_MOVE,
                message="Engine: no safe move found",
                oracle_calls=calls,
                candidates=candidates,
            )
        LOGGER.info("Engine move: %s [%s]", move.describe(), move.reason.value)
        return AdvisorResult(
            outcome=Outcome.OK,
            move=move,
            message=f"Engine {move.reason.value.lower()}: {move.describe()}",
            oracle_calls=calls,
            candidates=candidates,
        )

    # ------------------------------------------------------------------
    # Phase 1: violation repair
    # ------------------------------------------------------------------
    def _repair(self, board: Board) -> Optional[Move]:
        for r, c in board.violating_bulbs():
            board.set_bulb(r, c, False)
            board.recompute_lighting()
            if self._repair_leaves_feasible(board):
                return Move(Actor.ENGINE, MoveKind.REMOVE_BULB, r, c, MoveReason.REPAIR)
            LOGGER.debug("Rejected repair at (%s,%s): position would be unsolvable", r, c)
            board.set_bulb(r, c, True)
            board.recompute_lighting()
        return None

    def _repair_leaves_feasible(self, board: Board) -> bool:
        """Oracle check after a removal, with still-violating bulbs lifted for the check.

        Other conflicts are fixed on later turns; they must not veto this one.
        """

        remaining = board.violating_bulbs()
        if not remaining:
            return self.oracle.is_feasible(board)
        bulbs, marks = board.capture()
        try:
            for r, c in remaining:
                board.set_bulb(r, c, False)
            board.recompute_lighting()
            return self.oracle.is_feasible(board)
        finally:
            board.restore(bulbs, marks)

    # ------------------------------------------------------------------
    # Phase 2: forced placements
    # ------------------------------------------------------------------
    def forced_candidates(self, board: Board) -> List[Tuple[Position, MoveReason]]:
        forced: List[Tuple[Position, MoveReason]] = []
        for r, c in board.numbered_positions():
            deficit = board.number_deficit(r, c)
            if deficit <= 0:
                continue
            legal = [pos for pos in board.number_candidates(r, c) if board.is_legal_bulb(*pos)]
            if len(legal) == deficit:
                forced.extend((pos, MoveReason.FORCED_NUMBER) for pos in legal)
        for r, c in board.blank_positions():
            if board.cell(r, c).lit:
                continue
            lighters = board.possible_lighters(r, c)
            if len(lighters) == 1:
                forced.append((lighters[0], MoveReason.FORCED_LIGHT))
        return forced

    def _forced_placement(self, board: Board) -> Optional[Move]:
        tried = set()
        for pos, reason in self.forced_candidates(board):
            if pos in tried:
                continue
            tried.add(pos)
            if self._try_place(board, pos):
                return Move(Actor.ENGINE, MoveKind.PLACE_BULB, pos[0], pos[1], reason)
        return None

    # ------------------------------------------------------------------
    # Phase 3: scored placements
    # ------------------------------------------------------------------
    def score_candidates(
        self, board: Board, graph: VisibilityGraph, ranking: CentralityRanking
    ) -> List[ScoredCandidate]:
        """Score every legal placement; the board is left exactly as it was."""

        w = self.weights
        scored: List[ScoredCandidate] = []
        for r, c in board.blank_positions():
            if not board.is_legal_bulb(r, c):
                continue
            cell = board.cell(r, c)
            rays = board.visible_cells(r, c)
            was_lit = cell.lit
            gain = sum(1 for pos in [(r, c)] + rays if not board.cell(*pos).lit)
            help_ = sum(1 for wall in board.adjacent_numbers(r, c) if board.number_deficit(*wall) > 0)
            future_limits = sum(1 for pos in rays if board.is_legal_bulb(*pos))

            board.set_bulb(r, c, True)
            board.recompute_lighting()
            try:
                if board.is_violating(r, c):
                    continue
                if board.validate().solved:
                    score = math.inf
                else:
                    node = graph.node_at(r, c)
                    degree = node.degree if node else 0
                    centrality = ranking.score(node.id) if node else 0.0
                    score = (
                        w.light_gain * gain
                        + w.number_help * help_
                        - w.mismatch_penalty * board.numbered_mismatch()
                        - w.unlit_penalty * board.unlit_blank_count()
                        + (0.0 if was_lit else w.unlit_bonus)
                        + w.degree * degree
                        + w.centrality * centrality
                        - w.future_limit_penalty * future_limits
                    )
            finally:
                board.set_bulb(r, c, False)
                board.recompute_lighting()

            node = graph.node_at(r, c)
            scored.append(
                ScoredCandidate(
                    position=(r, c),
                    score=score,
                    rank=ranking.rank(node.id) if node else len(graph),
                    centrality=ranking.score(node.id) if node else 0.0,
                    degree=node.degree if node else 0,
                )
            )
        scored.sort(key=ScoredCandidate.sort_key)
        return scored

    def _best_scored(self, board: Board, candidates: List[ScoredCandidate]) -> Optional[Move]:
        for candidate in candidates:
            if self._try_place(board, candidate.position):
                r, c = candidate.position
                return Move(Actor.ENGINE, MoveKind.PLACE_BULB, r, c, MoveReason.SCORED, candidate.score)
        return None

    # ------------------------------------------------------------------
    # Phase 4: fallback mark
    # ------------------------------------------------------------------
    def risky_cells(self, board: Board) -> List[Position]:
        """Open blanks that legal bulbs could reach from more than one direction."""

        risky: List[Position] = []
        for r, c in board.blank_positions():
            if not board.cell(r, c).is_open():
                continue
            directions = 0
            for step in ORTHOGONAL_STEPS:
                if any(board.is_legal_bulb(*pos) for pos in board.ray(r, c, step)):
                    directions += 1
            if directions > 1:
                risky.append((r, c))
        return risky

    def _fallback_mark(self, board: Board) -> Optional[Move]:
        for r, c in self.risky_cells(board):
            board.set_mark(r, c, True)
            board.recompute_lighting()
            if self.oracle.is_feasible(board):
                return Move(Actor.ENGINE, MoveKind.PLACE_MARK, r, c, MoveReason.FALLBACK_MARK)
            board.set_mark(r, c, False)
            board.recompute_lighting()
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _try_place(self, board: Board, pos: Position) -> bool:
        r, c = pos
        if not board.is_legal_bulb(r, c):
            return False
        board.set_bulb(r, c, True)
        board.recompute_lighting()
        if not board.is_violating(r, c) and self.oracle.is_feasible(board):
            return True
        board.set_bulb(r, c, False)
        board.recompute_lighting()
        return False
