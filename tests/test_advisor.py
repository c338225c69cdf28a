import math
import unittest

from lightup.core.constants import MoveKind, MoveReason, Outcome
from lightup.engine.advisor import AdvisorWeights, MoveAdvisor, ScoredCandidate
from lightup.engine.board import Board
from lightup.engine.centrality import compute_centrality
from lightup.engine.graph import build_visibility_graph
from lightup.engine.solver import FeasibilityOracle


def changed_cells(before, after):
    (bulbs_a, marks_a), (bulbs_b, marks_b) = before, after
    return [
        (r, c)
        for r in range(len(bulbs_a))
        for c in range(len(bulbs_a[r]))
        if bulbs_a[r][c] != bulbs_b[r][c] or marks_a[r][c] != marks_b[r][c]
    ]


class AdvisorPhaseTests(unittest.TestCase):
    def play(self, layout):
        board = Board.from_rows(layout)
        before = board.capture()
        result = MoveAdvisor().play(board, build_visibility_graph(board))
        return board, before, result

    def test_repair_removes_first_safe_violator(self) -> None:
        board, before, result = self.play(["*.*", "...", "..."])

        self.assertEqual(result.move.reason, MoveReason.REPAIR)
        self.assertEqual(result.move.kind, MoveKind.REMOVE_BULB)
        self.assertEqual(result.move.position, (0, 0))
        self.assertEqual(changed_cells(before, board.capture()), [(0, 0)])

    def test_repair_skips_removal_that_breaks_the_puzzle(self) -> None:
        # Dropping (0,1) would starve the 1 next to it; dropping (0,4) solves the board.
        board, _, result = self.play(["1*..*"])

        self.assertEqual(result.move.reason, MoveReason.REPAIR)
        self.assertEqual(result.move.position, (0, 4))
        self.assertTrue(board.cell(0, 1).bulb)
        self.assertTrue(board.is_solved())

    def test_independent_conflicts_are_repaired_one_per_turn(self) -> None:
        board = Board.from_rows(["*.*#*.*"])
        graph = build_visibility_graph(board)
        advisor = MoveAdvisor()

        before = board.capture()
        first = advisor.play(board, graph)
        self.assertEqual(first.move.reason, MoveReason.REPAIR)
        self.assertEqual(first.move.position, (0, 0))
        self.assertEqual(changed_cells(before, board.capture()), [(0, 0)])
        self.assertEqual(board.violating_bulbs(), [(0, 4), (0, 6)])

        before = board.capture()
        second = advisor.play(board, graph)
        self.assertEqual(second.move.reason, MoveReason.REPAIR)
        self.assertEqual(second.move.position, (0, 4))
        self.assertEqual(changed_cells(before, board.capture()), [(0, 4)])
        self.assertTrue(board.is_solved())

    def test_forced_number_placement(self) -> None:
        board, before, result = self.play(["#.#", "#2#", "#.#"])

        self.assertEqual(result.outcome, Outcome.OK)
        self.assertEqual(result.move.reason, MoveReason.FORCED_NUMBER)
        self.assertEqual(result.move.position, (2, 1))
        self.assertEqual(changed_cells(before, board.capture()), [(2, 1)])

    def test_forced_light_placement(self) -> None:
        board, _, result = self.play(["x.", "##"])
        self.assertEqual(result.move.reason, MoveReason.FORCED_LIGHT)
        self.assertEqual(result.move.position, (0, 1))
        self.assertEqual(board.bulb_positions(), [(0, 1)])

    def test_scored_placement_makes_one_move(self) -> None:
        board, before, result = self.play(["...", "...", "..."])

        self.assertEqual(result.move.reason, MoveReason.SCORED)
        self.assertEqual(result.move.position, result.candidates[0].position)
        self.assertEqual(changed_cells(before, board.capture()), [result.move.position])
        self.assertGreater(result.oracle_calls, 0)

    def test_no_safe_move_leaves_board_alone(self) -> None:
        board, before, result = self.play(["#.#", "#3#", "#.#"])

        self.assertEqual(result.outcome, Outcome.NO_SAFE_MOVE)
        self.assertIsNone(result.move)
        self.assertEqual(result.message, "Engine: no safe move found")
        self.assertEqual(board.capture(), before)


class ScoringTests(unittest.TestCase):
    def test_scoring_does_not_leak(self) -> None:
        board = Board.from_rows(["*..#.", ".....", "..1..", "x...."])
        graph = build_visibility_graph(board)
        before = board.capture()
        lit_before = [cell.lit for cell in board.iter_cells()]

        candidates = MoveAdvisor().score_candidates(board, graph, compute_centrality(graph))

        self.assertTrue(candidates)
        self.assertEqual(board.capture(), before)
        self.assertEqual([cell.lit for cell in board.iter_cells()], lit_before)

    def test_candidates_sorted_best_first(self) -> None:
        board = Board.blank(3, 3)
        graph = build_visibility_graph(board)
        candidates = MoveAdvisor().score_candidates(board, graph, compute_centrality(graph))

        self.assertEqual(len(candidates), 9)
        keys = [candidate.sort_key() for candidate in candidates]
        self.assertEqual(keys, sorted(keys))

    def test_completing_candidate_scores_infinity(self) -> None:
        board = Board.from_rows(["#.#", "..."])
        board.set_bulb(1, 0)
        board.recompute_lighting()
        graph = build_visibility_graph(board)

        candidates = MoveAdvisor().score_candidates(board, graph, compute_centrality(graph))
        self.assertEqual(candidates[0].position, (0, 1))
        self.assertEqual(candidates[0].score, math.inf)

    def test_unlit_bonus_weight(self) -> None:
        board = Board.blank(3, 3)
        graph = build_visibility_graph(board)
        ranking = compute_centrality(graph)

        default = {c.position: c.score for c in MoveAdvisor().score_candidates(board, graph, ranking)}
        no_bonus = MoveAdvisor(weights=AdvisorWeights(unlit_bonus=0.0))
        flat = {c.position: c.score for c in no_bonus.score_candidates(board, graph, ranking)}
        self.assertAlmostEqual(default[(1, 1)] - flat[(1, 1)], 5.0)

    def test_tie_break_prefers_lower_rank(self) -> None:
        a = ScoredCandidate(position=(0, 0), score=1.0, rank=3, centrality=2.0, degree=1)
        b = ScoredCandidate(position=(2, 2), score=1.0, rank=1, centrality=2.0, degree=1)
        self.assertEqual(sorted([a, b], key=ScoredCandidate.sort_key), [b, a])


class RiskyCellTests(unittest.TestCase):
    def test_risky_cells(self) -> None:
        advisor = MoveAdvisor(FeasibilityOracle())
        self.assertIn((1, 1), advisor.risky_cells(Board.blank(3, 3)))
        self.assertEqual(advisor.risky_cells(Board.from_rows(["#.#", "#2#", "#.#"])), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
