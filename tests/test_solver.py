import unittest

from lightup.core.constants import SolveOutcome
from lightup.engine.board import Board
from lightup.engine.regions import decompose_regions
from lightup.engine.solver import BoardSolver, FeasibilityOracle, SolverConfig, solve_board


class SolverScenarioTests(unittest.TestCase):
    def test_empty_three_by_three(self) -> None:
        board = Board.blank(3, 3)
        solver = BoardSolver()

        self.assertEqual(solver.solve(board), SolveOutcome.SOLVED)
        self.assertTrue(board.validate().solved)
        self.assertEqual(board.violating_bulbs(), [])
        self.assertEqual(board.unlit_blank_count(), 0)
        self.assertEqual(solver.solution.bulbs, frozenset(board.bulb_positions()))

    def test_numbered_wall_with_exact_room(self) -> None:
        board = Board.from_rows(["#.#", "#2#", "#.#"])
        BoardSolver().deduce(board)
        self.assertEqual(board.bulb_positions(), [(0, 1), (2, 1)])

        board.clear_annotations()
        self.assertEqual(solve_board(board), SolveOutcome.SOLVED)
        self.assertEqual(board.bulb_positions(), [(0, 1), (2, 1)])
        self.assertFalse(any(cell.mark for cell in board.iter_cells()))

    def test_zero_wall_keeps_neighbours_dark(self) -> None:
        board = Board.from_rows(["...", ".0.", "..."])
        self.assertEqual(solve_board(board), SolveOutcome.SOLVED)
        for pos in board.neighbors(1, 1):
            self.assertFalse(board.cell(*pos).bulb)
        self.assertTrue(board.is_solved())

    def test_numbered_wall_between_regions(self) -> None:
        board = Board.from_rows(["...", "#1#", "..."])
        self.assertEqual(solve_board(board), SolveOutcome.SOLVED)
        self.assertEqual(board.number_deficit(1, 1), 0)
        self.assertTrue(board.is_solved())

    def test_existing_bulbs_are_kept(self) -> None:
        board = Board.from_rows(["*..", "...", "..."])
        self.assertEqual(solve_board(board), SolveOutcome.SOLVED)
        self.assertTrue(board.cell(0, 0).bulb)
        self.assertTrue(board.is_solved())

    def test_unsolvable_boards(self) -> None:
        for layout in (["...", ".4."], ["*.*"], ["#.#", "#3#", "#.#"], ["x"]):
            with self.subTest(layout=layout):
                self.assertEqual(solve_board(Board.from_rows(layout)), SolveOutcome.UNSOLVABLE)

    def test_node_budget_yields_unknown(self) -> None:
        solver = BoardSolver(SolverConfig(max_nodes=1))
        self.assertEqual(solver.solve(Board.blank(3, 3)), SolveOutcome.UNKNOWN)


class RegionIndependenceTests(unittest.TestCase):
    LAYOUT = ["..#..", "..#..", "..#1."]

    def test_region_solve_touches_only_its_cells(self) -> None:
        board = Board.from_rows(self.LAYOUT)
        regions = decompose_regions(board)
        left = regions[0]

        self.assertEqual(BoardSolver().solve_region(board, left), SolveOutcome.SOLVED)
        for cell in board.iter_cells():
            if cell.is_blank() and cell.position not in left:
                self.assertFalse(cell.bulb or cell.mark)
        self.assertTrue(all(board.cell(*pos).lit for pos in left.cells))

    def test_region_solve_matches_whole_board_solve(self) -> None:
        whole = Board.from_rows(self.LAYOUT)
        self.assertEqual(solve_board(whole), SolveOutcome.SOLVED)

        for region in decompose_regions(whole):
            board = Board.from_rows(self.LAYOUT)
            self.assertEqual(BoardSolver().solve_region(board, region), SolveOutcome.SOLVED)
            alone = [pos for pos in region.cells if board.cell(*pos).bulb]
            together = [pos for pos in region.cells if whole.cell(*pos).bulb]
            self.assertEqual(alone, together)

    def test_region_tied_by_numbered_wall_stays_in_bounds(self) -> None:
        layout = ["#.#", "#2#", "#.#"]
        board = Board.from_rows(layout)
        top, bottom = decompose_regions(board)

        self.assertEqual(BoardSolver().solve_region(board, top), SolveOutcome.SOLVED)
        self.assertTrue(board.cell(0, 1).bulb)
        self.assertFalse(board.cell(2, 1).bulb)
        self.assertFalse(board.cell(2, 1).mark)
        self.assertEqual(bottom.cells, [(2, 1)])

        whole = Board.from_rows(layout)
        self.assertEqual(solve_board(whole), SolveOutcome.SOLVED)
        self.assertEqual(whole.bulb_positions(), [(0, 1), (2, 1)])

    def test_scoped_deductions_stay_inside_scope(self) -> None:
        board = Board.from_rows(["#.#", "#2#", "#.#"])
        BoardSolver().deduce(board, scope={(0, 1)})
        self.assertEqual(board.bulb_positions(), [(0, 1)])


class FeasibilityOracleTests(unittest.TestCase):
    def test_oracle_restores_the_board(self) -> None:
        layouts = (["*..", ".x.", "..."], ["*.*"], ["#.#", "#2#", "#.#"], ["..#..", "x.1..", "....."])
        for layout in layouts:
            with self.subTest(layout=layout):
                board = Board.from_rows(layout)
                before = board.capture()
                lit_before = [cell.lit for cell in board.iter_cells()]

                FeasibilityOracle().check(board)

                self.assertEqual(board.capture(), before)
                self.assertEqual([cell.lit for cell in board.iter_cells()], lit_before)

    def test_unknown_counts_as_feasible(self) -> None:
        oracle = FeasibilityOracle(BoardSolver(SolverConfig(max_nodes=1)))
        self.assertTrue(oracle.is_feasible(Board.blank(3, 3)))
        self.assertEqual(oracle.calls, 1)

    def test_infeasible_position(self) -> None:
        self.assertFalse(FeasibilityOracle().is_feasible(Board.from_rows(["1*..*"])))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
