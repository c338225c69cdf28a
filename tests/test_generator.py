import unittest
from unittest.mock import MagicMock, patch

from lightup.core.constants import KING_STEPS, SolveOutcome
from lightup.core.exceptions import GenerationExhaustedError
from lightup.engine.generator import GeneratorConfig, PuzzleGenerator
from lightup.engine.solver import solve_board


def small_config(**overrides) -> GeneratorConfig:
    values = dict(rows=5, cols=5, seed=5, wall_count_min=3, wall_count_max=5,
                  numbered_min=1, numbered_max=3, max_attempts=200)
    values.update(overrides)
    return GeneratorConfig(**values)


class PuzzleGeneratorTests(unittest.TestCase):
    def test_generated_board_is_solvable_and_clean(self) -> None:
        puzzle = PuzzleGenerator(small_config()).generate()
        board = puzzle.board

        self.assertEqual(board.bulb_positions(), [])
        self.assertFalse(any(cell.mark for cell in board.iter_cells()))
        self.assertGreaterEqual(puzzle.attempts, 1)
        self.assertEqual(solve_board(board.copy()), SolveOutcome.SOLVED)

    def test_layout_rules(self) -> None:
        board = PuzzleGenerator(small_config(seed=9)).generate().board
        for cell in board.iter_cells():
            if not cell.is_wall():
                continue
            for dr, dc in KING_STEPS:
                r, c = cell.row + dr, cell.col + dc
                if board.contains(r, c):
                    self.assertFalse(board.cell(r, c).is_wall())
            if cell.is_numbered():
                blanks = sum(1 for pos in board.neighbors(cell.row, cell.col) if board.cell(*pos).is_blank())
                self.assertLessEqual(cell.number, min(4, blanks))

    def test_same_seed_same_layout(self) -> None:
        first = PuzzleGenerator(small_config(seed=21)).generate().board
        second = PuzzleGenerator(small_config(seed=21)).generate().board
        self.assertEqual(first.to_rows(), second.to_rows())

    def test_gives_up_after_cap(self) -> None:
        oracle = MagicMock()
        oracle.check.return_value = SolveOutcome.UNSOLVABLE
        generator = PuzzleGenerator(small_config(max_attempts=3), oracle=oracle)

        with self.assertRaises(GenerationExhaustedError):
            generator.generate()
        self.assertEqual(oracle.check.call_count, 3)

    def test_zero_attempts(self) -> None:
        with self.assertRaises(GenerationExhaustedError):
            PuzzleGenerator(small_config(max_attempts=0)).generate()

    def test_uniqueness_filter(self) -> None:
        with patch("lightup.engine.generator.count_solutions", return_value=2) as counter:
            with self.assertRaises(GenerationExhaustedError):
                PuzzleGenerator(small_config(max_attempts=20, require_unique=True)).generate()
        self.assertGreaterEqual(counter.call_count, 1)

        with patch("lightup.engine.generator.count_solutions", return_value=1):
            puzzle = PuzzleGenerator(small_config(require_unique=True)).generate()
        self.assertEqual(puzzle.seed, 5)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
