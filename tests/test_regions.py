import unittest

from lightup.engine.board import Board
from lightup.engine.regions import couple_regions, decompose_regions, sort_regions_by_size


class RegionDecompositionTests(unittest.TestCase):
    def test_regions_partition_the_blanks(self) -> None:
        board = Board.from_rows(["..#..", "#####", "....."])
        regions = decompose_regions(board)

        self.assertEqual([region.cells for region in regions[:2]], [[(0, 0), (0, 1)], [(0, 3), (0, 4)]])
        self.assertEqual(len(regions[2]), 5)
        covered = sorted(cell for region in regions for cell in region.cells)
        self.assertEqual(covered, sorted(board.blank_positions()))

    def test_cells_in_depth_first_preorder(self) -> None:
        regions = decompose_regions(Board.from_rows(["..", ".."]))
        self.assertEqual(regions[0].cells, [(0, 0), (1, 0), (1, 1), (0, 1)])

    def test_sort_by_size_is_stable(self) -> None:
        board = Board.from_rows([".....", "#####", "..#.."])
        ordered = sort_regions_by_size(decompose_regions(board))
        self.assertEqual([region.id for region in ordered], [1, 2, 0])

    def test_numbered_wall_couples_regions(self) -> None:
        board = Board.from_rows(["...", "#1#", "..."])
        coupled = couple_regions(board, decompose_regions(board))
        self.assertEqual(len(coupled), 1)
        self.assertEqual([region.id for region in coupled[0]], [0, 1])

        plain = Board.from_rows(["...", "###", "..."])
        self.assertEqual(len(couple_regions(plain, decompose_regions(plain))), 2)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
