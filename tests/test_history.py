import unittest

from lightup.core.models import BoardSnapshot
from lightup.engine.board import Board
from lightup.engine.history import History


def snapshot_of(layout, **flags) -> BoardSnapshot:
    bulbs, marks = Board.from_rows(layout).capture()
    return BoardSnapshot(bulbs=bulbs, marks=marks, **flags)


class HistoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.baseline = snapshot_of(["..."])
        self.history = History(self.baseline)

    def test_baseline_is_never_popped(self) -> None:
        self.assertFalse(self.history.can_undo())
        self.assertIsNone(self.history.undo(self.baseline))
        self.assertEqual(self.history.baseline, self.baseline)
        self.assertEqual(self.history.depth, 0)

    def test_undo_then_redo_round_trip(self) -> None:
        states = [
            self.baseline,
            snapshot_of(["*.."], human_turn=False, human_contributed=True),
            snapshot_of(["*.x"], human_contributed=True, engine_contributed=True, last_engine_move=(0, 2)),
        ]
        for before in states[:-1]:
            self.history.commit(before)
        current = states[-1]
        self.assertEqual(self.history.depth, 2)

        for expected in reversed(states[:-1]):
            current = self.history.undo(current)
            self.assertEqual(current, expected)
        self.assertFalse(self.history.can_undo())
        self.assertEqual(self.history.redo_depth, 2)

        for expected in states[1:]:
            current = self.history.redo(current)
            self.assertEqual(current, expected)
        self.assertIsNone(self.history.redo(current))

    def test_commit_clears_redo(self) -> None:
        moved = snapshot_of(["*.."])
        self.history.commit(self.baseline)
        self.history.undo(moved)
        self.assertTrue(self.history.can_redo())

        self.history.commit(self.baseline)
        self.assertFalse(self.history.can_redo())

    def test_reset(self) -> None:
        self.history.commit(self.baseline)
        fresh = snapshot_of(["x.."])
        self.history.reset(fresh)
        self.assertEqual(self.history.depth, 0)
        self.assertEqual(self.history.baseline, fresh)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
