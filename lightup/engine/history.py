"""Undo/redo stacks of full board snapshots."""

from __future__ import annotations

from typing import List, Optional

from ..core.models import BoardSnapshot
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


class History:
    """Two snapshot stacks. The undo stack always keeps its baseline entry.

    The undo stack holds the state captured just before each committed
    action, on top of the baseline. Undo hands back the most recent of
    those (and parks the current state on the redo stack); redo does the
    reverse. Snapshots are frozen, so entries never change once captured.
    """

    def __init__(self, baseline: BoardSnapshot) -> None:
        self._undo: List[BoardSnapshot] = [baseline]
        self._redo: List[BoardSnapshot] = []

    def reset(self, baseline: BoardSnapshot) -> None:
        self._undo = [baseline]
        self._redo = []

    @property
    def baseline(self) -> BoardSnapshot:
        return self._undo[0]

    @property
    def depth(self) -> int:
        """Number of committed actions that can be undone."""
        return len(self._undo) - 1

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def can_undo(self) -> bool:
        return len(self._undo) > 1

    def can_redo(self) -> bool:
        return bool(self._redo)

    def commit(self, before: BoardSnapshot) -> None:
        """Record the state preceding a new forward action."""

        self._undo.append(before)
        if self._redo:
            LOGGER.debug("Dropping %d redo entries", len(self._redo))
        self._redo.clear()

    def undo(self, current: BoardSnapshot) -> Optional[BoardSnapshot]:
        if not self.can_undo():
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: BoardSnapshot) -> Optional[BoardSnapshot]:
        if not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()
