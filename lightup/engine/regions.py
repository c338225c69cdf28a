"""Partition of the blank cells into independently solvable regions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ..core.constants import ORTHOGONAL_STEPS
from ..core.models import Position
from ..utils.logger import get_logger
from .board import Board
from .centrality import merge_sort


LOGGER = get_logger(__name__)


@dataclass
class Region:
    id: int
    cells: List[Position] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, position: object) -> bool:
        return position in self.cells


def decompose_regions(board: Board) -> List[Region]:
    """Flood-fill 4-adjacent blanks into components, in row-major discovery order.

    Within a component cells are listed in depth-first preorder with the
    neighbour order down, up, right, left.
    """

    visited = [[False] * board.cols for _ in range(board.rows)]
    regions: List[Region] = []
    for r, c in board.blank_positions():
        if visited[r][c]:
            continue
        region = Region(id=len(regions))
        stack = [(r, c)]
        while stack:
            cr, cc = stack.pop()
            if visited[cr][cc]:
                continue
            visited[cr][cc] = True
            region.cells.append((cr, cc))
            for dr, dc in reversed(ORTHOGONAL_STEPS):
                nr, nc = cr + dr, cc + dc
                if board.contains(nr, nc) and not visited[nr][nc] and board.cell(nr, nc).is_blank():
                    stack.append((nr, nc))
        regions.append(region)
    LOGGER.debug("Decomposed board into %d regions", len(regions))
    return regions


def sort_regions_by_size(regions: List[Region]) -> List[Region]:
    return merge_sort(regions, key=len)


def couple_regions(board: Board, regions: List[Region]) -> List[List[Region]]:
    """Group regions that border the same numbered wall.

    Light never crosses a wall, but a numbered wall can touch blanks of two
    regions; its count then ties those regions together. Groups keep the
    order of their first member in ``regions``.
    """

    owner: Dict[Position, int] = {}
    for position, region in enumerate(regions):
        for cell in region.cells:
            owner[cell] = position

    parent = list(range(len(regions)))

    def find(item: int) -> int:
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    for r, c in board.numbered_positions():
        touching = sorted({owner[pos] for pos in board.neighbors(r, c) if pos in owner})
        for other in touching[1:]:
            root_a, root_b = find(touching[0]), find(other)
            if root_a != root_b:
                parent[max(root_a, root_b)] = min(root_a, root_b)

    groups: Dict[int, List[Region]] = {}
    for position, region in enumerate(regions):
        groups.setdefault(find(position), []).append(region)
    return list(groups.values())
