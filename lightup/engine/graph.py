"""Line-of-sight graph over the blank cells of a board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.constants import ORTHOGONAL_STEPS
from ..core.models import Position
from ..utils.logger import get_logger
from .board import Board


LOGGER = get_logger(__name__)


@dataclass
class GraphNode:
    id: int
    row: int
    col: int
    neighbors: List[int] = field(default_factory=list)

    @property
    def degree(self) -> int:
        return len(self.neighbors)

    @property
    def position(self) -> Position:
        return (self.row, self.col)


@dataclass
class VisibilityGraph:
    """Arena of nodes indexed by id; neighbour lists hold ids, never nodes."""

    nodes: List[GraphNode]
    index: Dict[Position, int]
    wall_signature: Tuple = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def node_at(self, row: int, col: int) -> Optional[GraphNode]:
        node_id = self.index.get((row, col))
        return None if node_id is None else self.nodes[node_id]

    def neighbors(self, node_id: int) -> List[int]:
        return self.nodes[node_id].neighbors

    def degree(self, node_id: int) -> int:
        return self.nodes[node_id].degree

    def edge_count(self) -> int:
        return sum(node.degree for node in self.nodes) // 2

    def is_current(self, board: Board) -> bool:
        """True while the board's wall layout is the one this graph was built from."""
        return self.wall_signature == board.wall_signature()


def build_visibility_graph(board: Board) -> VisibilityGraph:
    """Link every blank to the first blank seen in each direction."""

    nodes: List[GraphNode] = []
    index: Dict[Position, int] = {}
    for r, c in board.blank_positions():
        index[(r, c)] = len(nodes)
        nodes.append(GraphNode(id=len(nodes), row=r, col=c))

    for node in nodes:
        for step in ORTHOGONAL_STEPS:
            first = next(board.ray(node.row, node.col, step), None)
            if first is None:
                continue
            neighbor_id = index[first]
            if neighbor_id != node.id and neighbor_id not in node.neighbors:
                node.neighbors.append(neighbor_id)
    for node in nodes:
        node.neighbors.sort()

    graph = VisibilityGraph(nodes=nodes, index=index, wall_signature=board.wall_signature())
    LOGGER.debug("Built visibility graph: %d nodes, %d edges", len(graph), graph.edge_count())
    return graph
