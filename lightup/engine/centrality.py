"""Shortest-path-count centrality used for deterministic tie-breaking."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, TypeVar

from ..utils.logger import get_logger
from .graph import VisibilityGraph


LOGGER = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CentralityRanking:
    scores: List[float]
    order: List[int]
    ranks: Dict[int, int]

    def score(self, node_id: int) -> float:
        return self.scores[node_id]

    def rank(self, node_id: int) -> int:
        return self.ranks[node_id]


def merge_sort(items: Sequence[T], key: Callable[[T], float]) -> List[T]:
    """Stable top-down merge sort; on equal keys the left element goes first."""

    if len(items) <= 1:
        return list(items)
    mid = len(items) // 2
    left = merge_sort(items[:mid], key)
    right = merge_sort(items[mid:], key)

    merged: List[T] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if key(left[i]) <= key(right[j]):
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


def path_count_scores(graph: VisibilityGraph) -> List[float]:
    """Sum, over every BFS source, of the shortest-path counts reaching each other node.

    This is raw path multiplicity, not normalised betweenness; it only feeds
    tie-breaks, so the exact formula is kept for reproducible rankings.
    """

    size = len(graph)
    scores = [0.0] * size
    for source in range(size):
        distance = [-1] * size
        paths = [0] * size
        distance[source] = 0
        paths[source] = 1
        queue = deque([source])
        while queue:
            current = queue.popleft()
            for neighbor in graph.neighbors(current):
                if distance[neighbor] == -1:
                    distance[neighbor] = distance[current] + 1
                    paths[neighbor] = paths[current]
                    queue.append(neighbor)
                elif distance[neighbor] == distance[current] + 1:
                    paths[neighbor] += paths[current]
        for node_id in range(size):
            if node_id != source:
                scores[node_id] += paths[node_id]
    return scores


def compute_centrality(graph: VisibilityGraph) -> CentralityRanking:
    scores = path_count_scores(graph)
    order = merge_sort(list(range(len(graph))), key=lambda node_id: scores[node_id])
    ranks = {node_id: position for position, node_id in enumerate(order)}
    LOGGER.debug("Centrality computed for %d nodes", len(order))
    return CentralityRanking(scores=scores, order=order, ranks=ranks)
