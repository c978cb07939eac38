"""
Feedback edge detection.

Finds the cycles in a diagram and picks, for each one, the edge the
renderer should draw as a loop instead of a straight connector. This has
no bearing on the compiled grammar; cyclic graphs simply produce recursive
rule references.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence

from gbnfgraph.core.graph import Edge, Node, Position

logger = logging.getLogger(__name__)


class FeedbackRanking(ABC):
    """
    Strategy for choosing the feedback edge of a cycle.

    Cycle detection only needs an ordering over candidate edges and a
    final yes/no on the winner, so layouts other than left-to-right can
    plug in their own notion of "backwards".
    """

    @abstractmethod
    def sort_key(self, edge: Edge, source: Position, target: Position) -> tuple:
        """Key for ``max``; the largest key wins."""
        ...

    @abstractmethod
    def is_backward(self, edge: Edge, source: Position, target: Position) -> bool:
        """Whether the winning edge should actually be flagged."""
        ...


class GeometricRanking(FeedbackRanking):
    """
    Prefer edges that point right-to-left, then long vertical edges, then
    bottom-to-top edges. Source id breaks any remaining tie.
    """

    @staticmethod
    def horizontal_score(source: Position, target: Position) -> float:
        dx = source.x - target.x
        if dx == 0:
            # Vertical edges count as backwards when they go bottom-to-top
            return 1 if source.y > target.y else -1
        return dx

    def sort_key(self, edge: Edge, source: Position, target: Position) -> tuple:
        return (
            self.horizontal_score(source, target),
            abs(source.y - target.y),
            source.y > target.y,
            edge.source,
        )

    def is_backward(self, edge: Edge, source: Position, target: Position) -> bool:
        if edge.is_self_loop:
            return True
        score = self.horizontal_score(source, target)
        return score > 0 or (score == 0 and source.y > target.y)


RANKINGS: dict[str, type[FeedbackRanking]] = {
    "geometric": GeometricRanking,
}


def get_ranking(name: str) -> FeedbackRanking:
    """
    Get a feedback ranking strategy by name.

    Raises:
        ValueError: If no ranking is registered under ``name``
    """
    if name not in RANKINGS:
        available = ", ".join(RANKINGS.keys())
        raise ValueError(f"Unknown ranking: {name}. Available: {available}")
    return RANKINGS[name]()


@dataclass
class FeedbackAnalysis:
    """Edges to draw as loops, keyed by ``Edge.key``."""
    feedback_edges: set[str] = field(default_factory=set)
    path_lengths: dict[str, int] = field(default_factory=dict)  # Length of the cycle each edge closes

    def is_feedback(self, edge: Edge) -> bool:
        return edge.key in self.feedback_edges

    def path_length(self, edge: Edge) -> int:
        return self.path_lengths.get(edge.key, 0)


class CycleAnalyzer:
    """
    Depth-first cycle finder.

    Walks from each unvisited node in input order keeping the current path.
    An edge into a node that is still on the path closes a cycle consisting
    of the path edges from that node onwards plus the closing edge.
    """

    def __init__(self, ranking: FeedbackRanking | None = None):
        self.ranking = ranking or GeometricRanking()

    def analyze(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> FeedbackAnalysis:
        positions = {node.id: node.position for node in nodes}
        outgoing: dict[str, list[Edge]] = {node.id: [] for node in nodes}
        for edge in edges:
            outgoing.setdefault(edge.source, []).append(edge)

        result = FeedbackAnalysis()
        visited: set[str] = set()

        for node in nodes:
            if node.id in visited:
                continue

            # Explicit stack: path[i] was entered through entered_by[i]
            path = [node.id]
            entered_by: list[Edge | None] = [None]
            on_path = {node.id: 0}
            pending = [iter(outgoing.get(node.id, []))]

            while pending:
                edge = next(pending[-1], None)
                if edge is None:
                    pending.pop()
                    entered_by.pop()
                    done = path.pop()
                    del on_path[done]
                    visited.add(done)
                    continue

                if edge.target in on_path:
                    start = on_path[edge.target]
                    cycle = entered_by[start + 1:] + [edge]
                    self._process_cycle(cycle, positions, result)
                elif edge.target not in visited:
                    on_path[edge.target] = len(path)
                    path.append(edge.target)
                    entered_by.append(edge)
                    pending.append(iter(outgoing.get(edge.target, [])))

        return result

    def _process_cycle(
        self,
        cycle: list[Edge],
        positions: dict[str, Position],
        result: FeedbackAnalysis,
    ):
        origin = Position()

        def key(edge: Edge) -> tuple:
            return self.ranking.sort_key(
                edge,
                positions.get(edge.source, origin),
                positions.get(edge.target, origin),
            )

        best = max(cycle, key=key)
        source = positions.get(best.source, origin)
        target = positions.get(best.target, origin)

        if self.ranking.is_backward(best, source, target):
            result.feedback_edges.add(best.key)
            result.path_lengths[best.key] = len(cycle)
            logger.debug(f"Feedback edge {best.key} closes a cycle of length {len(cycle)}")


def find_feedback_edges(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    ranking: FeedbackRanking | None = None,
) -> FeedbackAnalysis:
    """Find one feedback edge per cycle in the graph."""
    return CycleAnalyzer(ranking).analyze(nodes, edges)
