"""Duplicate (parallel) edge detection."""
from __future__ import annotations

import logging
from typing import Dict, Tuple

from graph_metrics.graph.model import Edge, Graph

logger = logging.getLogger(__name__)


def edge_key(edge: Edge) -> Tuple[bool, int, int]:
    """Key that is equal for two edges connecting the same vertices.

    Directed edges keep their orientation; undirected edges use the unordered
    vertex-ID pair.
    """
    id1, id2 = edge.vertex1.id, edge.vertex2.id
    if edge.is_directed:
        return (True, id1, id2)
    return (False, min(id1, id2), max(id1, id2))


class DuplicateEdgeDetector:
    """Counts unique and duplicated edges of a graph.

    Counting happens once, lazily, on first access.  The detector is read-only
    afterwards and can be shared across calculators.
    """

    def __init__(self, graph: Graph):
        self._graph = graph
        self._counted = False
        self._unique_edges = 0
        self._edges_with_duplicates = 0
        self._merged_edges_no_self_loops = 0

    @property
    def graph_contains_duplicate_edges(self) -> bool:
        self._count_edges()
        return self._edges_with_duplicates > 0

    @property
    def unique_edges(self) -> int:
        """Edges that have no parallel twin."""
        self._count_edges()
        return self._unique_edges

    @property
    def edges_with_duplicates(self) -> int:
        """Edges that have at least one parallel twin, every copy counted."""
        self._count_edges()
        return self._edges_with_duplicates

    @property
    def total_edges_after_merging_duplicates_no_self_loops(self) -> int:
        self._count_edges()
        return self._merged_edges_no_self_loops

    def _count_edges(self) -> None:
        if self._counted:
            return

        has_duplicate: Dict[Tuple[bool, int, int], bool] = {}
        unique = 0
        with_duplicates = 0

        for edge in self._graph.iter_edges():
            key = edge_key(edge)
            seen_twin = has_duplicate.get(key)
            if seen_twin is None:
                unique += 1
                has_duplicate[key] = False
                continue
            if not seen_twin:
                # The first copy moves from "unique" to "with duplicates".
                unique -= 1
                with_duplicates += 1
                has_duplicate[key] = True
            with_duplicates += 1

        self._unique_edges = unique
        self._edges_with_duplicates = with_duplicates
        self._merged_edges_no_self_loops = sum(1 for _, id1, id2 in has_duplicate if id1 != id2)
        self._counted = True

        if with_duplicates:
            logger.debug(
                "Graph has %d edges with duplicates (%d unique)", with_duplicates, unique
            )
