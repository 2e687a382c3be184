"""Dense 0..V-1 adjacency views used as scratch arenas by the calculators."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
from scipy.sparse import csr_matrix

from graph_metrics.graph.model import Graph, Vertex


@dataclass
class DenseAdjacency:
    """Neighbour lists indexed by a dense remapping of vertex IDs.

    Lists are deduplicated and exclude self-loops.  ``follow_direction`` decides
    whether directed edges are traversed only from back to front vertex.
    """

    vertices: List[Vertex]
    index_of: Dict[int, int]
    neighbors: List[List[int]]
    follow_direction: bool

    @property
    def size(self) -> int:
        return len(self.vertices)

    def to_sparse(self, transpose: bool = False) -> csr_matrix:
        """0/1 adjacency matrix, ``A[i, j] == 1`` when j is a neighbour of i."""
        n = len(self.vertices)
        rows = [i for i, targets in enumerate(self.neighbors) for _ in targets]
        cols = [j for targets in self.neighbors for j in targets]
        if transpose:
            rows, cols = cols, rows
        data = np.ones(len(rows), dtype=np.float64)
        return csr_matrix((data, (rows, cols)), shape=(n, n))


def build_dense_adjacency(graph: Graph, follow_direction: bool = False) -> DenseAdjacency:
    vertices = graph.vertices
    index_of = {vertex.id: i for i, vertex in enumerate(vertices)}
    neighbor_sets: List[Dict[int, None]] = [dict() for _ in vertices]

    for edge in graph.iter_edges():
        if edge.is_self_loop:
            continue
        i = index_of[edge.vertex1.id]
        j = index_of[edge.vertex2.id]
        neighbor_sets[i][j] = None
        if not (follow_direction and edge.is_directed):
            neighbor_sets[j][i] = None

    return DenseAdjacency(
        vertices=vertices,
        index_of=index_of,
        neighbors=[list(targets) for targets in neighbor_sets],
        follow_direction=follow_direction,
    )
