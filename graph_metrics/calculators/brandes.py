"""Betweenness and closeness centrality via Brandes' algorithm.

One breadth-first search per source vertex yields both metrics.  Scratch state
(distances, path counts, predecessor lists, dependencies) lives in flat lists
indexed by a dense 0..V-1 remapping of vertex IDs and is reallocated per
source.

Edge direction is ignored: every edge joins its two endpoints in both
directions.  Parallel edges collapse to a single neighbour, so they
neither create extra shortest paths nor change distances.  Self-loops are
ignored.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
    progress_interval,
)
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.graph.adjacency import build_dense_adjacency
from graph_metrics.graph.model import Directedness, Graph
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "betweenness and closeness centralities"

BETWEENNESS_COLUMN = "Betweenness Centrality"
CLOSENESS_COLUMN = "Closeness Centrality"


@dataclass(frozen=True)
class BrandesCentralities:
    """Per-vertex results keyed by vertex ID."""

    betweenness: Dict[int, float]
    closeness: Dict[int, float]
    max_unnormalized_betweenness: float


def compute_brandes_centralities(
    graph: Graph, context: Optional[CalculationContext] = None
) -> Optional[BrandesCentralities]:
    """Compute normalized betweenness and closeness for every vertex.

    Betweenness is halved unless the graph is directed (each unordered pair is
    seen from both endpoints) and then divided by its maximum, unless the maximum
    is 0.  Closeness is the number of vertices reachable from a vertex divided
    by the sum of their distances, or 0 when nothing is reachable.

    Returns None if cancelled.
    """
    adjacency = build_dense_adjacency(graph)
    neighbors = adjacency.neighbors
    n = adjacency.size

    betweenness = [0.0] * n
    closeness = [0.0] * n
    interval = progress_interval(context)

    for source in range(n):
        if source % interval == 0 and not checkpoint(context, DESCRIPTION, source, n):
            return None

        stack: List[int] = []
        predecessors: List[List[int]] = [[] for _ in range(n)]
        sigma = [0] * n
        distance = [-1] * n
        sigma[source] = 1
        distance[source] = 0

        queue = deque([source])
        while queue:
            v = queue.popleft()
            stack.append(v)
            next_distance = distance[v] + 1
            for w in neighbors[v]:
                if distance[w] < 0:
                    distance[w] = next_distance
                    queue.append(w)
                if distance[w] == next_distance:
                    sigma[w] += sigma[v]
                    predecessors[w].append(v)

        total_distance = sum(distance[v] for v in stack)
        if total_distance > 0:
            closeness[source] = (len(stack) - 1) / total_distance

        delta = [0.0] * n
        while stack:
            w = stack.pop()
            coefficient = (1.0 + delta[w]) / sigma[w]
            for v in predecessors[w]:
                delta[v] += sigma[v] * coefficient
            if w != source:
                betweenness[w] += delta[w]

    if graph.directedness is not Directedness.DIRECTED:
        betweenness = [value / 2.0 for value in betweenness]

    max_betweenness = max(betweenness, default=0.0)
    if max_betweenness > 0:
        betweenness = [value / max_betweenness for value in betweenness]
    else:
        logger.debug("Maximum betweenness is 0; skipping normalization")

    ids = [vertex.id for vertex in adjacency.vertices]
    return BrandesCentralities(
        betweenness=dict(zip(ids, betweenness)),
        closeness=dict(zip(ids, closeness)),
        max_unnormalized_betweenness=max_betweenness,
    )


class BrandesCentralityCalculator(GraphMetricCalculator):
    """Betweenness and closeness centrality columns."""

    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        want_betweenness = context.should_calculate(GraphMetrics.BETWEENNESS_CENTRALITY)
        want_closeness = context.should_calculate(GraphMetrics.CLOSENESS_CENTRALITY)
        if not (want_betweenness or want_closeness):
            return CalculationOutcome.success()

        centralities = compute_brandes_centralities(graph, context)
        if centralities is None:
            return CalculationOutcome.cancellation()

        columns = []
        if want_betweenness:
            columns.append(VertexMetricColumn(BETWEENNESS_COLUMN, centralities.betweenness))
        if want_closeness:
            columns.append(VertexMetricColumn(CLOSENESS_COLUMN, centralities.closeness))
        return CalculationOutcome.success(columns)
