"""Local clustering coefficient."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
    progress_interval,
)
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.graph.model import Directedness, Graph, Vertex
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "clustering coefficients"

CLUSTERING_COEFFICIENT_COLUMN = "Clustering Coefficient"

# Reported for vertices with fewer than two neighbours.
UNDEFINED_CLUSTERING_COEFFICIENT = 0.0


def edges_in_complete_neighborhood(neighbor_count: int, directed: bool) -> int:
    """Number of edges among ``neighbor_count`` vertices if all were connected."""
    possible = neighbor_count * (neighbor_count - 1)
    return possible if directed else possible // 2


def vertex_clustering_coefficient(vertex: Vertex, directed: bool) -> float:
    """Edges among a vertex's neighbours over the number that could exist.

    Neighbours exclude the vertex itself.  Edges are counted by identity, so
    parallel edges each count and can push the value above 1.
    """
    own_id = vertex.id
    neighbor_ids = {other.id for other in vertex.adjacent_vertices if other.id != own_id}

    denominator = edges_in_complete_neighborhood(len(neighbor_ids), directed)
    if denominator == 0:
        return UNDEFINED_CLUSTERING_COEFFICIENT

    edge_ids = set()
    for neighbor in vertex.adjacent_vertices:
        if neighbor.id == own_id:
            continue
        for edge in neighbor.incident_edges:
            if edge.is_self_loop:
                continue
            if edge.get_adjacent_vertex(neighbor).id in neighbor_ids:
                edge_ids.add(edge.id)

    return len(edge_ids) / denominator


def compute_clustering_coefficients(
    graph: Graph, context: Optional[CalculationContext] = None
) -> Optional[Dict[int, float]]:
    """Clustering coefficient of every vertex, or None if cancelled.

    Undirected graphs use k(k-1)/2 possible neighbourhood edges; directed and
    mixed graphs use k(k-1), since a pair of neighbours can be joined in both
    directions.
    """
    directed = graph.directedness is not Directedness.UNDIRECTED
    interval = progress_interval(context)
    total = graph.vertex_count

    coefficients: Dict[int, float] = {}
    for processed, vertex in enumerate(graph.iter_vertices()):
        if processed % interval == 0 and not checkpoint(context, DESCRIPTION, processed, total):
            return None
        coefficients[vertex.id] = vertex_clustering_coefficient(vertex, directed)
    return coefficients


class ClusteringCoefficientCalculator(GraphMetricCalculator):
    """Clustering coefficient column, flagged suspect when edges are duplicated."""

    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.CLUSTERING_COEFFICIENT):
            return CalculationOutcome.success()

        coefficients = compute_clustering_coefficients(graph, context)
        if coefficients is None:
            return CalculationOutcome.cancellation()

        suspect = context.graph_contains_duplicate_edges
        if suspect:
            logger.warning("Graph has duplicate edges; clustering coefficients are unreliable")

        return CalculationOutcome.success([
            VertexMetricColumn(CLUSTERING_COEFFICIENT_COLUMN, coefficients, suspect=suspect)
        ])
