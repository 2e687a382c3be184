"""Eigenvector centrality by power iteration."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

import numpy as np

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    GraphMetricError,
    checkpoint,
)
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.config import CalculationSettings
from graph_metrics.graph.adjacency import build_dense_adjacency
from graph_metrics.graph.model import Graph
from graph_metrics.performance_profiler import profile_phase
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "eigenvector centralities"

EIGENVECTOR_CENTRALITY_COLUMN = "Eigenvector Centrality"


def compute_eigenvector_centrality(
    graph: Graph,
    context: Optional[CalculationContext] = None,
    max_iter: Optional[int] = None,
    tol: Optional[float] = None,
    initial: Optional[Mapping[int, float]] = None,
) -> Optional[Dict[int, float]]:
    """Eigenvector centrality of every vertex, treating edges as undirected.

    Iterates ``x <- (A + I) x`` and rescales to unit Euclidean norm.  The
    identity shift keeps bipartite graphs from oscillating without changing
    the dominant eigenvector.  Stops once the L1 change drops below
    ``V * tol`` or after ``max_iter`` iterations, in which case the last
    vector is returned with a warning.

    ``initial`` maps vertex IDs to starting scores (default uniform 1/V); it
    is rescaled to sum 1, so any positive multiple gives the same result.

    Returns None if cancelled.
    """
    settings = context.calculation_settings if context else CalculationSettings()
    max_iter = settings.eigenvector_max_iter if max_iter is None else max_iter
    tol = settings.eigenvector_tolerance if tol is None else tol

    adjacency = build_dense_adjacency(graph)
    n = adjacency.size
    if n == 0:
        return {}

    ids = [vertex.id for vertex in adjacency.vertices]
    if initial is None:
        x = np.full(n, 1.0 / n)
    else:
        x = np.array([float(initial.get(vertex_id, 0.0)) for vertex_id in ids])
        total = x.sum()
        if total <= 0 or (x < 0).any():
            raise GraphMetricError("Initial eigenvector scores must be non-negative with a positive sum")
        x = x / total

    matrix = adjacency.to_sparse()

    with profile_phase("eigenvector_power_iteration", metadata={"vertices": n}):
        for iteration in range(max_iter):
            if not checkpoint(context, DESCRIPTION, iteration, max_iter):
                return None

            previous = x
            x = matrix @ previous + previous
            x = x / np.linalg.norm(x)

            if np.abs(x - previous).sum() < n * tol:
                logger.debug("Eigenvector centrality converged after %d iterations", iteration + 1)
                break
        else:
            logger.warning(
                "Eigenvector centrality did not converge within %d iterations; using last estimate",
                max_iter,
            )

    return dict(zip(ids, x.tolist()))


class EigenvectorCentralityCalculator(GraphMetricCalculator):
    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.EIGENVECTOR_CENTRALITY):
            return CalculationOutcome.success()

        centrality = compute_eigenvector_centrality(graph, context)
        if centrality is None:
            return CalculationOutcome.cancellation()

        return CalculationOutcome.success([VertexMetricColumn(EIGENVECTOR_CENTRALITY_COLUMN, centrality)])
