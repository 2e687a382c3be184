"""PageRank by power iteration over a sparse transition matrix."""
from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np
import scipy.sparse as sp

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
)
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.config import CalculationSettings
from graph_metrics.graph.adjacency import build_dense_adjacency
from graph_metrics.graph.model import Graph
from graph_metrics.performance_profiler import profile_phase
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "PageRanks"

PAGERANK_COLUMN = "PageRank"


def compute_pagerank(
    graph: Graph,
    context: Optional[CalculationContext] = None,
    alpha: Optional[float] = None,
    max_iter: Optional[int] = None,
    tol: Optional[float] = None,
) -> Optional[Dict[int, float]]:
    """PageRank of every vertex; values sum to 1.

    Directed edges are followed from back to front vertex, undirected edges
    both ways.  Parallel edges count once and self-loops are ignored.  The
    rank held by vertices without outgoing edges is spread uniformly over all
    vertices on each iteration.

    Returns None if cancelled.
    """
    settings = context.calculation_settings if context else CalculationSettings()
    alpha = settings.pagerank_alpha if alpha is None else alpha
    max_iter = settings.pagerank_max_iter if max_iter is None else max_iter
    tol = settings.pagerank_tolerance if tol is None else tol

    adjacency = build_dense_adjacency(graph, follow_direction=True)
    n = adjacency.size
    if n == 0:
        return {}

    matrix = adjacency.to_sparse()
    out_degree = np.asarray(matrix.sum(axis=1)).ravel()
    inverse = np.zeros(n)
    nonzero = out_degree != 0
    inverse[nonzero] = 1.0 / out_degree[nonzero]
    transition = sp.diags(inverse) @ matrix

    x = np.full(n, 1.0 / n)
    teleport = np.full(n, 1.0 / n)
    dangling = np.where(~nonzero)[0]

    with profile_phase("pagerank_power_iteration", metadata={"vertices": n, "alpha": alpha}):
        for iteration in range(max_iter):
            if not checkpoint(context, DESCRIPTION, iteration, max_iter):
                return None

            previous = x
            x = alpha * (transition.T @ previous + previous[dangling].sum() * teleport) + (1 - alpha) * teleport

            if np.abs(x - previous).sum() < n * tol:
                logger.debug("PageRank converged after %d iterations", iteration + 1)
                break
        else:
            logger.warning("PageRank did not converge within %d iterations; using last estimate", max_iter)

    ids = [vertex.id for vertex in adjacency.vertices]
    return dict(zip(ids, x.tolist()))


class PageRankCalculator(GraphMetricCalculator):
    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.PAGERANK):
            return CalculationOutcome.success()

        ranks = compute_pagerank(graph, context)
        if ranks is None:
            return CalculationOutcome.cancellation()

        return CalculationOutcome.success([VertexMetricColumn(PAGERANK_COLUMN, ranks)])
