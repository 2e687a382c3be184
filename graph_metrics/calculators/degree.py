"""In-degree, out-degree and degree of every vertex."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
    progress_interval,
)
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.graph.model import Graph
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "vertex degrees"

IN_DEGREE_COLUMN = "In-Degree"
OUT_DEGREE_COLUMN = "Out-Degree"
DEGREE_COLUMN = "Degree"


@dataclass(frozen=True)
class VertexDegrees:
    in_degree: int = 0
    out_degree: int = 0
    degree: int = 0


def compute_vertex_degrees(
    graph: Graph, context: Optional[CalculationContext] = None
) -> Optional[Dict[int, VertexDegrees]]:
    """Count degrees in one pass over the edges.

    A directed edge adds one to its back vertex's out-degree and its front
    vertex's in-degree.  An undirected edge adds one to both counters of both
    endpoints.  A self-loop adds one to in- and out-degree and two to degree.

    Returns None if cancelled.
    """
    in_degree: Dict[int, int] = {vertex.id: 0 for vertex in graph.iter_vertices()}
    out_degree = dict(in_degree)
    degree = dict(in_degree)

    interval = progress_interval(context)
    total = graph.edge_count

    for processed, edge in enumerate(graph.iter_edges()):
        if processed % interval == 0 and not checkpoint(context, DESCRIPTION, processed, total):
            return None

        id1, id2 = edge.vertex1.id, edge.vertex2.id
        degree[id1] += 1
        degree[id2] += 1

        if edge.is_self_loop:
            in_degree[id1] += 1
            out_degree[id1] += 1
        elif edge.is_directed:
            out_degree[id1] += 1
            in_degree[id2] += 1
        else:
            for vertex_id in (id1, id2):
                in_degree[vertex_id] += 1
                out_degree[vertex_id] += 1

    return {
        vertex_id: VertexDegrees(in_degree[vertex_id], out_degree[vertex_id], degree[vertex_id])
        for vertex_id in degree
    }


class VertexDegreeCalculator(GraphMetricCalculator):
    """Produces all three degree columns; the orchestrator drops the unwanted ones."""

    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.IN_DEGREE | GraphMetrics.OUT_DEGREE | GraphMetrics.DEGREE):
            return CalculationOutcome.success()

        degrees = compute_vertex_degrees(graph, context)
        if degrees is None:
            return CalculationOutcome.cancellation()

        logger.debug("Counted degrees of %d vertices", len(degrees))
        return CalculationOutcome.success([
            VertexMetricColumn(IN_DEGREE_COLUMN, {vid: d.in_degree for vid, d in degrees.items()}),
            VertexMetricColumn(OUT_DEGREE_COLUMN, {vid: d.out_degree for vid, d in degrees.items()}),
            VertexMetricColumn(DEGREE_COLUMN, {vid: d.degree for vid, d in degrees.items()}),
        ])
