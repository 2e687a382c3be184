"""Whole-graph aggregates: counts, components, geodesics, density."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
    progress_interval,
)
from graph_metrics.calculators.columns import GraphMetricValue, OrderedMetricColumn
from graph_metrics.calculators.components import compute_connected_components
from graph_metrics.graph.adjacency import build_dense_adjacency
from graph_metrics.graph.duplicates import DuplicateEdgeDetector
from graph_metrics.graph.model import Directedness, Graph
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "overall metrics"

OVERALL_METRICS_COLUMN = "Overall Metrics"


@dataclass(frozen=True)
class OverallMetrics:
    """Aggregates for one graph.  None means "not applicable"."""

    directedness: Directedness
    vertices: int
    unique_edges: int
    edges_with_duplicates: int
    total_edges: int
    self_loops: int
    connected_components: int
    single_vertex_connected_components: int
    max_connected_component_vertices: int
    max_connected_component_edges: int
    maximum_geodesic_distance: Optional[int]
    average_geodesic_distance: Optional[float]
    graph_density: Optional[float]
    density_suspect: bool = False

    def as_rows(self) -> List[Tuple[str, Any]]:
        """(label, value) pairs in display order."""
        return [
            ("Graph Type", self.directedness.value.capitalize()),
            ("Vertices", self.vertices),
            ("Unique Edges", self.unique_edges),
            ("Edges With Duplicates", self.edges_with_duplicates),
            ("Total Edges", self.total_edges),
            ("Self-Loops", self.self_loops),
            ("Connected Components", self.connected_components),
            ("Single-Vertex Connected Components", self.single_vertex_connected_components),
            ("Maximum Vertices in a Connected Component", self.max_connected_component_vertices),
            ("Maximum Edges in a Connected Component", self.max_connected_component_edges),
            ("Maximum Geodesic Distance (Diameter)", self.maximum_geodesic_distance),
            ("Average Geodesic Distance", self.average_geodesic_distance),
            ("Graph Density", self.graph_density),
        ]


def calculate_graph_density(graph: Graph, self_loops: Optional[int] = None) -> Optional[float]:
    """Edge density, ignoring self-loops; None for fewer than two vertices.

    ``2E / (V(V-1))`` for undirected and mixed graphs, half that for directed
    graphs.  Parallel edges are counted, so the value can exceed 1.
    """
    vertices = graph.vertex_count
    if vertices <= 1:
        return None

    if self_loops is None:
        self_loops = sum(1 for edge in graph.iter_edges() if edge.is_self_loop)
    non_self_loop_edges = graph.edge_count - self_loops

    density = (2.0 * non_self_loop_edges) / (vertices * (vertices - 1))
    if graph.directedness is Directedness.DIRECTED:
        density /= 2.0

    # Absorb rounding below zero.
    return max(density, 0.0)


def calculate_geodesic_distances(
    graph: Graph, context: Optional[CalculationContext] = None
) -> Optional[Tuple[Optional[int], Optional[float]]]:
    """(maximum, average) shortest-path length over connected ordered pairs.

    Directed edges are followed from back to front vertex.  Both values are
    None when no two distinct vertices are connected.  Returns None if
    cancelled.
    """
    adjacency = build_dense_adjacency(graph, follow_direction=True)
    n = adjacency.size
    interval = progress_interval(context)

    maximum = 0
    total = 0
    pairs = 0
    for source in range(n):
        if source % interval == 0 and not checkpoint(context, DESCRIPTION, source, n):
            return None

        distance = {source: 0}
        queue = deque([source])
        while queue:
            v = queue.popleft()
            for w in adjacency.neighbors[v]:
                if w not in distance:
                    distance[w] = distance[v] + 1
                    queue.append(w)

        reached = len(distance) - 1
        if reached:
            pairs += reached
            total += sum(distance.values())
            maximum = max(maximum, max(distance.values()))

    if pairs == 0:
        return None, None
    return maximum, total / pairs


def compute_overall_metrics(
    graph: Graph,
    context: Optional[CalculationContext] = None,
    duplicate_edge_detector: Optional[DuplicateEdgeDetector] = None,
) -> Optional[OverallMetrics]:
    """Aggregate metrics for ``graph``, or None if cancelled."""
    detector = duplicate_edge_detector or DuplicateEdgeDetector(graph)
    self_loops = sum(1 for edge in graph.iter_edges() if edge.is_self_loop)

    components = compute_connected_components(graph)
    component_of = {vertex.id: index for index, component in enumerate(components) for vertex in component}
    component_edges = [0] * len(components)
    for edge in graph.iter_edges():
        component_edges[component_of[edge.vertex1.id]] += 1

    geodesics = calculate_geodesic_distances(graph, context)
    if geodesics is None:
        return None
    maximum_geodesic, average_geodesic = geodesics

    density = calculate_graph_density(graph, self_loops)
    suspect = detector.graph_contains_duplicate_edges and density is not None

    return OverallMetrics(
        directedness=graph.directedness,
        vertices=graph.vertex_count,
        unique_edges=detector.unique_edges,
        edges_with_duplicates=detector.edges_with_duplicates,
        total_edges=graph.edge_count,
        self_loops=self_loops,
        connected_components=len(components),
        single_vertex_connected_components=sum(1 for component in components if len(component) == 1),
        max_connected_component_vertices=max((len(component) for component in components), default=0),
        max_connected_component_edges=max(component_edges, default=0),
        maximum_geodesic_distance=maximum_geodesic,
        average_geodesic_distance=average_geodesic,
        graph_density=density,
        density_suspect=suspect,
    )


class OverallMetricCalculator(GraphMetricCalculator):
    """One row per aggregate, tagged with its label."""

    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.OVERALL_METRICS):
            return CalculationOutcome.success()

        metrics = compute_overall_metrics(graph, context, context.duplicate_edge_detector)
        if metrics is None:
            return CalculationOutcome.cancellation()

        if metrics.density_suspect:
            logger.warning("Graph has duplicate edges; graph density is unreliable")

        return CalculationOutcome.success([
            OrderedMetricColumn(
                OVERALL_METRICS_COLUMN,
                [GraphMetricValue(value, row_id=label) for label, value in metrics.as_rows()],
                suspect=metrics.density_suspect,
            )
        ])
