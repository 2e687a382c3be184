"""Connected and strongly connected components.

Both partitions come from networkx over a directed view of the graph in which
a directed edge is one arc and an undirected edge is a pair of opposite arcs,
so mixed graphs are handled like any other.  Connected components are the
weakly connected components of that view.  Both are linear in the size of
the graph and run to completion without cancellation checks.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, List, Set

import networkx as nx

from graph_metrics.calculators.base import CalculationContext, CalculationOutcome, GraphMetricCalculator
from graph_metrics.calculators.columns import VertexMetricColumn
from graph_metrics.graph.model import Graph, Vertex
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

CONNECTED_COMPONENT_COLUMN = "Connected Component"
STRONGLY_CONNECTED_COMPONENT_COLUMN = "Strongly Connected Component"


class ComponentSortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


def sort_components(components: List[List[Vertex]], sort_order: ComponentSortOrder) -> List[List[Vertex]]:
    """Order by size, then by smallest vertex ID."""
    sign = -1 if ComponentSortOrder(sort_order) is ComponentSortOrder.DESCENDING else 1
    return sorted(
        components,
        key=lambda component: (sign * len(component), min(vertex.id for vertex in component)),
    )


def _arc_digraph(graph: Graph) -> nx.DiGraph:
    """Vertex-ID digraph with both arcs for every undirected edge."""
    digraph = nx.DiGraph()
    digraph.add_nodes_from(vertex.id for vertex in graph.iter_vertices())
    for edge in graph.iter_edges():
        digraph.add_edge(edge.vertex1.id, edge.vertex2.id)
        if not edge.is_directed:
            digraph.add_edge(edge.vertex2.id, edge.vertex1.id)
    return digraph


def _as_vertices(graph: Graph, id_sets: Iterable[Set[int]]) -> List[List[Vertex]]:
    return [[graph.get_vertex(vertex_id) for vertex_id in sorted(ids)] for ids in id_sets]


def compute_connected_components(
    graph: Graph, sort_order: ComponentSortOrder = ComponentSortOrder.DESCENDING
) -> List[List[Vertex]]:
    """Partition vertices by reachability, ignoring edge direction.

    Every vertex appears in exactly one component; an isolated vertex is a
    component of its own.
    """
    components = _as_vertices(graph, nx.weakly_connected_components(_arc_digraph(graph)))
    return sort_components(components, sort_order)


def compute_strongly_connected_components(
    graph: Graph, sort_order: ComponentSortOrder = ComponentSortOrder.DESCENDING
) -> List[List[Vertex]]:
    """Strongly connected components, following edge direction.

    Undirected edges can be traversed both ways, so for an undirected graph
    the result equals ``compute_connected_components``.
    """
    components = _as_vertices(graph, nx.strongly_connected_components(_arc_digraph(graph)))
    return sort_components(components, sort_order)


def component_numbers(components: List[List[Vertex]]) -> Dict[int, int]:
    """Map each vertex ID to the 1-based position of its component."""
    return {
        vertex.id: number
        for number, component in enumerate(components, start=1)
        for vertex in component
    }


class ConnectedComponentCalculator(GraphMetricCalculator):
    """Component membership columns, largest component first."""

    description = "connected components"

    def __init__(self, sort_order: ComponentSortOrder = ComponentSortOrder.DESCENDING):
        self.sort_order = ComponentSortOrder(sort_order)

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.CONNECTED_COMPONENTS):
            return CalculationOutcome.success()

        connected = compute_connected_components(graph, self.sort_order)
        strong = compute_strongly_connected_components(graph, self.sort_order)
        logger.debug(
            "Found %d connected and %d strongly connected components", len(connected), len(strong)
        )
        return CalculationOutcome.success([
            VertexMetricColumn(CONNECTED_COMPONENT_COLUMN, component_numbers(connected)),
            VertexMetricColumn(STRONGLY_CONNECTED_COMPONENT_COLUMN, component_numbers(strong)),
        ])
