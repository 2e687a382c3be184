"""Conversion between ``Graph`` and networkx graphs."""
from __future__ import annotations

from typing import Hashable

import networkx as nx

from graph_metrics.graph.model import Directedness, Graph, GraphError


def to_networkx(graph: Graph) -> nx.Graph:
    """Build a networkx multigraph keyed by vertex ID.

    Undirected graphs become ``MultiGraph``; directed graphs ``MultiDiGraph``.
    Mixed graphs are not representable and raise ``GraphError``.
    """
    if graph.directedness is Directedness.MIXED:
        raise GraphError("Mixed graphs have no networkx equivalent")

    nx_graph = nx.MultiDiGraph() if graph.is_directed else nx.MultiGraph()
    for vertex in graph.iter_vertices():
        nx_graph.add_node(vertex.id, name=vertex.name, tag=vertex.tag)
    for edge in graph.iter_edges():
        nx_graph.add_edge(edge.vertex1.id, edge.vertex2.id, key=edge.id, tag=edge.tag)
    return nx_graph


def from_networkx(nx_graph: nx.Graph) -> Graph:
    """Copy a networkx graph; node keys become vertex names."""
    directedness = Directedness.DIRECTED if nx_graph.is_directed() else Directedness.UNDIRECTED
    graph = Graph(directedness)
    by_node: dict[Hashable, object] = {}
    for node, data in nx_graph.nodes(data=True):
        by_node[node] = graph.add_vertex(name=str(node), tag=data.get("tag", node))
    for u, v in nx_graph.edges():
        graph.add_edge(by_node[u], by_node[v])
    return graph
