"""Induced subgraph construction."""
from __future__ import annotations

from typing import Collection, Dict, Optional

from graph_metrics.graph.model import Graph, GraphError, Vertex


def get_subgraph_as_new_graph(vertices: Collection[Vertex], parent: Optional[Graph] = None) -> Graph:
    """Copy ``vertices`` and the edges among them into a new, independent graph.

    The new graph has the parent's directedness.  Copied vertices keep the
    name and tag of their originals; copied edges keep direction, orientation
    and tag.  Edges to vertices outside the set are dropped, and a vertex
    listed more than once is copied once.
    """
    if parent is None:
        if not vertices:
            raise GraphError("Cannot infer the parent graph of an empty vertex set")
        parent = next(iter(vertices)).parent_graph

    new_graph = Graph(parent.directedness)
    copies: Dict[int, Vertex] = {}
    originals: Dict[int, Vertex] = {}
    for vertex in vertices:
        if vertex.parent_graph is not parent:
            raise GraphError(f"{vertex!r} does not belong to the parent graph")
        if vertex.id in copies:
            continue
        originals[vertex.id] = vertex
        copies[vertex.id] = new_graph.add_vertex(name=vertex.name, tag=vertex.tag)

    copied_edge_ids = set()
    for vertex in originals.values():
        for edge in vertex.incident_edges:
            if edge.id in copied_edge_ids:
                continue
            new1 = copies.get(edge.vertex1.id)
            new2 = copies.get(edge.vertex2.id)
            if new1 is None or new2 is None:
                continue
            new_graph.add_edge(new1, new2, directed=edge.is_directed, tag=edge.tag)
            copied_edge_ids.add(edge.id)

    return new_graph
