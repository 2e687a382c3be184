"""In-memory graph model consumed by every metric calculator.

A ``Graph`` owns its vertices and edges.  Adjacency is derived on demand from
the graph's incidence index, so it always reflects the current edge set.
"""
from __future__ import annotations

import itertools
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class Directedness(str, Enum):
    """Directedness of a graph."""

    UNDIRECTED = "undirected"
    DIRECTED = "directed"
    MIXED = "mixed"


class GraphError(Exception):
    """Base class for graph construction errors."""


class ForeignVertexError(GraphError):
    """An edge endpoint does not belong to the graph it is added to."""


class DirectednessError(GraphError):
    """An edge's directedness is incompatible with its graph."""


class VertexNotFoundError(GraphError):
    """A vertex ID is not present in the graph."""


class Vertex:
    """A vertex owned by exactly one graph.

    ``tag`` is an opaque caller-owned value (typically a row identifier used to
    map results back to caller storage).  It is never interpreted here.
    """

    __slots__ = ("_id", "_graph", "name", "tag")

    def __init__(self, vertex_id: int, graph: "Graph", name: Optional[str] = None, tag: Any = None):
        self._id = vertex_id
        self._graph = graph
        self.name = name
        self.tag = tag

    @property
    def id(self) -> int:
        return self._id

    @property
    def parent_graph(self) -> Optional["Graph"]:
        return self._graph

    @property
    def incident_edges(self) -> List["Edge"]:
        """All edges connected to this vertex, self-loops included once."""
        return list(self._graph._incidence.get(self._id, {}).values())

    @property
    def incoming_edges(self) -> List["Edge"]:
        """Edges that can be traversed *into* this vertex.

        Undirected edges count as both incoming and outgoing.
        """
        return [edge for edge in self.incident_edges if not edge.is_directed or edge.vertex2 is self]

    @property
    def outgoing_edges(self) -> List["Edge"]:
        return [edge for edge in self.incident_edges if not edge.is_directed or edge.vertex1 is self]

    @property
    def predecessor_vertices(self) -> List["Vertex"]:
        return _unique_vertices(edge.get_adjacent_vertex(self) for edge in self.incoming_edges)

    @property
    def successor_vertices(self) -> List["Vertex"]:
        return _unique_vertices(edge.get_adjacent_vertex(self) for edge in self.outgoing_edges)

    @property
    def adjacent_vertices(self) -> List["Vertex"]:
        """Unique neighbours in either direction; includes self for a self-loop."""
        return _unique_vertices(edge.get_adjacent_vertex(self) for edge in self.incident_edges)

    @property
    def degree(self) -> int:
        """Incident edge count; a self-loop counts twice."""
        edges = self.incident_edges
        return len(edges) + sum(1 for edge in edges if edge.is_self_loop)

    def get_connecting_edges(self, other: "Vertex") -> List["Edge"]:
        return [edge for edge in self.incident_edges if edge.get_adjacent_vertex(self) is other]

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Vertex {self._id}{label}>"


class Edge:
    """An edge between two vertices of the same graph.

    For a directed edge ``vertex1`` is the back (source) vertex and ``vertex2``
    the front (destination) vertex.
    """

    __slots__ = ("_id", "_vertex1", "_vertex2", "_directed", "tag")

    def __init__(self, edge_id: int, vertex1: Vertex, vertex2: Vertex, directed: bool, tag: Any = None):
        self._id = edge_id
        self._vertex1 = vertex1
        self._vertex2 = vertex2
        self._directed = directed
        self.tag = tag

    @property
    def id(self) -> int:
        return self._id

    @property
    def vertex1(self) -> Vertex:
        return self._vertex1

    @property
    def vertex2(self) -> Vertex:
        return self._vertex2

    @property
    def vertices(self) -> tuple:
        return (self._vertex1, self._vertex2)

    @property
    def is_directed(self) -> bool:
        return self._directed

    @property
    def back_vertex(self) -> Vertex:
        if not self._directed:
            raise GraphError("Undirected edges have no back vertex")
        return self._vertex1

    @property
    def front_vertex(self) -> Vertex:
        if not self._directed:
            raise GraphError("Undirected edges have no front vertex")
        return self._vertex2

    @property
    def is_self_loop(self) -> bool:
        return self._vertex1 is self._vertex2

    def get_adjacent_vertex(self, vertex: Vertex) -> Vertex:
        """Return the endpoint opposite ``vertex``."""
        if vertex is self._vertex1:
            return self._vertex2
        if vertex is self._vertex2:
            return self._vertex1
        raise GraphError(f"{vertex!r} is not an endpoint of edge {self._id}")

    def __repr__(self) -> str:
        arrow = "->" if self._directed else "--"
        return f"<Edge {self._id}: {self._vertex1.id}{arrow}{self._vertex2.id}>"


class Graph:
    """A graph with a fixed directedness, possibly with self-loops and parallel edges."""

    def __init__(self, directedness: Directedness = Directedness.UNDIRECTED):
        self._directedness = Directedness(directedness)
        self._vertices: Dict[int, Vertex] = {}
        self._edges: Dict[int, Edge] = {}
        # vertex id -> {edge id -> edge}
        self._incidence: Dict[int, Dict[int, Edge]] = {}
        self._vertex_ids = itertools.count(1)
        self._edge_ids = itertools.count(1)

    @property
    def directedness(self) -> Directedness:
        return self._directedness

    @property
    def is_directed(self) -> bool:
        return self._directedness is Directedness.DIRECTED

    @property
    def vertices(self) -> List[Vertex]:
        return list(self._vertices.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def iter_vertices(self) -> Iterator[Vertex]:
        return iter(self._vertices.values())

    def iter_edges(self) -> Iterator[Edge]:
        return iter(self._edges.values())

    def add_vertex(self, name: Optional[str] = None, tag: Any = None) -> Vertex:
        vertex = Vertex(next(self._vertex_ids), self, name=name, tag=tag)
        self._vertices[vertex.id] = vertex
        self._incidence[vertex.id] = {}
        return vertex

    def add_edge(
        self,
        vertex1: Vertex,
        vertex2: Vertex,
        directed: Optional[bool] = None,
        tag: Any = None,
    ) -> Edge:
        """Connect two vertices of this graph.

        ``directed`` defaults to the graph's directedness; it must be given
        explicitly for a mixed graph.
        """
        for vertex in (vertex1, vertex2):
            if vertex.parent_graph is not self or self._vertices.get(vertex.id) is not vertex:
                raise ForeignVertexError(f"{vertex!r} does not belong to this graph")

        directed = self._resolve_directed(directed)
        edge = Edge(next(self._edge_ids), vertex1, vertex2, directed, tag=tag)
        self._edges[edge.id] = edge
        self._incidence[vertex1.id][edge.id] = edge
        self._incidence[vertex2.id][edge.id] = edge
        return edge

    def remove_edge(self, edge: Edge) -> None:
        if self._edges.get(edge.id) is not edge:
            raise GraphError(f"{edge!r} does not belong to this graph")
        del self._edges[edge.id]
        self._incidence[edge.vertex1.id].pop(edge.id, None)
        self._incidence[edge.vertex2.id].pop(edge.id, None)

    def remove_vertex(self, vertex: Vertex) -> None:
        """Remove a vertex and every edge incident to it."""
        if self._vertices.get(vertex.id) is not vertex:
            raise VertexNotFoundError(f"{vertex!r} does not belong to this graph")
        for edge in vertex.incident_edges:
            self.remove_edge(edge)
        del self._incidence[vertex.id]
        del self._vertices[vertex.id]
        vertex._graph = None

    def get_vertex(self, vertex_id: int) -> Vertex:
        try:
            return self._vertices[vertex_id]
        except KeyError:
            raise VertexNotFoundError(f"No vertex with ID {vertex_id}") from None

    def contains_self_loops(self) -> bool:
        return any(edge.is_self_loop for edge in self._edges.values())

    def _resolve_directed(self, directed: Optional[bool]) -> bool:
        if self._directedness is Directedness.MIXED:
            if directed is None:
                raise DirectednessError("Edges in a mixed graph must specify directed=True or False")
            return bool(directed)

        expected = self._directedness is Directedness.DIRECTED
        if directed is not None and bool(directed) != expected:
            raise DirectednessError(
                f"Cannot add a {'directed' if directed else 'undirected'} edge to a "
                f"{self._directedness.value} graph"
            )
        return expected

    def __repr__(self) -> str:
        return (
            f"<Graph {self._directedness.value}: "
            f"{self.vertex_count} vertices, {self.edge_count} edges>"
        )


def _unique_vertices(vertices) -> List[Vertex]:
    seen = set()
    unique = []
    for vertex in vertices:
        if vertex.id not in seen:
            seen.add(vertex.id)
            unique.append(vertex)
    return unique
