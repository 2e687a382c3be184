"""Graph model and structural helpers."""

from .adjacency import DenseAdjacency, build_dense_adjacency
from .convert import from_networkx, to_networkx
from .duplicates import DuplicateEdgeDetector, edge_key
from .model import (
    Directedness,
    DirectednessError,
    Edge,
    ForeignVertexError,
    Graph,
    GraphError,
    Vertex,
    VertexNotFoundError,
)
from .subgraph import get_subgraph_as_new_graph

__all__ = [
    "DenseAdjacency",
    "Directedness",
    "DirectednessError",
    "DuplicateEdgeDetector",
    "Edge",
    "ForeignVertexError",
    "Graph",
    "GraphError",
    "Vertex",
    "VertexNotFoundError",
    "build_dense_adjacency",
    "edge_key",
    "from_networkx",
    "get_subgraph_as_new_graph",
    "to_networkx",
]
