"""Result columns produced by the metric calculators."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from graph_metrics.graph.model import Graph

Number = Union[int, float]


@dataclass(frozen=True)
class VertexMetricColumn:
    """One value per vertex, keyed by vertex ID."""

    name: str
    values: Dict[int, Optional[Number]]
    suspect: bool = False


@dataclass(frozen=True)
class GraphMetricValue:
    """An opaque value, optionally tagged with the caller's row identifier."""

    value: Any
    row_id: Any = None


@dataclass(frozen=True)
class OrderedMetricColumn:
    """Values that are not keyed by vertex ID, such as per-group rows."""

    name: str
    values: List[GraphMetricValue]
    suspect: bool = False


GraphMetricColumn = Union[VertexMetricColumn, OrderedMetricColumn]


@dataclass
class GraphMetricResults:
    """All columns produced by one orchestration run."""

    columns: List[GraphMetricColumn] = field(default_factory=list)

    def extend(self, columns: Iterable[GraphMetricColumn]) -> None:
        self.columns.extend(columns)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def get(self, name: str) -> Optional[GraphMetricColumn]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def __getitem__(self, name: str) -> GraphMetricColumn:
        column = self.get(name)
        if column is None:
            raise KeyError(name)
        return column

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def vertex_frame(self, graph: Graph) -> pd.DataFrame:
        """Per-vertex columns as a frame indexed by vertex ID.

        Includes ``name`` and ``tag`` so a consumer can map rows back to its
        own storage.
        """
        vertex_ids = [vertex.id for vertex in graph.iter_vertices()]
        frame = pd.DataFrame(
            {
                "name": [vertex.name for vertex in graph.iter_vertices()],
                "tag": [vertex.tag for vertex in graph.iter_vertices()],
            },
            index=pd.Index(vertex_ids, name="vertex_id"),
        )
        for column in self.columns:
            if isinstance(column, VertexMetricColumn):
                frame[column.name] = pd.Series(column.values, dtype="object").reindex(frame.index)
        return frame

    def ordered_frame(self, names: Iterable[str]) -> pd.DataFrame:
        """Side-by-side view of ordered columns of equal length, with row IDs."""
        selected = [self[name] for name in names]
        data: Dict[str, List[Any]] = {}
        for column in selected:
            if not isinstance(column, OrderedMetricColumn):
                raise TypeError(f"{column.name} is not an ordered column")
            data[column.name] = [value.value for value in column.values]
        frame = pd.DataFrame(data)
        if selected:
            frame.insert(0, "row_id", [value.row_id for value in selected[0].values])
        return frame
