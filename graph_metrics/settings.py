"""Which graph metrics a calculation run should produce."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import Iterable


class GraphMetrics(Flag):
    """Metrics that can be requested from an orchestration run."""

    NONE = 0
    IN_DEGREE = auto()
    OUT_DEGREE = auto()
    DEGREE = auto()
    CLUSTERING_COEFFICIENT = auto()
    BETWEENNESS_CENTRALITY = auto()
    CLOSENESS_CENTRALITY = auto()
    EIGENVECTOR_CENTRALITY = auto()
    PAGERANK = auto()
    CONNECTED_COMPONENTS = auto()
    CLUSTERS = auto()
    OVERALL_METRICS = auto()
    GROUP_METRICS = auto()

    @classmethod
    def all(cls) -> "GraphMetrics":
        combined = cls.NONE
        for member in cls:
            combined |= member
        return combined

    @classmethod
    def parse(cls, names: Iterable[str]) -> "GraphMetrics":
        """Combine metric names such as ``"degree"`` or ``"PAGERANK"``.

        Raises ValueError for an unknown name.
        """
        combined = cls.NONE
        for raw in names:
            name = raw.strip()
            if not name:
                continue
            try:
                combined |= cls[name.upper().replace("-", "_")]
            except KeyError:
                raise ValueError(f"Unknown graph metric '{name}'") from None
        return combined


@dataclass(frozen=True)
class GraphMetricUserSettings:
    """The set of metrics the caller asked for."""

    graph_metrics_to_calculate: GraphMetrics = GraphMetrics.all()

    def should_calculate(self, metrics: GraphMetrics) -> bool:
        """True if any of ``metrics`` was requested."""
        return bool(self.graph_metrics_to_calculate & metrics)
