"""Graph metric calculators and the manager that runs them."""

from .base import (
    CalculationContext,
    CalculationOutcome,
    CancellationToken,
    GraphMetricCalculator,
    GraphMetricError,
    ProgressReport,
    VertexGroup,
)
from .brandes import BrandesCentralityCalculator, compute_brandes_centralities
from .clustering import ClusteringCoefficientCalculator, compute_clustering_coefficients
from .clusters import ClusterCalculator, Community, compute_clusters, modularity
from .columns import (
    GraphMetricColumn,
    GraphMetricResults,
    GraphMetricValue,
    OrderedMetricColumn,
    VertexMetricColumn,
)
from .components import (
    ComponentSortOrder,
    ConnectedComponentCalculator,
    compute_connected_components,
    compute_strongly_connected_components,
)
from .degree import VertexDegreeCalculator, compute_vertex_degrees
from .eigenvector import EigenvectorCentralityCalculator, compute_eigenvector_centrality
from .group import GroupMetricCalculator, compute_group_metrics
from .manager import (
    CalculationCompletedEvent,
    CalculationInProgressError,
    GraphMetricCalculationManager,
    default_calculators,
)
from .overall import OverallMetricCalculator, OverallMetrics, compute_overall_metrics
from .pagerank import PageRankCalculator, compute_pagerank

__all__ = [
    "BrandesCentralityCalculator",
    "CalculationCompletedEvent",
    "CalculationContext",
    "CalculationInProgressError",
    "CalculationOutcome",
    "CancellationToken",
    "ClusterCalculator",
    "ClusteringCoefficientCalculator",
    "Community",
    "ComponentSortOrder",
    "ConnectedComponentCalculator",
    "EigenvectorCentralityCalculator",
    "GraphMetricCalculationManager",
    "GraphMetricCalculator",
    "GraphMetricColumn",
    "GraphMetricError",
    "GraphMetricResults",
    "GraphMetricValue",
    "GroupMetricCalculator",
    "OrderedMetricColumn",
    "OverallMetricCalculator",
    "OverallMetrics",
    "PageRankCalculator",
    "ProgressReport",
    "VertexDegreeCalculator",
    "VertexGroup",
    "VertexMetricColumn",
    "compute_brandes_centralities",
    "compute_clustering_coefficients",
    "compute_clusters",
    "compute_connected_components",
    "compute_eigenvector_centrality",
    "compute_group_metrics",
    "compute_overall_metrics",
    "compute_pagerank",
    "compute_strongly_connected_components",
    "compute_vertex_degrees",
    "default_calculators",
    "modularity",
]
