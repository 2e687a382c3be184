"""Community detection by greedy modularity agglomeration.

Implements Clauset, Newman & Moore (2004): every vertex starts in its own
community and the pair of communities whose merge raises modularity the most
is merged, until no merge raises it.  Edge direction, self-loops and parallel
edges are ignored; the graph is treated as a simple undirected graph.

Change-in-modularity values live in a sparse ``{community: {neighbour: dq}}``
map with a heap on top.  Heap entries go stale when a merge rewrites a row;
stale entries are skipped when popped.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    checkpoint,
)
from graph_metrics.calculators.cluster_styles import ClusterStyle, cluster_styles
from graph_metrics.calculators.columns import (
    GraphMetricValue,
    OrderedMetricColumn,
    VertexMetricColumn,
)
from graph_metrics.config import CalculationSettings
from graph_metrics.graph.adjacency import build_dense_adjacency
from graph_metrics.graph.model import Graph, Vertex
from graph_metrics.performance_profiler import profile_phase
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "clusters"

CLUSTER_COLUMN = "Cluster"
CLUSTER_VERTICES_COLUMN = "Cluster Vertices"
CLUSTER_COLOR_COLUMN = "Cluster Color"
CLUSTER_SHAPE_COLUMN = "Cluster Shape"
MODULARITY_COLUMN = "Modularity"


@dataclass
class Community:
    """A set of vertices that belong together.

    IDs run from 1 in output order: largest community first, ties broken by
    smallest vertex ID.
    """

    id: int
    vertices: List[Vertex]
    style: Optional[ClusterStyle] = None

    def __len__(self) -> int:
        return len(self.vertices)


@dataclass(frozen=True)
class ClusterResult:
    communities: List[Community]
    modularity: float


def modularity(graph: Graph, partition: Sequence[Sequence[Vertex]]) -> float:
    """Newman modularity of a partition of the simple undirected graph."""
    adjacency = build_dense_adjacency(graph)
    edges = sum(len(targets) for targets in adjacency.neighbors) / 2
    if edges == 0:
        return 0.0

    community_of: Dict[int, int] = {}
    for number, members in enumerate(partition):
        for vertex in members:
            community_of[adjacency.index_of[vertex.id]] = number

    internal = [0.0] * len(partition)
    degree_sum = [0.0] * len(partition)
    for i, targets in enumerate(adjacency.neighbors):
        community = community_of.get(i)
        if community is None:
            continue
        degree_sum[community] += len(targets)
        internal[community] += sum(1 for j in targets if community_of.get(j) == community)

    # ``internal`` counted each edge from both ends.
    return sum(
        internal[c] / (2 * edges) - (degree_sum[c] / (2 * edges)) ** 2
        for c in range(len(partition))
    )


def compute_clusters(graph: Graph, context: Optional[CalculationContext] = None) -> Optional[ClusterResult]:
    """Partition every vertex into a community, or return None if cancelled."""
    settings = context.calculation_settings if context else CalculationSettings()
    interval = settings.merges_per_progress_report

    adjacency = build_dense_adjacency(graph)
    n = adjacency.size
    neighbors = adjacency.neighbors
    edges = sum(len(targets) for targets in neighbors) / 2

    members: Dict[int, List[int]] = {i: [i] for i in range(n)}

    if not checkpoint(context, DESCRIPTION, 0, max(n - 1, 1)):
        return None

    if edges > 0:
        with profile_phase("cluster_agglomeration", metadata={"vertices": n, "edges": int(edges)}):
            merged = _agglomerate(neighbors, edges, members, context, interval)
        if not merged:
            return None

    partition = [[adjacency.vertices[i] for i in group] for group in members.values()]
    partition.sort(key=lambda group: (-len(group), min(vertex.id for vertex in group)))

    styles = cluster_styles(len(partition))
    communities = [
        Community(id=number, vertices=sorted(group, key=lambda vertex: vertex.id), style=styles[number - 1])
        for number, group in enumerate(partition, start=1)
    ]
    score = modularity(graph, partition)
    logger.info("Found %d clusters (modularity %.4f)", len(communities), score)
    return ClusterResult(communities=communities, modularity=score)


def _agglomerate(
    neighbors: List[List[int]],
    edges: float,
    members: Dict[int, List[int]],
    context: Optional[CalculationContext],
    interval: int,
) -> bool:
    """Merge communities in ``members`` in place; False if cancelled."""
    n = len(neighbors)
    q0 = 1.0 / (2.0 * edges)
    a = [len(targets) * q0 for targets in neighbors]

    dq: Dict[int, Dict[int, float]] = {
        i: {j: 2.0 * (q0 - a[i] * a[j]) for j in targets}
        for i, targets in enumerate(neighbors)
    }
    heap: List[Tuple[float, int, int]] = [
        (-value, i, j) for i, row in dq.items() for j, value in row.items() if i < j
    ]
    heapq.heapify(heap)

    merges = 0
    total_merges = max(n - 1, 1)

    while heap:
        negative, i, j = heapq.heappop(heap)
        row = dq.get(i)
        if row is None or row.get(j) != -negative:
            continue
        if -negative < 0:
            break

        source, target = _merge_order(dq, i, j)
        _merge(dq, a, heap, source, target)
        members[target].extend(members.pop(source))
        merges += 1

        if merges % interval == 0 and not checkpoint(context, DESCRIPTION, merges, total_merges):
            return False

    logger.debug("Cluster agglomeration finished after %d merges", merges)
    return True


def _merge_order(dq: Dict[int, Dict[int, float]], i: int, j: int) -> Tuple[int, int]:
    """Fold the community with fewer neighbours into the other."""
    if len(dq[i]) > len(dq[j]) or (len(dq[i]) == len(dq[j]) and i < j):
        return j, i
    return i, j


def _merge(
    dq: Dict[int, Dict[int, float]],
    a: List[float],
    heap: List[Tuple[float, int, int]],
    source: int,
    target: int,
) -> None:
    source_row = dq.pop(source)
    target_row = dq[target]
    target_row.pop(source, None)
    source_row.pop(target, None)

    affected: Set[int] = set(source_row) | set(target_row)
    for k in sorted(affected):
        if k in source_row and k in target_row:
            value = source_row[k] + target_row[k]
        elif k in source_row:
            value = source_row[k] - 2.0 * a[target] * a[k]
        else:
            value = target_row[k] - 2.0 * a[source] * a[k]

        target_row[k] = value
        dq[k][target] = value
        dq[k].pop(source, None)
        heapq.heappush(heap, (-value, min(target, k), max(target, k)))

    a[target] += a[source]
    a[source] = 0.0


class ClusterCalculator(GraphMetricCalculator):
    """Cluster membership per vertex, plus one row of attributes per cluster."""

    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.CLUSTERS):
            return CalculationOutcome.success()

        result = compute_clusters(graph, context)
        if result is None:
            return CalculationOutcome.cancellation()

        membership = {
            vertex.id: community.id
            for community in result.communities
            for vertex in community.vertices
        }
        communities = result.communities
        return CalculationOutcome.success([
            VertexMetricColumn(CLUSTER_COLUMN, membership),
            OrderedMetricColumn(
                CLUSTER_VERTICES_COLUMN,
                [GraphMetricValue(len(c), row_id=c.id) for c in communities],
            ),
            OrderedMetricColumn(
                CLUSTER_COLOR_COLUMN,
                [GraphMetricValue(c.style.color, row_id=c.id) for c in communities],
            ),
            OrderedMetricColumn(
                CLUSTER_SHAPE_COLUMN,
                [GraphMetricValue(c.style.shape.value, row_id=c.id) for c in communities],
            ),
            OrderedMetricColumn(MODULARITY_COLUMN, [GraphMetricValue(result.modularity)]),
        ])
