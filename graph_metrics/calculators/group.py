"""Overall metrics for caller-defined vertex groups.

Each group's induced subgraph is copied into a new graph and measured on its
own.  Results are one ordered column per aggregate, one row per group, tagged
with the group's row ID.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from graph_metrics.calculators.base import (
    CalculationContext,
    CalculationOutcome,
    GraphMetricCalculator,
    VertexGroup,
    checkpoint,
)
from graph_metrics.calculators.columns import GraphMetricValue, OrderedMetricColumn
from graph_metrics.calculators.overall import OverallMetrics, compute_overall_metrics
from graph_metrics.graph.model import Graph
from graph_metrics.graph.subgraph import get_subgraph_as_new_graph
from graph_metrics.settings import GraphMetrics

logger = logging.getLogger(__name__)

DESCRIPTION = "group metrics"

# Group columns carry the same labels as the overall metrics, minus the graph
# type which every group shares with its parent.
_SKIPPED_LABELS = {"Graph Type"}


def compute_group_metrics(
    graph: Graph,
    groups: Sequence[VertexGroup],
    context: Optional[CalculationContext] = None,
) -> Optional[List[OverallMetrics]]:
    """Overall metrics of each group's induced subgraph, in group order."""
    results: List[OverallMetrics] = []
    for processed, group in enumerate(groups):
        if not checkpoint(context, DESCRIPTION, processed, len(groups)):
            return None
        subgraph = get_subgraph_as_new_graph(list(group.vertices), parent=graph)
        metrics = compute_overall_metrics(subgraph)
        results.append(metrics)
    return results


class GroupMetricCalculator(GraphMetricCalculator):
    description = DESCRIPTION

    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        if not context.should_calculate(GraphMetrics.GROUP_METRICS) or not context.groups:
            return CalculationOutcome.success()

        per_group = compute_group_metrics(graph, context.groups, context)
        if per_group is None:
            return CalculationOutcome.cancellation()

        values: Dict[str, List[GraphMetricValue]] = {}
        suspect = False
        for group, metrics in zip(context.groups, per_group):
            suspect = suspect or metrics.density_suspect
            for label, value in metrics.as_rows():
                if label in _SKIPPED_LABELS:
                    continue
                values.setdefault(label, []).append(GraphMetricValue(value, row_id=group.row_id))

        logger.debug("Calculated metrics for %d groups", len(per_group))
        return CalculationOutcome.success([
            OrderedMetricColumn(label, column_values, suspect=suspect and label == "Graph Density")
            for label, column_values in values.items()
        ])


def group_rows(outcome: CalculationOutcome) -> Dict[Any, Dict[str, Any]]:
    """Pivot group columns into ``{row_id: {label: value}}``."""
    rows: Dict[Any, Dict[str, Any]] = {}
    for column in outcome.columns:
        for value in column.values:
            rows.setdefault(value.row_id, {})[column.name] = value.value
    return rows
