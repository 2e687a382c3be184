"""Tests for GraphMetricCalculationManager: synchronous runs, the worker
thread, cancellation and degree-column filtering."""
from __future__ import annotations

import threading

import pytest

from graph_metrics.calculators import (
    CalculationInProgressError,
    CalculationOutcome,
    GraphMetricCalculationManager,
    GraphMetricCalculator,
    VertexDegreeCalculator,
    VertexMetricColumn,
)
from graph_metrics.calculators.brandes import BETWEENNESS_COLUMN
from graph_metrics.calculators.components import CONNECTED_COMPONENT_COLUMN
from graph_metrics.calculators.degree import DEGREE_COLUMN, IN_DEGREE_COLUMN, OUT_DEGREE_COLUMN
from graph_metrics.calculators.overall import OVERALL_METRICS_COLUMN
from graph_metrics.config import CalculationSettings
from graph_metrics.graph import Directedness
from graph_metrics.settings import GraphMetrics, GraphMetricUserSettings
from tests.helpers.graph_builders import build_graph, by_name


class BlockingCalculator(GraphMetricCalculator):
    """Waits for a release signal, then honors cancellation."""

    description = "blocking test metric"

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def try_calculate_graph_metrics(self, graph, context):
        self.started.set()
        self.release.wait(timeout=5)
        if not self.checkpoint(context, 0, 1):
            return CalculationOutcome.cancellation()
        return CalculationOutcome.success([VertexMetricColumn("Blocked", {})])


class FailingCalculator(GraphMetricCalculator):
    description = "failing test metric"

    def try_calculate_graph_metrics(self, graph, context):
        raise ValueError("boom")


def _manager(*calculators):
    return GraphMetricCalculationManager(
        calculators=list(calculators) or None,
        calculation_settings=CalculationSettings(),
    )


# ==============================================================================
# Synchronous runs
# ==============================================================================

@pytest.mark.unit
def test_end_to_end_path(path_graph):
    """A - B - C: the reference scenario."""
    graph, v = path_graph
    results = _manager().calculate_graph_metrics(graph)

    assert by_name(results[BETWEENNESS_COLUMN].values, v) == {"A": 0.0, "B": 1.0, "C": 0.0}
    assert by_name(results[DEGREE_COLUMN].values, v) == {"A": 1, "B": 2, "C": 1}
    assert set(results[CONNECTED_COMPONENT_COLUMN].values.values()) == {1}

    overall = {value.row_id: value.value for value in results[OVERALL_METRICS_COLUMN].values}
    assert overall["Connected Components"] == 1
    assert overall["Graph Density"] == pytest.approx(0.667, abs=1e-3)


@pytest.mark.unit
def test_undirected_graph_reports_degree_only(path_graph):
    graph, _ = path_graph
    results = _manager(VertexDegreeCalculator()).calculate_graph_metrics(graph)

    assert results.column_names == [DEGREE_COLUMN]


@pytest.mark.unit
def test_directed_graph_reports_in_and_out_degree():
    graph, v = build_graph([("A", "B"), ("A", "C")], Directedness.DIRECTED)
    results = _manager(VertexDegreeCalculator()).calculate_graph_metrics(graph)

    assert results.column_names == [IN_DEGREE_COLUMN, OUT_DEGREE_COLUMN]
    assert by_name(results[OUT_DEGREE_COLUMN].values, v) == {"A": 2, "B": 0, "C": 0}


@pytest.mark.unit
def test_unrequested_degree_columns_dropped():
    graph, _ = build_graph([("A", "B")], Directedness.DIRECTED)
    settings = GraphMetricUserSettings(GraphMetrics.IN_DEGREE)
    results = _manager(VertexDegreeCalculator()).calculate_graph_metrics(graph, user_settings=settings)

    assert results.column_names == [IN_DEGREE_COLUMN]


@pytest.mark.unit
def test_only_requested_metrics_are_calculated(path_graph):
    graph, _ = path_graph
    settings = GraphMetricUserSettings(GraphMetrics.BETWEENNESS_CENTRALITY)
    results = _manager().calculate_graph_metrics(graph, user_settings=settings)

    assert results.column_names == [BETWEENNESS_COLUMN]


@pytest.mark.unit
def test_graph_is_not_modified(two_cliques):
    graph, _ = two_cliques
    before = [(edge.id, edge.vertex1.id, edge.vertex2.id) for edge in graph.iter_edges()]

    _manager().calculate_graph_metrics(graph)

    assert [(edge.id, edge.vertex1.id, edge.vertex2.id) for edge in graph.iter_edges()] == before
    assert graph.vertex_count == 8


@pytest.mark.unit
def test_vertex_frame_export(path_graph):
    graph, _ = path_graph
    results = _manager().calculate_graph_metrics(graph)
    frame = results.vertex_frame(graph)

    assert list(frame["tag"]) == ["A", "B", "C"]
    assert list(frame[DEGREE_COLUMN]) == [1, 2, 1]


@pytest.mark.unit
def test_synchronous_errors_propagate(path_graph):
    graph, _ = path_graph
    with pytest.raises(ValueError, match="boom"):
        _manager(FailingCalculator()).calculate_graph_metrics(graph)


@pytest.mark.unit
def test_failing_progress_callback_does_not_abort_run(path_graph, caplog):
    graph, v = path_graph
    calls = []

    def broken_sink(report):
        calls.append(report)
        raise RuntimeError("sink closed")

    with caplog.at_level("ERROR"):
        results = _manager().calculate_graph_metrics(graph, progress_callback=broken_sink)

    assert calls
    assert by_name(results[BETWEENNESS_COLUMN].values, v) == {"A": 0.0, "B": 1.0, "C": 0.0}
    assert "Progress callback failed" in caplog.text


# ==============================================================================
# Worker thread
# ==============================================================================

@pytest.mark.integration
def test_async_run_completes(path_graph):
    graph, _ = path_graph
    manager = _manager()
    events = []
    reports = []

    manager.calculate_graph_metrics_async(graph, progress_callback=reports.append, completed_callback=events.append)

    assert manager.wait(timeout=10)
    (event,) = events
    assert event.error is None
    assert not event.cancelled
    assert BETWEENNESS_COLUMN in event.results
    assert reports
    assert manager.get_status()["status"] == "completed"
    assert not manager.is_busy


@pytest.mark.integration
def test_async_run_can_be_cancelled(path_graph):
    graph, _ = path_graph
    blocker = BlockingCalculator()
    manager = _manager(VertexDegreeCalculator(), blocker)
    events = []

    manager.calculate_graph_metrics_async(graph, completed_callback=events.append)
    assert blocker.started.wait(timeout=5)
    assert manager.is_busy

    manager.cancel()
    blocker.release.set()

    assert manager.wait(timeout=10)
    (event,) = events
    assert event.cancelled
    assert event.results is None
    assert manager.get_status()["status"] == "cancelled"


@pytest.mark.integration
def test_second_async_run_is_rejected(path_graph):
    graph, _ = path_graph
    blocker = BlockingCalculator()
    manager = _manager(blocker)

    manager.calculate_graph_metrics_async(graph)
    assert blocker.started.wait(timeout=5)
    try:
        with pytest.raises(CalculationInProgressError):
            manager.calculate_graph_metrics_async(graph)
    finally:
        blocker.release.set()
        manager.wait(timeout=10)

    # A new run may start once the first finishes.
    manager.calculate_graph_metrics_async(graph)
    assert manager.wait(timeout=10)
    assert manager.get_status()["status"] == "completed"


@pytest.mark.integration
def test_async_failure_reported_on_completion(path_graph):
    graph, _ = path_graph
    manager = _manager(FailingCalculator())
    events = []

    manager.calculate_graph_metrics_async(graph, completed_callback=events.append)

    assert manager.wait(timeout=10)
    (event,) = events
    assert isinstance(event.error, ValueError)
    assert event.results is None
    status = manager.get_status()
    assert status["status"] == "failed"
    assert status["error"] == "boom"


@pytest.mark.unit
def test_wait_without_run_returns_immediately():
    assert _manager().wait(timeout=0.1)
