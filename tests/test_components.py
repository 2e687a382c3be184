"""Tests for connected and strongly connected components."""
from __future__ import annotations

import pytest

from graph_metrics.calculators import (
    CalculationContext,
    CancellationToken,
    ComponentSortOrder,
    ConnectedComponentCalculator,
    compute_connected_components,
    compute_strongly_connected_components,
)
from graph_metrics.calculators.components import (
    CONNECTED_COMPONENT_COLUMN,
    STRONGLY_CONNECTED_COMPONENT_COLUMN,
)
from graph_metrics.graph import Directedness, Graph
from tests.helpers.graph_builders import build_graph


def _names(components):
    return [sorted(vertex.name for vertex in component) for component in components]


@pytest.mark.unit
def test_path_is_one_component(path_graph):
    graph, _ = path_graph
    assert _names(compute_connected_components(graph)) == [["A", "B", "C"]]


@pytest.mark.unit
def test_sorted_by_size_then_smallest_vertex_id():
    graph, _ = build_graph([("A", "B"), ("C", "D"), ("E", "F"), ("F", "G")], isolated=["H"])

    descending = _names(compute_connected_components(graph))
    ascending = _names(compute_connected_components(graph, ComponentSortOrder.ASCENDING))

    assert descending == [["E", "F", "G"], ["A", "B"], ["C", "D"], ["H"]]
    assert ascending == [["H"], ["A", "B"], ["C", "D"], ["E", "F", "G"]]


@pytest.mark.unit
def test_direction_ignored_for_connectivity():
    graph, _ = build_graph([("A", "B"), ("C", "B")], Directedness.DIRECTED)
    assert _names(compute_connected_components(graph)) == [["A", "B", "C"]]


@pytest.mark.unit
def test_strongly_connected_components_follow_direction():
    graph, _ = build_graph(
        [("A", "B"), ("B", "C"), ("C", "A"), ("C", "D"), ("D", "E"), ("E", "D")],
        Directedness.DIRECTED,
    )
    assert _names(compute_strongly_connected_components(graph)) == [["A", "B", "C"], ["D", "E"]]


@pytest.mark.unit
def test_strongly_connected_mixed_graph():
    graph = Graph(Directedness.MIXED)
    a, b, c = (graph.add_vertex(name) for name in "ABC")
    graph.add_edge(a, b, directed=False)
    graph.add_edge(b, c, directed=True)

    assert _names(compute_strongly_connected_components(graph)) == [["A", "B"], ["C"]]
    assert _names(compute_connected_components(graph)) == [["A", "B", "C"]]


@pytest.mark.unit
def test_long_directed_chain_gives_singleton_components():
    names = [f"v{i}" for i in range(5000)]
    graph, _ = build_graph(list(zip(names, names[1:])), Directedness.DIRECTED)

    components = compute_strongly_connected_components(graph)
    assert len(components) == 5000


@pytest.mark.unit
def test_calculator_numbers_components_from_one():
    graph, v = build_graph([("A", "B"), ("B", "C")], isolated=["D"])
    outcome = ConnectedComponentCalculator().try_calculate_graph_metrics(graph, CalculationContext.create(graph))

    columns = {column.name: column.values for column in outcome.columns}
    assert columns[CONNECTED_COMPONENT_COLUMN] == {v["A"].id: 1, v["B"].id: 1, v["C"].id: 1, v["D"].id: 2}
    assert STRONGLY_CONNECTED_COMPONENT_COLUMN in columns


@pytest.mark.unit
def test_calculator_ignores_cancellation(path_graph):
    graph, _ = path_graph
    token = CancellationToken()
    token.cancel()
    outcome = ConnectedComponentCalculator().try_calculate_graph_metrics(
        graph, CalculationContext.create(graph, cancellation_token=token)
    )
    assert outcome.succeeded
