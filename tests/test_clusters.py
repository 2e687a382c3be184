"""Tests for community detection and cluster styling."""
from __future__ import annotations

import networkx as nx
import pytest

from graph_metrics.calculators import (
    CalculationContext,
    CancellationToken,
    ClusterCalculator,
    compute_clusters,
    modularity,
)
from graph_metrics.calculators.cluster_styles import (
    HUES,
    SHAPES,
    VertexShape,
    cluster_style,
    cluster_styles,
)
from graph_metrics.calculators.clusters import (
    CLUSTER_COLOR_COLUMN,
    CLUSTER_COLUMN,
    CLUSTER_SHAPE_COLUMN,
    CLUSTER_VERTICES_COLUMN,
    MODULARITY_COLUMN,
)
from graph_metrics.config import CalculationSettings
from graph_metrics.graph import from_networkx
from tests.helpers.graph_builders import build_graph, simple_networkx


def _names(result):
    return [sorted(vertex.name for vertex in community.vertices) for community in result.communities]


# ==============================================================================
# Community detection
# ==============================================================================

@pytest.mark.unit
def test_two_cliques_split_at_the_bridge(two_cliques):
    graph, _ = two_cliques
    result = compute_clusters(graph)

    assert _names(result) == [["A", "B", "C", "D"], ["E", "F", "G", "H"]]
    assert [community.id for community in result.communities] == [1, 2]


@pytest.mark.unit
def test_modularity_matches_networkx(two_cliques):
    graph, _ = two_cliques
    result = compute_clusters(graph)

    partition = [{vertex.tag for vertex in community.vertices} for community in result.communities]
    expected = nx.community.modularity(simple_networkx(graph), partition)
    assert result.modularity == pytest.approx(expected)
    assert result.modularity > 0.3


@pytest.mark.unit
def test_greedy_modularity_on_karate_club():
    nx_graph = nx.Graph(nx.karate_club_graph().edges())
    graph = from_networkx(nx_graph)

    result = compute_clusters(graph)
    reference = nx.community.greedy_modularity_communities(nx_graph)

    assert result.modularity == pytest.approx(nx.community.modularity(nx_graph, reference), abs=0.03)
    assert result.modularity > 0.35


@pytest.mark.unit
def test_edgeless_graph_gives_singletons():
    graph, _ = build_graph([], isolated=["C", "A", "B"])
    result = compute_clusters(graph)

    assert _names(result) == [["C"], ["A"], ["B"]]
    assert result.modularity == 0.0


@pytest.mark.unit
def test_isolated_vertices_stay_alone(two_cliques):
    graph, _ = two_cliques
    graph.add_vertex(name="Z", tag="Z")
    result = compute_clusters(graph)

    assert _names(result)[-1] == ["Z"]


@pytest.mark.unit
def test_duplicate_edges_and_direction_ignored(path_graph):
    graph, _ = path_graph
    noisy, _ = build_graph([("A", "B"), ("B", "A"), ("B", "C"), ("C", "C")])
    assert _names(compute_clusters(noisy)) == _names(compute_clusters(graph))


@pytest.mark.unit
def test_modularity_of_single_community_is_zero(path_graph):
    graph, v = path_graph
    assert modularity(graph, [list(v.values())]) == pytest.approx(0.0)


@pytest.mark.unit
def test_cancellation_during_merges(two_cliques):
    graph, _ = two_cliques
    token = CancellationToken()
    reports = []

    def on_progress(report):
        reports.append(report)
        if len(reports) == 2:
            token.cancel()

    context = CalculationContext.create(
        graph,
        calculation_settings=CalculationSettings(merges_per_progress_report=1),
        cancellation_token=token,
        progress_callback=on_progress,
    )

    outcome = ClusterCalculator().try_calculate_graph_metrics(graph, context)

    assert outcome.cancelled
    assert outcome.columns == ()
    assert reports[0].message == "Calculating clusters."


@pytest.mark.unit
def test_cancelled_before_start_on_edgeless_graph():
    graph, _ = build_graph([], isolated=["A", "B", "C"])
    token = CancellationToken()
    token.cancel()
    context = CalculationContext.create(graph, cancellation_token=token)

    assert compute_clusters(graph, context) is None
    outcome = ClusterCalculator().try_calculate_graph_metrics(graph, context)
    assert outcome.cancelled
    assert outcome.columns == ()


@pytest.mark.unit
def test_calculator_columns(two_cliques):
    graph, v = two_cliques
    outcome = ClusterCalculator().try_calculate_graph_metrics(graph, CalculationContext.create(graph))
    columns = {column.name: column for column in outcome.columns}

    assert columns[CLUSTER_COLUMN].values[v["A"].id] == 1
    assert columns[CLUSTER_COLUMN].values[v["H"].id] == 2
    assert [value.value for value in columns[CLUSTER_VERTICES_COLUMN].values] == [4, 4]
    assert [value.row_id for value in columns[CLUSTER_COLOR_COLUMN].values] == [1, 2]
    assert [value.value for value in columns[CLUSTER_SHAPE_COLUMN].values] == ["Disk", "Disk"]
    assert columns[MODULARITY_COLUMN].values[0].value > 0


# ==============================================================================
# Styles
# ==============================================================================

@pytest.mark.unit
def test_first_clusters_cycle_through_hues():
    assert cluster_style(0, 3).color == "#0000ff"
    assert cluster_style(1, 3).color == "#ff0000"
    assert cluster_style(3, 10).color == "#00ff00"
    assert all(style.shape is VertexShape.DISK for style in cluster_styles(len(HUES)))


@pytest.mark.unit
def test_shape_changes_after_all_hues():
    style = cluster_style(len(HUES), len(HUES) + 1)
    assert style.shape is VertexShape.SOLID_SQUARE
    assert style.color == cluster_style(0, 1).color


@pytest.mark.unit
def test_saturation_drops_after_all_hue_shape_pairs():
    combinations = len(HUES) * len(SHAPES)
    first = cluster_style(0, combinations + 1)
    wrapped = cluster_style(combinations, combinations + 1)

    assert wrapped.shape is first.shape
    assert wrapped.color != first.color
    # Blue at saturation 0.6, lightness 0.5.
    assert wrapped.color == "#3333cc"


@pytest.mark.unit
def test_styles_are_deterministic():
    assert cluster_styles(50) == cluster_styles(50)


@pytest.mark.unit
def test_style_index_out_of_range():
    with pytest.raises(ValueError):
        cluster_style(5, 5)
