"""Unit tests for result columns and their pandas export."""
from __future__ import annotations

import pandas as pd
import pytest

from graph_metrics.calculators import (
    GraphMetricResults,
    GraphMetricValue,
    OrderedMetricColumn,
    VertexMetricColumn,
)


@pytest.fixture
def results(path_graph):
    graph, v = path_graph
    return GraphMetricResults([
        VertexMetricColumn("Degree", {v["A"].id: 1, v["B"].id: 2, v["C"].id: 1}),
        VertexMetricColumn("Partial", {v["B"].id: 0.5}, suspect=True),
        OrderedMetricColumn("Size", [GraphMetricValue(3, row_id="g1"), GraphMetricValue(1, row_id="g2")]),
        OrderedMetricColumn("Density", [GraphMetricValue(1.0, row_id="g1"), GraphMetricValue(None, row_id="g2")]),
    ])


@pytest.mark.unit
def test_lookup_by_name(results):
    assert results.column_names == ["Degree", "Partial", "Size", "Density"]
    assert "Degree" in results
    assert results.get("Missing") is None
    with pytest.raises(KeyError):
        results["Missing"]


@pytest.mark.unit
def test_vertex_frame_aligns_on_vertex_id(results, path_graph):
    graph, v = path_graph
    frame = results.vertex_frame(graph)

    assert frame.index.name == "vertex_id"
    assert list(frame.columns) == ["name", "tag", "Degree", "Partial"]
    assert frame.loc[v["B"].id, "Partial"] == 0.5
    assert pd.isna(frame.loc[v["A"].id, "Partial"])


@pytest.mark.unit
def test_ordered_frame_keeps_row_ids(results):
    frame = results.ordered_frame(["Size", "Density"])

    assert list(frame["row_id"]) == ["g1", "g2"]
    assert list(frame["Size"]) == [3, 1]


@pytest.mark.unit
def test_ordered_frame_rejects_vertex_columns(results):
    with pytest.raises(TypeError):
        results.ordered_frame(["Degree"])
