"""Shared pytest configuration and fixtures for the test suite.

This module centralizes:
- Path setup (eliminates sys.path hacks in individual test files)
- Pytest markers for test categorization (unit, integration)
- Small graphs with hand-checkable metric values
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


# ==============================================================================
# Path Setup - Ensures graph_metrics/ is importable
# ==============================================================================

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.helpers.graph_builders import build_graph  # noqa: E402


# ==============================================================================
# Pytest Configuration
# ==============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Fast tests with no I/O",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests touching the file system or worker threads",
    )


# ==============================================================================
# Graph Fixtures
# ==============================================================================

@pytest.fixture
def path_graph():
    """A - B - C"""
    return build_graph([("A", "B"), ("B", "C")])


@pytest.fixture
def triangle_with_tail():
    """Triangle A-B-C with D hanging off C."""
    return build_graph([("A", "B"), ("B", "C"), ("C", "A"), ("C", "D")])


@pytest.fixture
def two_cliques():
    """Two 4-cliques joined by a single bridge D - E."""
    left = ["A", "B", "C", "D"]
    right = ["E", "F", "G", "H"]
    edges = [(u, v) for group in (left, right) for i, u in enumerate(group) for v in group[i + 1:]]
    edges.append(("D", "E"))
    return build_graph(edges)
