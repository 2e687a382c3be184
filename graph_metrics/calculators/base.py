"""Shared contract for graph metric calculators.

A calculator takes a read-only graph and a ``CalculationContext`` and returns
a ``CalculationOutcome``: either the metric columns it produced or a
cancellation marker.  Cancellation is cooperative.  Calculators poll the
context at a fixed cadence and stop as soon as a cancel is requested,
discarding everything they computed so far.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Optional, Sequence, Tuple

from graph_metrics.calculators.columns import GraphMetricColumn
from graph_metrics.config import CalculationSettings
from graph_metrics.graph.duplicates import DuplicateEdgeDetector
from graph_metrics.graph.model import Graph, Vertex
from graph_metrics.settings import GraphMetrics, GraphMetricUserSettings

logger = logging.getLogger(__name__)


class GraphMetricError(Exception):
    """A calculator was used incorrectly."""


class CancellationToken:
    """Thread-safe cancel flag checked by value from the worker thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class ProgressReport:
    """Fire-and-forget progress notification."""

    percent: int
    message: str


ProgressCallback = Callable[[ProgressReport], None]


@dataclass(frozen=True)
class VertexGroup:
    """A caller-defined group of vertices, tagged with the caller's row ID."""

    row_id: Any
    vertices: Collection[Vertex]


@dataclass(frozen=True)
class CalculationContext:
    """Everything a calculator may read during one run.

    Immutable for the duration of the run.  The duplicate-edge detector is
    computed once and shared by all calculators.
    """

    graph: Graph
    user_settings: GraphMetricUserSettings
    calculation_settings: CalculationSettings
    duplicate_edge_detector: DuplicateEdgeDetector
    cancellation_token: Optional[CancellationToken] = None
    progress_callback: Optional[ProgressCallback] = None
    groups: Tuple[VertexGroup, ...] = ()

    @classmethod
    def create(
        cls,
        graph: Graph,
        user_settings: Optional[GraphMetricUserSettings] = None,
        calculation_settings: Optional[CalculationSettings] = None,
        cancellation_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
        groups: Sequence[VertexGroup] = (),
    ) -> "CalculationContext":
        detector = DuplicateEdgeDetector(graph)
        # Count now so the detector is read-only once calculators share it.
        detector.graph_contains_duplicate_edges
        return cls(
            graph=graph,
            user_settings=user_settings or GraphMetricUserSettings(),
            calculation_settings=calculation_settings or CalculationSettings(),
            duplicate_edge_detector=detector,
            cancellation_token=cancellation_token,
            progress_callback=progress_callback,
            groups=tuple(groups),
        )

    @property
    def is_cancellation_requested(self) -> bool:
        return self.cancellation_token is not None and self.cancellation_token.is_cancellation_requested

    @property
    def graph_contains_duplicate_edges(self) -> bool:
        return self.duplicate_edge_detector.graph_contains_duplicate_edges

    def should_calculate(self, metrics: GraphMetrics) -> bool:
        return self.user_settings.should_calculate(metrics)

    def report_progress(self, percent: int, message: str) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(ProgressReport(percent=percent, message=message))
        except Exception:
            logger.exception("Progress callback failed at %d%%; continuing", percent)


@dataclass(frozen=True)
class CalculationOutcome:
    """Terminal result of one calculator: columns, or cancelled with none."""

    columns: Tuple[GraphMetricColumn, ...] = field(default_factory=tuple)
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.cancelled

    @classmethod
    def success(cls, columns: Sequence[GraphMetricColumn] = ()) -> "CalculationOutcome":
        return cls(columns=tuple(columns))

    @classmethod
    def cancellation(cls) -> "CalculationOutcome":
        return cls(columns=(), cancelled=True)


class GraphMetricCalculator(ABC):
    """Base class for every metric calculator."""

    #: Human-readable description used in progress messages.
    description: str = "graph metrics"

    @abstractmethod
    def try_calculate_graph_metrics(self, graph: Graph, context: CalculationContext) -> CalculationOutcome:
        """Calculate this calculator's columns, or report cancellation."""

    def checkpoint(self, context: CalculationContext, calculations_so_far: int, total_calculations: int) -> bool:
        return checkpoint(context, self.description, calculations_so_far, total_calculations)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def checkpoint(
    context: Optional[CalculationContext],
    description: str,
    calculations_so_far: int,
    total_calculations: int,
) -> bool:
    """Poll for cancellation and report progress.

    Returns False when the caller asked to cancel.  A missing context never
    cancels.
    """
    if context is None:
        return True
    if context.is_cancellation_requested:
        logger.info("Calculating %s cancelled", description)
        return False

    percent = 0
    if total_calculations > 0:
        percent = int(100.0 * min(calculations_so_far, total_calculations) / total_calculations)
    context.report_progress(percent, f"Calculating {description}.")
    return True


def progress_interval(context: Optional[CalculationContext]) -> int:
    """Number of processed items between two checkpoints."""
    if context is None:
        return 1
    return context.calculation_settings.vertices_per_progress_report
