"""Runs a set of graph metric calculators, synchronously or on a worker thread."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from graph_metrics.calculators.base import (
    CalculationContext,
    CancellationToken,
    GraphMetricCalculator,
    GraphMetricError,
    ProgressCallback,
    VertexGroup,
)
from graph_metrics.calculators.brandes import BrandesCentralityCalculator
from graph_metrics.calculators.clustering import ClusteringCoefficientCalculator
from graph_metrics.calculators.clusters import ClusterCalculator
from graph_metrics.calculators.columns import GraphMetricColumn, GraphMetricResults
from graph_metrics.calculators.components import ConnectedComponentCalculator
from graph_metrics.calculators.degree import (
    DEGREE_COLUMN,
    IN_DEGREE_COLUMN,
    OUT_DEGREE_COLUMN,
    VertexDegreeCalculator,
)
from graph_metrics.calculators.eigenvector import EigenvectorCentralityCalculator
from graph_metrics.calculators.group import GroupMetricCalculator
from graph_metrics.calculators.overall import OverallMetricCalculator
from graph_metrics.calculators.pagerank import PageRankCalculator
from graph_metrics.config import CalculationSettings, get_calculation_settings
from graph_metrics.graph.model import Graph
from graph_metrics.performance_profiler import profile_operation, profile_phase
from graph_metrics.settings import GraphMetrics, GraphMetricUserSettings

logger = logging.getLogger(__name__)

OPERATION = "calculate_graph_metrics"
MAX_LOG_ENTRIES = 1000


class CalculationInProgressError(GraphMetricError):
    """An asynchronous calculation was started while another was running."""


@dataclass(frozen=True)
class CalculationCompletedEvent:
    """Passed to the completion callback of an asynchronous run.

    Exactly one of ``results``, ``cancelled`` and ``error`` is meaningful.
    """

    results: Optional[GraphMetricResults] = None
    cancelled: bool = False
    error: Optional[BaseException] = None


CompletedCallback = Callable[[CalculationCompletedEvent], None]


def default_calculators() -> List[GraphMetricCalculator]:
    return [
        VertexDegreeCalculator(),
        BrandesCentralityCalculator(),
        EigenvectorCentralityCalculator(),
        PageRankCalculator(),
        ClusteringCoefficientCalculator(),
        ConnectedComponentCalculator(),
        ClusterCalculator(),
        OverallMetricCalculator(),
        GroupMetricCalculator(),
    ]


def filter_degree_columns(
    graph: Graph, columns: Iterable[GraphMetricColumn], user_settings: GraphMetricUserSettings
) -> List[GraphMetricColumn]:
    """Keep in/out-degree for directed graphs and degree for the others."""
    wanted = {
        IN_DEGREE_COLUMN: graph.is_directed and user_settings.should_calculate(GraphMetrics.IN_DEGREE),
        OUT_DEGREE_COLUMN: graph.is_directed and user_settings.should_calculate(GraphMetrics.OUT_DEGREE),
        DEGREE_COLUMN: not graph.is_directed and user_settings.should_calculate(GraphMetrics.DEGREE),
    }
    return [column for column in columns if wanted.get(column.name, True)]


class GraphMetricCalculationManager:
    """Runs calculators in order and aggregates their columns.

    Results are all-or-nothing: a cancelled or failed run yields no columns.
    At most one asynchronous run is in flight per manager.
    """

    def __init__(
        self,
        calculators: Optional[Sequence[GraphMetricCalculator]] = None,
        calculation_settings: Optional[CalculationSettings] = None,
    ):
        self._calculators = list(calculators) if calculators is not None else default_calculators()
        self._calculation_settings = calculation_settings
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancellation_token: Optional[CancellationToken] = None
        self._status: Dict[str, Any] = {
            "status": "idle",
            "started_at": None,
            "finished_at": None,
            "error": None,
            "progress": None,
            "log": [],
        }

    @property
    def calculators(self) -> List[GraphMetricCalculator]:
        return list(self._calculators)

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._status["status"] == "running"

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            status = self._status.copy()
            status["log"] = list(self._status["log"])
            return status

    def calculate_graph_metrics(
        self,
        graph: Graph,
        user_settings: Optional[GraphMetricUserSettings] = None,
        groups: Sequence[VertexGroup] = (),
        progress_callback: Optional[ProgressCallback] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[GraphMetricResults]:
        """Run every calculator on the calling thread.

        Returns None if cancelled.  Exceptions raised by a calculator
        propagate.
        """
        user_settings = user_settings or GraphMetricUserSettings()
        settings = self._calculation_settings or get_calculation_settings()
        context = CalculationContext.create(
            graph,
            user_settings=user_settings,
            calculation_settings=settings,
            cancellation_token=cancellation_token,
            progress_callback=progress_callback,
            groups=groups,
        )

        results = GraphMetricResults()
        metadata = {"vertices": graph.vertex_count, "edges": graph.edge_count}
        with profile_operation(OPERATION, metadata):
            for calculator in self._calculators:
                logger.debug("Running %r", calculator)
                with profile_phase(type(calculator).__name__, operation=OPERATION):
                    outcome = calculator.try_calculate_graph_metrics(graph, context)
                if outcome.cancelled:
                    logger.info("Graph metric calculation cancelled during %s", calculator.description)
                    return None
                results.extend(filter_degree_columns(graph, outcome.columns, user_settings))

        logger.info(
            "Calculated %d graph metric columns for %d vertices",
            len(results.columns),
            graph.vertex_count,
        )
        return results

    def calculate_graph_metrics_async(
        self,
        graph: Graph,
        user_settings: Optional[GraphMetricUserSettings] = None,
        groups: Sequence[VertexGroup] = (),
        progress_callback: Optional[ProgressCallback] = None,
        completed_callback: Optional[CompletedCallback] = None,
    ) -> None:
        """Start a run on a daemon thread.

        Raises CalculationInProgressError if a run is already in flight.  The
        graph must not be modified until ``completed_callback`` fires.
        """
        with self._lock:
            if self._status["status"] == "running":
                raise CalculationInProgressError("A graph metric calculation is already in progress")

            token = CancellationToken()
            self._cancellation_token = token
            self._status = {
                "status": "running",
                "started_at": time.time(),
                "finished_at": None,
                "error": None,
                "progress": None,
                "log": [],
            }

            def _on_progress(report):
                with self._lock:
                    self._status["progress"] = report.percent
                self.log(report.message)
                if progress_callback is not None:
                    progress_callback(report)

            def _wrapper():
                event = None
                try:
                    results = self.calculate_graph_metrics(
                        graph,
                        user_settings=user_settings,
                        groups=groups,
                        progress_callback=_on_progress,
                        cancellation_token=token,
                    )
                    with self._lock:
                        self._status["status"] = "cancelled" if results is None else "completed"
                        self._status["finished_at"] = time.time()
                    event = CalculationCompletedEvent(results=results, cancelled=results is None)
                except Exception as e:
                    logger.exception("Graph metric calculation failed")
                    with self._lock:
                        self._status["status"] = "failed"
                        self._status["error"] = str(e)
                        self._status["finished_at"] = time.time()
                    event = CalculationCompletedEvent(error=e)
                finally:
                    if completed_callback is not None and event is not None:
                        completed_callback(event)

            self._thread = threading.Thread(target=_wrapper, name="graph-metrics", daemon=True)
            self._thread.start()

    def cancel(self) -> None:
        """Ask the running calculation to stop at its next checkpoint."""
        with self._lock:
            token = self._cancellation_token
        if token is not None:
            token.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the running calculation finishes; False on timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def log(self, message: str) -> None:
        with self._lock:
            entry = f"[{time.strftime('%H:%M:%S')}] {message}"
            self._status["log"].append(entry)
            if len(self._status["log"]) > MAX_LOG_ENTRIES:
                self._status["log"] = self._status["log"][-MAX_LOG_ENTRIES:]
        logger.info(message)
