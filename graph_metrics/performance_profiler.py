"""Timing utilities for graph metric calculations.

Provides context managers that time an orchestration run and the calculators
inside it, collecting structured reports.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from graph_metrics.config import profiling_enabled

logger = logging.getLogger(__name__)


@dataclass
class TimingMetric:
    """Container for a single timing measurement."""

    name: str
    duration_ms: float
    timestamp: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        meta_str = ", ".join(f"{k}={v}" for k, v in self.metadata.items()) if self.metadata else ""
        return f"{self.name}: {self.duration_ms:.2f}ms" + (f" ({meta_str})" if meta_str else "")


@dataclass
class PerformanceReport:
    """Timings for one orchestration run, broken down by calculator."""

    operation: str
    total_duration_ms: float
    phases: List[TimingMetric] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_phase(self, phase: TimingMetric) -> None:
        self.phases.append(phase)

    def get_phase_breakdown(self) -> Dict[str, float]:
        """Percentage of the total spent in each phase."""
        if self.total_duration_ms == 0:
            return {}
        return {
            phase.name: (phase.duration_ms / self.total_duration_ms) * 100
            for phase in self.phases
        }

    def format_report(self) -> str:
        lines = [
            f"\n{'=' * 60}",
            f"PERFORMANCE REPORT: {self.operation}",
            f"{'=' * 60}",
            f"Total Duration: {self.total_duration_ms:.2f}ms ({self.total_duration_ms / 1000:.3f}s)",
        ]

        if self.metadata:
            lines.append("\nMetadata:")
            for key, value in self.metadata.items():
                lines.append(f"  {key}: {value}")

        if self.phases:
            lines.append("\nCalculator Breakdown:")
            breakdown = self.get_phase_breakdown()
            for phase in sorted(self.phases, key=lambda p: p.duration_ms, reverse=True):
                pct = breakdown.get(phase.name, 0)
                lines.append(f"  [{pct:5.1f}%] {phase.name}: {phase.duration_ms:.2f}ms")

        lines.append("=" * 60)
        return "\n".join(lines)


class PerformanceProfiler:
    """Process-wide collector of performance reports."""

    _instance = None
    _enabled = profiling_enabled()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._reports = []
            cls._instance._active_reports = {}
            cls._instance._lock = threading.Lock()
        return cls._instance

    @classmethod
    def enable(cls) -> None:
        cls._enabled = True

    @classmethod
    def disable(cls) -> None:
        cls._enabled = False

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    def start_report(self, operation: str, metadata: Optional[Dict[str, Any]] = None) -> PerformanceReport:
        report = PerformanceReport(operation=operation, total_duration_ms=0.0, metadata=metadata or {})
        with self._lock:
            self._active_reports[operation] = (report, time.perf_counter())
        return report

    def finish_report(self, operation: str) -> Optional[PerformanceReport]:
        with self._lock:
            active = self._active_reports.pop(operation, None)
            if active is None:
                logger.warning(f"No active report found for operation: {operation}")
                return None
            report, start = active
            report.total_duration_ms = (time.perf_counter() - start) * 1000
            self._reports.append(report)
        return report

    def add_phase_to_report(self, operation: str, phase: TimingMetric) -> None:
        with self._lock:
            active = self._active_reports.get(operation)
            if active is not None:
                active[0].add_phase(phase)

    def get_all_reports(self) -> List[PerformanceReport]:
        with self._lock:
            return list(self._reports)

    def clear_reports(self) -> None:
        with self._lock:
            self._reports.clear()
            self._active_reports.clear()

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """Count/total/avg/min/max duration per operation."""
        by_operation = defaultdict(list)
        for report in self.get_all_reports():
            by_operation[report.operation].append(report.total_duration_ms)

        return {
            operation: {
                "count": len(durations),
                "total_ms": sum(durations),
                "avg_ms": sum(durations) / len(durations),
                "min_ms": min(durations),
                "max_ms": max(durations),
            }
            for operation, durations in by_operation.items()
        }


_profiler = PerformanceProfiler()


@contextmanager
def profile_operation(operation: str, metadata: Optional[Dict[str, Any]] = None, verbose: bool = True):
    """Time a complete operation.

    Usage:
        with profile_operation("calculate_graph_metrics", {"vertices": 1000}):
            ...
    """
    if not PerformanceProfiler.is_enabled():
        yield None
        return

    report = _profiler.start_report(operation, metadata)
    try:
        yield report
    finally:
        final_report = _profiler.finish_report(operation)
        if final_report and verbose:
            logger.info(final_report.format_report())


@contextmanager
def profile_phase(phase_name: str, operation: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
    """Time one phase, attaching it to ``operation``'s report when given."""
    if not PerformanceProfiler.is_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        metric = TimingMetric(
            name=phase_name,
            duration_ms=duration_ms,
            timestamp=time.time(),
            metadata=metadata or {},
        )
        if operation:
            _profiler.add_phase_to_report(operation, metric)
        logger.debug(f"Phase [{phase_name}]: {duration_ms:.2f}ms")


def get_profiler() -> PerformanceProfiler:
    return _profiler
