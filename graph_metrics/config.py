"""Configuration helpers for the graph metrics engine."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from graph_metrics.settings import GraphMetrics, GraphMetricUserSettings

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_PATH = PROJECT_ROOT / ".env"

# Load environment variables early so downstream modules can rely on them.
load_dotenv(ENV_PATH, override=False)

VERTICES_PER_PROGRESS_REPORT_ENV = "GRAPH_METRICS_VERTICES_PER_PROGRESS_REPORT"
MERGES_PER_PROGRESS_REPORT_ENV = "GRAPH_METRICS_MERGES_PER_PROGRESS_REPORT"
EIGENVECTOR_MAX_ITER_ENV = "GRAPH_METRICS_EIGENVECTOR_MAX_ITER"
EIGENVECTOR_TOLERANCE_ENV = "GRAPH_METRICS_EIGENVECTOR_TOLERANCE"
PAGERANK_ALPHA_ENV = "GRAPH_METRICS_PAGERANK_ALPHA"
PAGERANK_MAX_ITER_ENV = "GRAPH_METRICS_PAGERANK_MAX_ITER"
PAGERANK_TOLERANCE_ENV = "GRAPH_METRICS_PAGERANK_TOLERANCE"
METRICS_TO_CALCULATE_ENV = "GRAPH_METRICS_TO_CALCULATE"
PROFILE_ENV = "GRAPH_METRICS_PROFILE"

DEFAULT_VERTICES_PER_PROGRESS_REPORT = 100
DEFAULT_MERGES_PER_PROGRESS_REPORT = 100
DEFAULT_EIGENVECTOR_MAX_ITER = 100
DEFAULT_EIGENVECTOR_TOLERANCE = 1.0e-6
DEFAULT_PAGERANK_ALPHA = 0.85
DEFAULT_PAGERANK_MAX_ITER = 100
DEFAULT_PAGERANK_TOLERANCE = 1.0e-6


@dataclass(frozen=True)
class CalculationSettings:
    """Tuning knobs shared by the metric calculators."""

    vertices_per_progress_report: int = DEFAULT_VERTICES_PER_PROGRESS_REPORT
    merges_per_progress_report: int = DEFAULT_MERGES_PER_PROGRESS_REPORT
    eigenvector_max_iter: int = DEFAULT_EIGENVECTOR_MAX_ITER
    eigenvector_tolerance: float = DEFAULT_EIGENVECTOR_TOLERANCE
    pagerank_alpha: float = DEFAULT_PAGERANK_ALPHA
    pagerank_max_iter: int = DEFAULT_PAGERANK_MAX_ITER
    pagerank_tolerance: float = DEFAULT_PAGERANK_TOLERANCE


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_positive_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer; received '{raw}'.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive; received {value}.")
    return value


def _get_positive_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number; received '{raw}'.") from exc
    if not value > 0:
        raise RuntimeError(f"{name} must be positive; received {value}.")
    return value


def get_calculation_settings() -> CalculationSettings:
    """Resolve calculator settings from environment with sensible defaults."""

    alpha = _get_positive_float(PAGERANK_ALPHA_ENV, DEFAULT_PAGERANK_ALPHA)
    if alpha >= 1.0:
        raise RuntimeError(f"{PAGERANK_ALPHA_ENV} must be below 1.0; received {alpha}.")

    return CalculationSettings(
        vertices_per_progress_report=_get_positive_int(
            VERTICES_PER_PROGRESS_REPORT_ENV, DEFAULT_VERTICES_PER_PROGRESS_REPORT
        ),
        merges_per_progress_report=_get_positive_int(
            MERGES_PER_PROGRESS_REPORT_ENV, DEFAULT_MERGES_PER_PROGRESS_REPORT
        ),
        eigenvector_max_iter=_get_positive_int(EIGENVECTOR_MAX_ITER_ENV, DEFAULT_EIGENVECTOR_MAX_ITER),
        eigenvector_tolerance=_get_positive_float(
            EIGENVECTOR_TOLERANCE_ENV, DEFAULT_EIGENVECTOR_TOLERANCE
        ),
        pagerank_alpha=alpha,
        pagerank_max_iter=_get_positive_int(PAGERANK_MAX_ITER_ENV, DEFAULT_PAGERANK_MAX_ITER),
        pagerank_tolerance=_get_positive_float(PAGERANK_TOLERANCE_ENV, DEFAULT_PAGERANK_TOLERANCE),
    )


def get_metric_user_settings() -> GraphMetricUserSettings:
    """Which metrics to calculate, from GRAPH_METRICS_TO_CALCULATE (default: all)."""

    raw = _get_env(METRICS_TO_CALCULATE_ENV)
    if raw is None:
        return GraphMetricUserSettings()
    try:
        metrics = GraphMetrics.parse(raw.split(","))
    except ValueError as exc:
        raise RuntimeError(f"{METRICS_TO_CALCULATE_ENV} is invalid: {exc}") from exc
    return GraphMetricUserSettings(graph_metrics_to_calculate=metrics)


def profiling_enabled() -> bool:
    raw = _get_env(PROFILE_ENV, "false")
    return raw.strip().lower() in {"1", "true", "yes", "on"}
