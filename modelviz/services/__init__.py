"""Metrics services package."""

from .aggregation_service import (
    aggregate_metrics,
    calculate_percentile,
    resolve_time_range,
)
from .metrics_service import (
    MetricsService,
    build_metrics_service,
    get_metrics_service,
    reset_metrics_service,
)

__all__ = [
    "MetricsService",
    "aggregate_metrics",
    "build_metrics_service",
    "calculate_percentile",
    "get_metrics_service",
    "reset_metrics_service",
    "resolve_time_range",
]
