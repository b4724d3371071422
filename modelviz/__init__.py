"""Metrics aggregation and tiered storage for AI provider calls."""

from .config import Settings, load_settings
from .events import MetricsEventBus
from .log import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .models import AggregatedReport, CallRecord, CallRecordCreate
from .services import MetricsService, get_metrics_service
from .types import CallStatus, Environment, InputFormat, MetricsEvent, TimeRange

__all__ = [
    "AggregatedReport",
    "CallRecord",
    "CallRecordCreate",
    "CallStatus",
    "Environment",
    "InputFormat",
    "MetricsEvent",
    "MetricsEventBus",
    "MetricsService",
    "Settings",
    "get_logger",
    "get_metrics_service",
    "load_settings",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
]
