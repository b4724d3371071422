"""Common type definitions for the metrics engine."""

from enum import Enum
from typing import TypeAlias

# Absolute [start, end] bounds in milliseconds since epoch
TimeBounds: TypeAlias = tuple[int, int]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class InputFormat(str, Enum):
    """Format of the prompt sent to the provider."""

    JSON = "json"
    TEXT = "text"
    CODE = "code"


class CallStatus(str, Enum):
    """Outcome of a provider call. Anything but SUCCESS counts as failed."""

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class TimeRange(str, Enum):
    """Symbolic time ranges understood by the aggregation layer."""

    HOUR = "hour"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class WindowBackendType(str, Enum):
    """Storage medium behind the recent-window store."""

    MEMORY = "memory"
    FILE = "file"
    NULL = "null"


class MetricsEvent(str, Enum):
    """Notifications published after the stored metrics change."""

    UPDATED = "metrics-updated"
    CLEARED = "metrics-cleared"
