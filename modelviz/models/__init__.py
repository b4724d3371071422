"""Unified models package for the metrics engine."""

from modelviz.models.domain.call_record import (
    CallRecord,
    CallRecordBase,
    CallRecordCreate,
)
from modelviz.models.domain.report import (
    AggregatedReport,
    DailyStats,
    HourlyStats,
    ModelStats,
    ProviderStats,
    ReportTimeRange,
)
from modelviz.models.rows import CallRecordRow

__all__ = [
    "AggregatedReport",
    "CallRecord",
    "CallRecordBase",
    "CallRecordCreate",
    "CallRecordRow",
    "DailyStats",
    "HourlyStats",
    "ModelStats",
    "ProviderStats",
    "ReportTimeRange",
]
