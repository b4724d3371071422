"""Metrics API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_metrics_service
from api.literals import (
    METRICS_AGGREGATED_PATH,
    METRICS_BASE_PATH,
    METRICS_CLEANUP_PATH,
    METRICS_RECENT_PATH,
    RECENT_LIMIT_MAX,
)
from api.models import CleanupResponse
from api.utils.error_handler import handle_async_api_operation
from modelviz.constants import WINDOW_MAX_ENTRIES
from modelviz.models import AggregatedReport, CallRecord, CallRecordCreate
from modelviz.services.metrics_service import MetricsService
from modelviz.types import TimeRange

router = APIRouter(prefix=METRICS_BASE_PATH, tags=["metrics"])

MetricsServiceDep = Annotated[MetricsService, Depends(get_metrics_service)]


@router.post("", response_model=CallRecord, status_code=status.HTTP_201_CREATED)
async def record_metric(
    payload: CallRecordCreate,
    metrics_service: MetricsServiceDep,
) -> CallRecord:
    """Record one provider call.

    Returns:
        The stored record with its assigned id and timestamp
    """

    async def record_operation() -> CallRecord:
        return await metrics_service.record_metric(payload)

    return await handle_async_api_operation(
        record_operation, error_message="Failed to record metric"
    )


@router.get(METRICS_RECENT_PATH, response_model=list[CallRecord])
async def get_recent_metrics(
    metrics_service: MetricsServiceDep,
    limit: int = Query(
        WINDOW_MAX_ENTRIES, ge=0, le=RECENT_LIMIT_MAX, description="Records to return"
    ),
) -> list[CallRecord]:
    """Most recent calls from the recent window, oldest first."""
    return await metrics_service.get_recent_metrics(limit)


@router.get(METRICS_AGGREGATED_PATH, response_model=AggregatedReport)
async def get_aggregated_metrics(
    metrics_service: MetricsServiceDep,
    time_range: str | None = Query(
        None,
        alias="range",
        description="One of: " + ", ".join(member.value for member in TimeRange),
    ),
    start: int | None = Query(None, description="Range start (ms since epoch)"),
    end: int | None = Query(None, description="Range end (ms since epoch)"),
) -> AggregatedReport:
    """Aggregated statistics for a symbolic range or explicit bounds.

    Explicit ``start``/``end`` take precedence over ``range``; with neither
    the report covers today.

    Raises:
        HTTPException: 400 for an unknown range or incomplete/inverted bounds
    """

    async def aggregate_operation() -> AggregatedReport:
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValueError("Both start and end are required for explicit bounds")
            return await metrics_service.get_aggregated_metrics((start, end))
        return await metrics_service.get_aggregated_metrics(
            time_range or TimeRange.TODAY
        )

    return await handle_async_api_operation(
        aggregate_operation, error_message="Failed to aggregate metrics"
    )


@router.post(METRICS_CLEANUP_PATH, response_model=CleanupResponse)
async def cleanup_old_metrics(metrics_service: MetricsServiceDep) -> CleanupResponse:
    """Apply the retention policy to the historical store."""
    deleted = await metrics_service.cleanup_old_metrics()
    return CleanupResponse(deleted=deleted)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_metrics(metrics_service: MetricsServiceDep) -> Response:
    """Delete every stored metric."""
    await handle_async_api_operation(
        metrics_service.clear_all, error_message="Failed to clear metrics"
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
