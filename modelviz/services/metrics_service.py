"""Public entry point for recording and querying provider call metrics."""

from typing import Any

from modelviz.config import Settings, load_settings
from modelviz.constants import WINDOW_MAX_ENTRIES
from modelviz.events import MetricsEventBus
from modelviz.exceptions import HistoricalStoreError
from modelviz.log import get_logger
from modelviz.models.domain.call_record import CallRecord, CallRecordCreate
from modelviz.models.domain.report import AggregatedReport
from modelviz.services.aggregation_service import aggregate_metrics, resolve_time_range
from modelviz.storage import (
    HistoricalStore,
    StorageCoordinator,
    WindowStore,
    create_window_backend,
)
from modelviz.types import MetricsEvent, TimeRange
from modelviz.utils import generate_record_id, get_current_timestamp_ms

logger = get_logger(__name__)


class MetricsService:
    """Records calls and serves recent, aggregated and historical views."""

    def __init__(
        self,
        coordinator: StorageCoordinator,
        event_bus: MetricsEventBus | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.event_bus = event_bus or MetricsEventBus()

    async def initialize(self) -> None:
        await self.coordinator.initialize()

    async def record_metric(self, data: CallRecordCreate | dict[str, Any]) -> CallRecord:
        """Assign an id and timestamp to ``data``, store it and notify listeners.

        Args:
            data: Call fields, as a model or a plain dict

        Returns:
            The stored record

        Raises:
            pydantic.ValidationError: If ``data`` is not a valid call
            StorageQuotaExceededError: If the recent window cannot be written
        """
        if isinstance(data, dict):
            data = CallRecordCreate.model_validate(data)

        fields = data.model_dump(exclude={"timestamp"})
        record = CallRecord(
            **fields,
            id=generate_record_id(),
            timestamp=(
                data.timestamp
                if data.timestamp is not None
                else get_current_timestamp_ms()
            ),
        )

        await self.coordinator.save_metric(record)
        logger.debug(
            f"Recorded {record.status.value} call to {record.provider}/{record.model} "
            f"({record.latency_ms:.0f}ms)"
        )

        await self.event_bus.publish(MetricsEvent.UPDATED)
        return record

    async def get_recent_metrics(self, limit: int = WINDOW_MAX_ENTRIES) -> list[CallRecord]:
        return await self.coordinator.get_recent_metrics(limit)

    async def get_aggregated_metrics(
        self, time_range: TimeRange | str | tuple[int, int] = TimeRange.TODAY
    ) -> AggregatedReport:
        """Aggregate historical records within ``time_range``.

        ``all`` reads the whole history, including records stamped after now.

        Raises:
            ValueError: If ``time_range`` is unknown or inverted
        """
        start_ms, end_ms = resolve_time_range(time_range)
        try:
            if not isinstance(time_range, tuple) and time_range == TimeRange.ALL:
                records = await self.coordinator.get_all_metrics()
            else:
                records = await self.coordinator.get_metrics_in_range(start_ms, end_ms)
        except HistoricalStoreError as exc:
            logger.error(f"Aggregation falling back to an empty report: {exc}")
            records = []
        return aggregate_metrics(records)

    async def get_all_metrics(self) -> list[CallRecord]:
        try:
            return await self.coordinator.get_all_metrics()
        except HistoricalStoreError as exc:
            logger.error(f"Failed to read full history: {exc}")
            return []

    async def cleanup_old_metrics(self) -> int:
        """Delete historical records past the retention period.

        Returns:
            Number of records deleted (0 if the historical store is unavailable)
        """
        try:
            return await self.coordinator.cleanup_old_data()
        except HistoricalStoreError as exc:
            logger.error(f"Retention cleanup skipped: {exc}")
            return 0

    async def clear_all(self) -> None:
        """Remove every stored metric from both tiers."""
        await self.coordinator.clear_all()
        logger.info("All metrics cleared")
        await self.event_bus.publish(MetricsEvent.CLEARED)

    def close(self) -> None:
        self.coordinator.close()


def build_metrics_service(settings: Settings) -> MetricsService:
    """Wire a metrics service from ``settings``."""
    backend = create_window_backend(settings.window_backend, settings.window_dir)
    window_store = WindowStore(
        backend,
        max_entries=settings.window_max_entries,
        size_threshold=settings.window_size_threshold,
        fallback_entries=settings.window_fallback_entries,
        disposable_prefixes=settings.disposable_prefixes,
    )
    historical_store = HistoricalStore.for_environment(
        settings.environment, db_path=settings.db_path
    )
    coordinator = StorageCoordinator(
        window_store, historical_store, retention_days=settings.retention_days
    )
    logger.info(
        f"Metrics service configured ({settings.environment.value}, "
        f"window backend: {settings.window_backend.value})"
    )
    return MetricsService(coordinator, MetricsEventBus())


_metrics_service: MetricsService | None = None


def get_metrics_service() -> MetricsService:
    """Process-wide metrics service, built from environment settings on first use."""
    global _metrics_service
    if _metrics_service is None:
        _metrics_service = build_metrics_service(load_settings())
    return _metrics_service


def reset_metrics_service() -> None:
    """Close and forget the process-wide service."""
    global _metrics_service
    if _metrics_service is not None:
        _metrics_service.close()
        _metrics_service = None
