"""Single write/read surface over the window and historical stores."""

import asyncio

from modelviz.constants import RETENTION_DAYS, WINDOW_MAX_ENTRIES
from modelviz.exceptions import HistoricalStoreError
from modelviz.log import get_logger
from modelviz.models.domain.call_record import CallRecord
from modelviz.storage.historical_store import HistoricalStore
from modelviz.storage.window_store import WindowStore
from modelviz.utils import days_ago_ms

logger = get_logger(__name__)


class StorageCoordinator:
    """Coordinates writes and reads between the two storage tiers.

    Durability is asymmetric: a failed historical write is logged and
    dropped, while the window write is mandatory and its errors propagate.
    Range and full-history reads go to the historical store; recent reads
    go to the window.
    """

    def __init__(
        self,
        window_store: WindowStore,
        historical_store: HistoricalStore,
        retention_days: int = RETENTION_DAYS,
    ) -> None:
        if retention_days <= 0:
            raise ValueError("retention_days must be positive")

        self.window_store = window_store
        self.historical_store = historical_store
        self.retention_days = retention_days
        # Guards the window's load-append-save cycle
        self._window_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Warm up the historical store; failures only degrade durability."""
        try:
            await self.historical_store.initialize()
        except HistoricalStoreError as exc:
            logger.error(f"Historical store unavailable, continuing without it: {exc}")

    async def save_metric(self, record: CallRecord) -> None:
        """Persist ``record`` to both tiers, historical first."""
        try:
            await self.historical_store.save_metric(record)
        except HistoricalStoreError as exc:
            logger.error(
                f"Failed to archive metric {record.id} ({record.provider}): {exc}"
            )

        async with self._window_lock:
            recent = await self.window_store.load()
            recent.append(record)
            await self.window_store.save(recent)

    async def get_recent_metrics(self, limit: int = WINDOW_MAX_ENTRIES) -> list[CallRecord]:
        """Last ``limit`` window records, most recent last."""
        if limit <= 0:
            return []
        recent = await self.window_store.load()
        return recent[-limit:]

    async def get_metrics_in_range(self, start_ms: int, end_ms: int) -> list[CallRecord]:
        return await self.historical_store.get_metrics_in_range(start_ms, end_ms)

    async def get_metrics_by_provider(
        self, provider: str, limit: int | None = None
    ) -> list[CallRecord]:
        return await self.historical_store.get_metrics_by_provider(provider, limit)

    async def get_all_metrics(self) -> list[CallRecord]:
        return await self.historical_store.get_all_metrics()

    async def cleanup_old_data(self) -> int:
        """Apply the retention policy to the historical store.

        Returns:
            Number of records deleted
        """
        boundary = days_ago_ms(self.retention_days)
        deleted = await self.historical_store.cleanup_old_metrics(boundary)
        logger.info(
            f"Retention cleanup removed {deleted} metrics older than "
            f"{self.retention_days} days"
        )
        return deleted

    async def clear_all(self) -> None:
        """Clear both tiers, completing only when both are done."""
        async with self._window_lock:
            await asyncio.gather(
                self.window_store.clear(),
                self.historical_store.clear(),
            )

    def close(self) -> None:
        self.historical_store.close()
