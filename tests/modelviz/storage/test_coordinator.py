"""Tests for the storage coordinator."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from modelviz.constants import MS_PER_DAY
from modelviz.exceptions import HistoricalStoreError, StorageQuotaExceededError
from modelviz.storage import (
    HistoricalStore,
    MemoryBackend,
    StorageCoordinator,
    WindowStore,
)
from modelviz.utils import get_current_timestamp_ms


@pytest.mark.asyncio
async def test_save_metric_writes_both_tiers(
    coordinator: StorageCoordinator,
    historical_store: HistoricalStore,
    window_store: WindowStore,
    make_record,
) -> None:
    record = make_record()

    await coordinator.save_metric(record)

    assert await window_store.load() == [record]
    assert await historical_store.get_all_metrics() == [record]


@pytest.mark.asyncio
async def test_historical_failure_does_not_block_window(
    coordinator: StorageCoordinator, historical_store: HistoricalStore, make_record
) -> None:
    record = make_record()

    with patch.object(
        historical_store,
        "save_metric",
        AsyncMock(side_effect=HistoricalStoreError("database is locked")),
    ):
        await coordinator.save_metric(record)

    assert await coordinator.get_recent_metrics() == [record]


@pytest.mark.asyncio
async def test_window_failure_propagates(historical_store: HistoricalStore, make_record) -> None:
    coordinator = StorageCoordinator(
        WindowStore(MemoryBackend(quota_bytes=50)), historical_store
    )
    record = make_record()

    with pytest.raises(StorageQuotaExceededError):
        await coordinator.save_metric(record)

    # The historical write happens first and is kept
    assert await historical_store.get_all_metrics() == [record]


@pytest.mark.asyncio
async def test_concurrent_saves_do_not_lose_updates(
    coordinator: StorageCoordinator, make_record
) -> None:
    records = [make_record(timestamp=1_000 + i) for i in range(30)]

    await asyncio.gather(*(coordinator.save_metric(r) for r in records))

    recent = await coordinator.get_recent_metrics()
    assert sorted(r.id for r in recent) == sorted(r.id for r in records)


@pytest.mark.asyncio
async def test_get_recent_metrics_limit(coordinator: StorageCoordinator, make_record) -> None:
    records = [make_record(timestamp=1_000 + i) for i in range(5)]
    for record in records:
        await coordinator.save_metric(record)

    assert await coordinator.get_recent_metrics(limit=2) == records[-2:]
    assert await coordinator.get_recent_metrics(limit=50) == records
    assert await coordinator.get_recent_metrics(limit=0) == []


@pytest.mark.asyncio
async def test_range_reads_come_from_history(
    coordinator: StorageCoordinator, window_store: WindowStore, make_record
) -> None:
    record = make_record(timestamp=10_000)
    await coordinator.save_metric(record)
    await window_store.clear()

    assert await coordinator.get_metrics_in_range(9_000, 11_000) == [record]
    assert await coordinator.get_metrics_by_provider("OpenAI") == [record]
    assert await coordinator.get_all_metrics() == [record]


@pytest.mark.asyncio
async def test_cleanup_old_data_uses_retention(
    coordinator: StorageCoordinator, make_record
) -> None:
    now = get_current_timestamp_ms()
    stale = make_record(timestamp=now - 91 * MS_PER_DAY)
    fresh = make_record(timestamp=now - 89 * MS_PER_DAY)
    await coordinator.save_metric(stale)
    await coordinator.save_metric(fresh)

    assert await coordinator.cleanup_old_data() == 1
    assert await coordinator.get_all_metrics() == [fresh]
    assert await coordinator.cleanup_old_data() == 0


@pytest.mark.asyncio
async def test_clear_all_empties_both_tiers(
    coordinator: StorageCoordinator, make_record
) -> None:
    await coordinator.save_metric(make_record())

    await coordinator.clear_all()

    assert await coordinator.get_recent_metrics() == []
    assert await coordinator.get_all_metrics() == []


@pytest.mark.asyncio
async def test_initialize_swallows_historical_failure(window_store: WindowStore) -> None:
    def broken_factory():
        raise OSError("no disk")

    store = HistoricalStore(broken_factory)
    coordinator = StorageCoordinator(window_store, store)

    await coordinator.initialize()

    assert store.is_initialized is False


def test_retention_must_be_positive(
    window_store: WindowStore, historical_store: HistoricalStore
) -> None:
    with pytest.raises(ValueError):
        StorageCoordinator(window_store, historical_store, retention_days=0)
