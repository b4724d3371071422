"""Tests for the SQLite historical store."""

import asyncio
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from modelviz.constants import MS_PER_DAY, SCHEMA_VERSION
from modelviz.database.engine import create_database_engine, get_schema_version
from modelviz.database.repository import CallRecordRepository
from modelviz.exceptions import HistoricalStoreError
from modelviz.models import CallRecordRow
from modelviz.storage import HistoricalStore
from modelviz.types import CallStatus, Environment, InputFormat
from modelviz.utils import get_current_timestamp_ms


@pytest.mark.asyncio
async def test_initialize_creates_schema(tmp_path: Path) -> None:
    db_path = tmp_path / "history.db"
    engine = create_database_engine(Environment.TESTING, db_path=db_path)
    store = HistoricalStore(lambda: engine)

    assert store.is_initialized is False
    await store.initialize()
    await store.initialize()

    assert store.is_initialized is True
    inspector = inspect(engine)
    assert "call_record" in inspector.get_table_names()
    index_names = {index["name"] for index in inspector.get_indexes("call_record")}
    assert index_names == {
        "idx_call_record_timestamp",
        "idx_call_record_provider",
        "idx_call_record_model",
        "idx_call_record_status",
        "idx_call_record_provider_timestamp",
    }
    assert get_schema_version(engine) == SCHEMA_VERSION
    store.close()


@pytest.mark.asyncio
async def test_concurrent_initialize_runs_once(tmp_path: Path) -> None:
    calls = 0

    def factory():
        nonlocal calls
        calls += 1
        return create_database_engine(Environment.TESTING, db_path=tmp_path / "h.db")

    store = HistoricalStore(factory)

    await asyncio.gather(*(store.initialize() for _ in range(10)))

    assert calls == 1
    store.close()


@pytest.mark.asyncio
async def test_failed_initialize_can_be_retried(tmp_path: Path) -> None:
    attempts = 0

    def flaky_factory():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise OperationalError("connect", {}, Exception("database is locked"))
        return create_database_engine(Environment.TESTING, db_path=tmp_path / "h.db")

    store = HistoricalStore(flaky_factory)

    with pytest.raises(HistoricalStoreError):
        await store.initialize()
    assert store.is_initialized is False

    await store.initialize()
    assert store.is_initialized is True
    store.close()


@pytest.mark.asyncio
async def test_round_trip_is_field_for_field(
    historical_store: HistoricalStore, make_record
) -> None:
    record = make_record(
        input_format=InputFormat.JSON,
        status=CallStatus.ERROR,
        error_message="upstream 502",
        confidence=0.75,
    )

    await historical_store.save_metric(record)
    fetched = await historical_store.get_metrics_in_range(
        record.timestamp - 1, record.timestamp + 1
    )

    assert fetched == [record]


@pytest.mark.asyncio
async def test_save_replaces_record_with_same_id(
    historical_store: HistoricalStore, make_record
) -> None:
    record = make_record(id="fixed-id", latency_ms=100.0)
    await historical_store.save_metric(record)
    await historical_store.save_metric(record.model_copy(update={"latency_ms": 250.0}))

    stored = await historical_store.get_all_metrics()

    assert len(stored) == 1
    assert stored[0].latency_ms == 250.0


@pytest.mark.asyncio
async def test_range_is_inclusive_and_ordered(
    historical_store: HistoricalStore, make_record
) -> None:
    records = [make_record(timestamp=ts) for ts in (4_000, 1_000, 3_000, 2_000, 5_000)]
    await historical_store.save_metrics_batch(records)

    fetched = await historical_store.get_metrics_in_range(2_000, 4_000)

    assert [r.timestamp for r in fetched] == [2_000, 3_000, 4_000]


@pytest.mark.asyncio
async def test_batch_save_and_count(historical_store: HistoricalStore, make_record) -> None:
    await historical_store.save_metrics_batch([make_record() for _ in range(25)])
    await historical_store.save_metrics_batch([])

    assert await historical_store.get_count() == 25


@pytest.mark.asyncio
async def test_batch_is_all_or_nothing(
    historical_store: HistoricalStore, make_record
) -> None:
    await historical_store.initialize()

    with patch.object(
        CallRecordRepository,
        "upsert_many",
        side_effect=OperationalError("insert", {}, Exception("disk I/O error")),
    ):
        with pytest.raises(HistoricalStoreError):
            await historical_store.save_metrics_batch([make_record(), make_record()])

    assert await historical_store.get_count() == 0


@pytest.mark.asyncio
async def test_get_metrics_by_provider(
    historical_store: HistoricalStore, make_record
) -> None:
    await historical_store.save_metrics_batch(
        [
            make_record(provider="OpenAI", timestamp=1_000),
            make_record(provider="Anthropic", timestamp=2_000),
            make_record(provider="OpenAI", timestamp=3_000),
            make_record(provider="OpenAI", timestamp=4_000),
        ]
    )

    openai = await historical_store.get_metrics_by_provider("OpenAI")
    limited = await historical_store.get_metrics_by_provider("OpenAI", limit=2)

    assert [r.timestamp for r in openai] == [1_000, 3_000, 4_000]
    assert len(limited) == 2
    assert await historical_store.get_metrics_by_provider("Mistral") == []


@pytest.mark.asyncio
async def test_cleanup_removes_only_old_records(
    historical_store: HistoricalStore, make_record
) -> None:
    now = get_current_timestamp_ms()
    boundary = now - 90 * MS_PER_DAY
    old = [make_record(timestamp=boundary - MS_PER_DAY * d) for d in (1, 5, 30)]
    recent = [make_record(timestamp=boundary), make_record(timestamp=now)]
    await historical_store.save_metrics_batch(old + recent)

    deleted = await historical_store.cleanup_old_metrics(boundary)

    assert deleted == 3
    remaining = await historical_store.get_all_metrics()
    assert all(r.timestamp >= boundary for r in remaining)
    assert sorted(r.id for r in remaining) == sorted(r.id for r in recent)
    assert await historical_store.cleanup_old_metrics(boundary) == 0


@pytest.mark.asyncio
async def test_clear(historical_store: HistoricalStore, make_record) -> None:
    await historical_store.save_metrics_batch([make_record() for _ in range(3)])

    await historical_store.clear()

    assert await historical_store.get_count() == 0


@pytest.mark.asyncio
async def test_close_then_read_reinitializes(
    historical_store: HistoricalStore, make_record
) -> None:
    record = make_record()
    await historical_store.save_metric(record)

    historical_store.close()
    assert historical_store.is_initialized is False

    assert await historical_store.get_all_metrics() == [record]
    assert historical_store.is_initialized is True


@pytest.mark.asyncio
async def test_unreadable_row_raises_store_error(tmp_path: Path, make_record) -> None:
    engine = create_database_engine(Environment.TESTING, db_path=tmp_path / "h.db")
    store = HistoricalStore(lambda: engine)
    await store.save_metric(make_record())

    corrupt = CallRecordRow.from_record(make_record())
    corrupt.status = "exploded"
    with Session(engine) as session:
        CallRecordRepository(session).upsert(corrupt)

    with pytest.raises(HistoricalStoreError, match="read all metrics"):
        await store.get_all_metrics()
    with pytest.raises(HistoricalStoreError):
        await store.get_metrics_in_range(0, get_current_timestamp_ms() + MS_PER_DAY)
    store.close()


@pytest.mark.asyncio
async def test_initialization_failure_raises_store_error() -> None:
    factory = MagicMock(side_effect=OSError("read-only file system"))
    store = HistoricalStore(factory)

    with pytest.raises(HistoricalStoreError, match="Initialization failed"):
        await store.save_metric(MagicMock())


@pytest.mark.asyncio
async def test_newer_schema_version_is_refused(tmp_path: Path) -> None:
    db_path = tmp_path / "future.db"
    engine = create_database_engine(Environment.TESTING, db_path=db_path)
    with engine.begin() as conn:
        conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")

    store = HistoricalStore(lambda: engine)

    with pytest.raises(HistoricalStoreError):
        await store.initialize()
    engine.dispose()
