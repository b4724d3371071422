"""Global pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from logging import Logger
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.engine import Engine

from modelviz import setup_test_logging
from modelviz.database.engine import create_database_engine, create_database_tables
from modelviz.events import MetricsEventBus
from modelviz.models import CallRecord
from modelviz.services.metrics_service import MetricsService
from modelviz.storage import (
    HistoricalStore,
    MemoryBackend,
    StorageCoordinator,
    WindowStore,
)
from modelviz.types import CallStatus, Environment
from modelviz.utils import generate_record_id, get_current_timestamp_ms

RecordFactory = Callable[..., CallRecord]


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from modelviz import get_logger

    return get_logger("test")


@pytest.fixture(scope="function")
def mock_db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """Create a real database engine for testing using a file-based database."""
    engine = create_database_engine(Environment.TESTING, db_path=tmp_path / "test.db")
    create_database_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def historical_store(tmp_path: Path) -> Generator[HistoricalStore, None, None]:
    """Historical store backed by a SQLite file in tmp_path."""
    db_path = tmp_path / "history.db"
    store = HistoricalStore(
        lambda: create_database_engine(Environment.TESTING, db_path=db_path)
    )

    yield store

    store.close()


@pytest.fixture(scope="function")
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture(scope="function")
def window_store(memory_backend: MemoryBackend) -> WindowStore:
    return WindowStore(memory_backend)


@pytest.fixture(scope="function")
def coordinator(
    window_store: WindowStore, historical_store: HistoricalStore
) -> StorageCoordinator:
    return StorageCoordinator(window_store, historical_store)


@pytest.fixture(scope="function")
def event_bus() -> MetricsEventBus:
    return MetricsEventBus()


@pytest.fixture(scope="function")
def metrics_service(
    coordinator: StorageCoordinator, event_bus: MetricsEventBus
) -> MetricsService:
    return MetricsService(coordinator, event_bus)


@pytest.fixture(scope="function")
def make_record() -> RecordFactory:
    """Factory for call records with sensible defaults."""

    def _make_record(**overrides: Any) -> CallRecord:
        fields: dict[str, Any] = {
            "id": generate_record_id(),
            "timestamp": get_current_timestamp_ms(),
            "provider": "OpenAI",
            "model": "gpt-4",
            "latency_ms": 100.0,
            "tokens_used": 150,
            "prompt_tokens": 100,
            "completion_tokens": 50,
            "status": CallStatus.SUCCESS,
            "estimated_cost": 0.003,
            "prompt_length": 400,
            "response_length": 200,
        }
        fields.update(overrides)
        return CallRecord(**fields)

    return _make_record
