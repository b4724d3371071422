"""Durable, indexed archive of every recorded call."""

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from modelviz.database.engine import create_database_engine, create_database_tables
from modelviz.database.repository import CallRecordRepository
from modelviz.exceptions import HistoricalStoreError
from modelviz.log import get_logger
from modelviz.models.domain.call_record import CallRecord
from modelviz.models.rows import CallRecordRow
from modelviz.types import Environment

logger = get_logger(__name__)

T = TypeVar("T")


class HistoricalStore:
    """SQLite-backed archive of call records, kept until retention cleanup.

    The engine and schema are created lazily on first use. Concurrent callers
    that arrive while initialization is in flight all await the same task,
    so the schema is only ever created once. After ``close()`` the next
    operation initializes again.
    """

    def __init__(self, engine_factory: Callable[[], Engine]) -> None:
        self._engine_factory = engine_factory
        self._engine: Engine | None = None
        self._init_task: asyncio.Task[Engine] | None = None

    @classmethod
    def for_environment(
        cls, environment: Environment, db_path: Path | None = None
    ) -> "HistoricalStore":
        """Store whose database location follows the environment defaults."""
        return cls(lambda: create_database_engine(environment, db_path=db_path))

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self) -> None:
        """Open the database and create the schema if needed (idempotent)."""
        await self._get_engine()

    async def _get_engine(self) -> Engine:
        if self._engine is not None:
            return self._engine

        if self._init_task is None:
            self._init_task = asyncio.create_task(self._perform_initialize())

        task = self._init_task
        try:
            return await task
        except Exception:
            # Let the next caller retry instead of replaying the failure forever
            if self._init_task is task:
                self._init_task = None
            raise

    async def _perform_initialize(self) -> Engine:
        logger.info("Initializing historical store...")
        try:
            engine = self._engine_factory()
            create_database_tables(engine)
        except (SQLAlchemyError, OSError, RuntimeError) as exc:
            logger.error(f"Historical store initialization failed: {exc}")
            raise HistoricalStoreError(f"Initialization failed: {exc}") from exc

        self._engine = engine
        logger.info("Historical store initialized")
        return engine

    async def _run(
        self, action: str, operation: Callable[[CallRecordRepository], T]
    ) -> T:
        engine = await self._get_engine()
        try:
            with Session(engine) as session:
                return operation(CallRecordRepository(session))
        except (SQLAlchemyError, ValidationError) as exc:
            logger.error(f"Historical store failed to {action}: {exc}")
            raise HistoricalStoreError(f"Failed to {action}: {exc}") from exc

    async def save_metric(self, record: CallRecord) -> None:
        """Insert ``record`` or replace the stored record with the same id.

        Raises:
            HistoricalStoreError: If the store cannot initialize or the write aborts
        """
        await self._run(
            "save metric",
            lambda repo: repo.upsert(CallRecordRow.from_record(record)),
        )

    async def save_metrics_batch(self, records: Sequence[CallRecord]) -> None:
        """Upsert all ``records`` in one transaction; nothing is kept on failure."""
        if not records:
            return
        rows = [CallRecordRow.from_record(record) for record in records]
        saved = await self._run("save metrics batch", lambda repo: repo.upsert_many(rows))
        logger.debug(f"Saved batch of {saved} metrics")

    async def get_metrics_in_range(self, start_ms: int, end_ms: int) -> list[CallRecord]:
        """Records with ``start_ms <= timestamp <= end_ms``, in timestamp order."""
        return await self._run(
            "query range",
            lambda repo: [row.to_record() for row in repo.get_in_range(start_ms, end_ms)],
        )

    async def get_metrics_by_provider(
        self, provider: str, limit: int | None = None
    ) -> list[CallRecord]:
        return await self._run(
            "query provider",
            lambda repo: [
                row.to_record() for row in repo.get_by_provider(provider, limit)
            ],
        )

    async def get_all_metrics(self) -> list[CallRecord]:
        """Every stored record. Expensive; meant for small datasets and export."""
        return await self._run(
            "read all metrics",
            lambda repo: [row.to_record() for row in repo.get_all()],
        )

    async def get_count(self) -> int:
        return await self._run("count metrics", lambda repo: repo.count())

    async def cleanup_old_metrics(self, older_than_ms: int) -> int:
        """Delete every record with ``timestamp < older_than_ms``.

        Returns:
            Number of records deleted
        """
        deleted = await self._run(
            "clean up old metrics",
            lambda repo: repo.delete_older_than(older_than_ms),
        )
        if deleted:
            logger.info(f"Deleted {deleted} metrics older than {older_than_ms}")
        return deleted

    async def clear(self) -> None:
        """Delete every record."""
        deleted = await self._run("clear metrics", lambda repo: repo.delete_all())
        logger.info(f"Cleared {deleted} metrics from historical store")

    def close(self) -> None:
        """Release the database connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Historical store closed")
        self._init_task = None
