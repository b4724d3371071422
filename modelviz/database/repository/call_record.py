"""Repository for persisted call records."""

from sqlalchemy import delete
from sqlmodel import Session, col, select

from modelviz.database.repository.base import BaseRepository
from modelviz.models.rows import CallRecordRow


class CallRecordRepository(BaseRepository[CallRecordRow]):
    """Repository for call record rows."""

    def __init__(self, db_session: Session):
        """Initialize with DB session."""
        super().__init__(CallRecordRow, db_session)

    def get_in_range(self, start_ms: int, end_ms: int) -> list[CallRecordRow]:
        """Rows with ``start_ms <= timestamp <= end_ms`` in timestamp order."""
        stmt = (
            select(CallRecordRow)
            .where(
                CallRecordRow.timestamp >= start_ms,
                CallRecordRow.timestamp <= end_ms,
            )
            .order_by(col(CallRecordRow.timestamp))
        )
        return list(self.db.exec(stmt).all())

    def get_by_provider(
        self, provider: str, limit: int | None = None
    ) -> list[CallRecordRow]:
        """Rows for one provider, oldest first, optionally capped."""
        stmt = (
            select(CallRecordRow)
            .where(CallRecordRow.provider == provider)
            .order_by(col(CallRecordRow.timestamp))
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.exec(stmt).all())

    def delete_older_than(self, older_than_ms: int) -> int:
        """Delete rows with ``timestamp < older_than_ms`` and return the count."""
        stmt = delete(CallRecordRow).where(
            col(CallRecordRow.timestamp) < older_than_ms
        )
        try:
            result = self.db.connection().execute(stmt)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return int(result.rowcount or 0)
