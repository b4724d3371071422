"""Base repository with dependency injection pattern."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func
from sqlmodel import Session, SQLModel, select

from modelviz.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=SQLModel)


class BaseRepository(Generic[T]):
    """Base repository with dependency injection pattern.

    Each write method commits its own transaction and rolls back on failure.
    """

    def __init__(self, model: type[T], db: Session) -> None:
        self.model = model
        self.db = db

    def upsert(self, obj: T) -> T:
        """Insert ``obj`` or replace the row with the same primary key."""
        try:
            merged = self.db.merge(obj)
            self.db.commit()
            logger.debug(f"Upserted {self.model.__name__}: {obj.model_dump()}")
        except Exception as exc:
            self.db.rollback()
            logger.error(f"Failed to upsert {self.model.__name__}: {exc}")
            raise

        return merged

    def upsert_many(self, objs: list[T]) -> int:
        """Upsert every object in a single transaction."""
        try:
            for obj in objs:
                self.db.merge(obj)
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            logger.error(
                f"Failed to upsert batch of {len(objs)} {self.model.__name__}: {exc}"
            )
            raise

        return len(objs)

    def get_by_id(self, obj_id: Any) -> T | None:
        return self.db.get(self.model, obj_id)

    def get_all(self, skip: int = 0, limit: int | None = None) -> list[T]:
        """Get all objects, optionally paginated."""
        statement = select(self.model).offset(skip)
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.db.exec(statement).all())

    def count(self) -> int:
        """Count all objects."""
        result = self.db.exec(select(func.count()).select_from(self.model)).one()
        return int(result or 0)

    def delete_all(self) -> int:
        """Delete every row of the table."""
        try:
            result = self.db.connection().execute(delete(self.model))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return int(result.rowcount or 0)
