"""Database engine factory for the historical store."""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from modelviz.constants import SCHEMA_VERSION
from modelviz.log import get_logger
from modelviz.models.rows import CallRecordRow
from modelviz.types import Environment

logger = get_logger(__name__)

MEMORY_DATABASE_URL = "sqlite://"


def setup_database_url(environment: Environment, db_path: Path | None = None) -> str:
    """Construct database URL based on environment configuration.

    Args:
        environment: Environment type
        db_path: Optional custom database path. If provided, overrides default path.

    Returns:
        Database connection URL
    """
    if db_path is None:
        if environment == Environment.TESTING:
            return MEMORY_DATABASE_URL
        if environment == Environment.PRODUCTION:
            db_path = Path("db", "modelviz_metrics.db")
        elif environment == Environment.DEVELOPMENT:
            db_path = Path("db", "modelviz_metrics.dev.db")
        else:
            raise ValueError(f"Unknown environment: {environment}")

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def create_database_engine(
    environment: Environment,
    echo: bool = False,
    db_path: Path | None = None,
) -> Engine:
    """Create database engine based on environment configuration.

    Args:
        environment: Environment type
        echo: Enable SQL echo for debugging
        db_path: Optional custom database path. If provided, overrides default path.

    Returns:
        Configured SQLModel engine
    """
    database_url = setup_database_url(environment, db_path)
    logger.info(f"Creating database engine for: {database_url}")

    if database_url == MEMORY_DATABASE_URL:
        # A single shared connection, otherwise every checkout sees an empty database
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_url,
        echo=echo,
        connect_args={
            "check_same_thread": False,
            "timeout": 60.0,
        },
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
    )


def get_schema_version(engine: Engine) -> int:
    """Read the schema version stamped into the SQLite header."""
    with engine.connect() as conn:
        return int(conn.execute(text("PRAGMA user_version")).scalar() or 0)


def create_database_tables(engine: Engine) -> None:
    """Create the call record table and its indexes, then stamp the schema version."""
    current_version = get_schema_version(engine)
    if current_version > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {current_version} is newer than supported "
            f"version {SCHEMA_VERSION}"
        )

    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)

    if current_version < SCHEMA_VERSION:
        with engine.begin() as conn:
            conn.execute(text(f"PRAGMA user_version = {SCHEMA_VERSION}"))
        logger.info(
            f"> Created table {CallRecordRow.__tablename__} "
            f"(schema version {current_version} -> {SCHEMA_VERSION})"
        )
