"""Configuration management for the modelviz metrics engine."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import (
    DISPOSABLE_KEY_PREFIXES,
    RETENTION_DAYS,
    WINDOW_FALLBACK_ENTRIES,
    WINDOW_MAX_ENTRIES,
    WINDOW_SIZE_THRESHOLD,
)
from .types import Environment, WindowBackendType


class Settings(BaseModel):
    """Application settings."""

    # Environment
    version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # API Settings
    api_title: str = Field(default="ModelViz Metrics API", description="API title")
    api_version: str = Field(default="1.0.0", description="API version")
    cors_allow_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    host: str = Field(default="0.0.0.0", description="Bind address of the API server")
    port: int = Field(default=8000, gt=0, lt=65536, description="API server port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Historical store
    db_path: Path | None = Field(
        default=None,
        description="SQLite file for the historical store (None = environment default)",
    )
    retention_days: int = Field(
        default=RETENTION_DAYS,
        gt=0,
        description="Age in days after which historical records are deleted",
    )

    # Recent-window store
    window_backend: WindowBackendType = Field(
        default=WindowBackendType.FILE,
        description="Storage medium for the recent window (memory/file/null)",
    )
    window_dir: Path = Field(
        default=Path("db", "window"),
        description="Directory used by the file window backend",
    )
    window_max_entries: int = Field(
        default=WINDOW_MAX_ENTRIES, gt=0, description="Records kept in the window"
    )
    window_size_threshold: int = Field(
        default=WINDOW_SIZE_THRESHOLD,
        gt=0,
        description="Serialized size above which the window is reduced",
    )
    window_fallback_entries: int = Field(
        default=WINDOW_FALLBACK_ENTRIES,
        gt=0,
        description="Records kept when retrying after a quota error",
    )
    disposable_prefixes: list[str] = Field(
        default=list(DISPOSABLE_KEY_PREFIXES),
        description="Key prefixes purged from the window medium under quota pressure",
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        # Tests never touch the disk unless they ask for it
        if self.environment == Environment.TESTING and "window_backend" not in kwargs:
            self.window_backend = WindowBackendType.MEMORY

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    cors_origins_str = os.getenv("MODELVIZ_CORS_ORIGINS", "*")
    cors_origins = ["*"] if cors_origins_str == "*" else _split_csv(cors_origins_str)

    kwargs: dict[str, Any] = {
        "environment": Environment(os.getenv("MODELVIZ_ENV", "development")),
        "api_title": os.getenv("MODELVIZ_API_TITLE", "ModelViz Metrics API"),
        "api_version": os.getenv("MODELVIZ_API_VERSION", "1.0.0"),
        "cors_allow_origins": cors_origins,
        "host": os.getenv("MODELVIZ_HOST", "0.0.0.0"),
        "port": int(os.getenv("MODELVIZ_PORT", "8000")),
        "log_level": os.getenv("MODELVIZ_LOG_LEVEL", "INFO").upper(),
        "retention_days": int(os.getenv("MODELVIZ_RETENTION_DAYS", str(RETENTION_DAYS))),
        "window_dir": Path(os.getenv("MODELVIZ_WINDOW_DIR", str(Path("db", "window")))),
        "window_max_entries": int(
            os.getenv("MODELVIZ_WINDOW_MAX_ENTRIES", str(WINDOW_MAX_ENTRIES))
        ),
        "window_size_threshold": int(
            os.getenv("MODELVIZ_WINDOW_SIZE_THRESHOLD", str(WINDOW_SIZE_THRESHOLD))
        ),
        "window_fallback_entries": int(
            os.getenv("MODELVIZ_WINDOW_FALLBACK_ENTRIES", str(WINDOW_FALLBACK_ENTRIES))
        ),
    }

    db_path = os.getenv("MODELVIZ_DB_PATH")
    if db_path:
        kwargs["db_path"] = Path(db_path)

    window_backend = os.getenv("MODELVIZ_WINDOW_BACKEND")
    if window_backend:
        kwargs["window_backend"] = WindowBackendType(window_backend.lower())

    prefixes = os.getenv("MODELVIZ_DISPOSABLE_PREFIXES")
    if prefixes is not None:
        kwargs["disposable_prefixes"] = _split_csv(prefixes)

    return Settings(**kwargs)
