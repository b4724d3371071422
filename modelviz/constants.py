"""Storage and aggregation constants."""

from typing import Final

# Recent-window store
WINDOW_KEY: Final[str] = "modelviz_metrics_recent"
WINDOW_BACKUP_KEY: Final[str] = "modelviz_metrics_backup"
WINDOW_MAX_ENTRIES: Final[int] = 100
# Serialized size (characters) above which only the reduced projection is kept
WINDOW_SIZE_THRESHOLD: Final[int] = 2_000_000
# Entries kept when retrying a save after a quota error
WINDOW_FALLBACK_ENTRIES: Final[int] = 10
DISPOSABLE_KEY_PREFIXES: Final[tuple[str, ...]] = ("ai-showcase:", "cache:")

# Fields that survive the reduced window projection
REDUCED_RECORD_FIELDS: Final[tuple[str, ...]] = (
    "id",
    "timestamp",
    "provider",
    "model",
    "latency_ms",
    "tokens_used",
    "status",
    "estimated_cost",
)

# Historical store
SCHEMA_VERSION: Final[int] = 1
RETENTION_DAYS: Final[int] = 90

# Time conversion
MS_PER_SECOND: Final[int] = 1_000
MS_PER_HOUR: Final[int] = 60 * 60 * MS_PER_SECOND
MS_PER_DAY: Final[int] = 24 * MS_PER_HOUR

# Lookback of each symbolic range, "today" is resolved from local midnight
RANGE_DURATIONS_MS: Final[dict[str, int]] = {
    "hour": MS_PER_HOUR,
    "week": 7 * MS_PER_DAY,
    "month": 30 * MS_PER_DAY,
    "year": 365 * MS_PER_DAY,
}
