"""Utility functions for timestamps and identifiers."""

import time
from datetime import datetime
from uuid import uuid4

from .constants import MS_PER_DAY, MS_PER_SECOND


def get_current_timestamp_ms() -> int:
    """Get current time in milliseconds since epoch."""
    return int(time.time() * MS_PER_SECOND)


def generate_record_id() -> str:
    """Generate an opaque unique id for a call record."""
    return str(uuid4())


def to_local_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to a naive local datetime."""
    return datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND)


def to_timestamp_ms(value: datetime) -> int:
    """Convert a datetime (naive = local time) to epoch milliseconds."""
    return int(value.timestamp() * MS_PER_SECOND)


def start_of_local_hour_ms(timestamp_ms: int) -> int:
    """Epoch milliseconds of the local hour containing ``timestamp_ms``."""
    local = to_local_datetime(timestamp_ms)
    return to_timestamp_ms(local.replace(minute=0, second=0, microsecond=0))


def start_of_local_day_ms(timestamp_ms: int) -> int:
    """Epoch milliseconds of local midnight on the day of ``timestamp_ms``."""
    local = to_local_datetime(timestamp_ms)
    return to_timestamp_ms(local.replace(hour=0, minute=0, second=0, microsecond=0))


def days_ago_ms(days: int, now_ms: int | None = None) -> int:
    """Epoch milliseconds ``days`` full days before ``now_ms``."""
    if now_ms is None:
        now_ms = get_current_timestamp_ms()
    return now_ms - days * MS_PER_DAY
