"""Tiered storage for call records: a recent window plus a durable archive."""

from .backends import (
    FileBackend,
    KeyValueBackend,
    MemoryBackend,
    NullBackend,
    create_window_backend,
)
from .coordinator import StorageCoordinator
from .historical_store import HistoricalStore
from .window_store import WindowStore

__all__ = [
    "FileBackend",
    "HistoricalStore",
    "KeyValueBackend",
    "MemoryBackend",
    "NullBackend",
    "StorageCoordinator",
    "WindowStore",
    "create_window_backend",
]
