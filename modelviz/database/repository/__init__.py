"""Repository layer for database operations."""

from .base import BaseRepository
from .call_record import CallRecordRepository

__all__ = [
    "BaseRepository",
    "CallRecordRepository",
]
