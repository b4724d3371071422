"""Database functionality for the historical store."""

from .engine import create_database_engine, create_database_tables, get_schema_version
from .repository import CallRecordRepository

__all__ = [
    "CallRecordRepository",
    "create_database_engine",
    "create_database_tables",
    "get_schema_version",
]
