"""Exceptions for the metrics storage layer."""


class MetricsStorageError(Exception):
    """Base exception for metrics storage errors."""

    pass


class StorageQuotaExceededError(MetricsStorageError):
    """Raised when the window medium has no room left for a write."""

    pass


class HistoricalStoreError(MetricsStorageError):
    """Raised when the historical store cannot initialize, read or write."""

    pass
