"""API models package."""

from .metrics import CleanupResponse, HealthResponse

__all__ = [
    "CleanupResponse",
    "HealthResponse",
]
