"""API routers package."""

from .common import router as common_router
from .metrics import router as metrics_router

__all__ = [
    "common_router",
    "metrics_router",
]
