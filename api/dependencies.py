"""FastAPI dependencies backed by the application state."""

from fastapi import Request

from modelviz.config import Settings
from modelviz.services.metrics_service import MetricsService


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


def get_metrics_service(request: Request) -> MetricsService:
    """Get the metrics service created during startup."""
    metrics_service: MetricsService = request.app.state.metrics_service
    return metrics_service
