"""Metrics models for the API."""

from pydantic import BaseModel, Field


class CleanupResponse(BaseModel):
    """Result of a retention cleanup run."""

    deleted: int = Field(description="Number of historical records deleted")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
