"""Common API endpoints router."""

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_settings
from api.literals import HEALTH_ENDPOINT
from api.models import HealthResponse
from modelviz.config import Settings

router = APIRouter(tags=["common"])


@router.get(HEALTH_ENDPOINT, response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        environment=settings.environment.value,
        timestamp=datetime.datetime.now().isoformat(),
    )
