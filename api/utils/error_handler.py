"""Error handling utilities for API endpoints."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import HTTPException, status

from modelviz.exceptions import MetricsStorageError
from modelviz.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def handle_async_api_operation(
    operation: Callable[[], Awaitable[T]],
    error_message: str = "Operation failed",
) -> T:
    """Run ``operation`` and translate failures into HTTP errors.

    ValueError becomes 400, storage failures 503 and anything else 500.
    """
    try:
        return await operation()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except MetricsStorageError as e:
        logger.error(f"{error_message}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{error_message}: {str(e)}",
        )
    except Exception as e:
        logger.error(f"{error_message}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{error_message}: {str(e)}",
        )
