"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import common_router, metrics_router
from modelviz.config import Settings, load_settings
from modelviz.log import get_logger, setup_logging
from modelviz.services.metrics_service import build_metrics_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    setup_logging(
        level=settings.log_level,
        enable_file_logging=not settings.is_testing,
        is_test_env=settings.is_testing,
    )
    logger.info(f"Starting ModelViz metrics API in {settings.environment} mode")

    metrics_service = build_metrics_service(settings)
    await metrics_service.initialize()
    app.state.metrics_service = metrics_service

    logger.info("ModelViz metrics API initialized successfully")

    yield

    metrics_service.close()
    logger.info("ModelViz metrics API shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI app with the given or environment settings."""
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Metrics aggregation and storage for AI provider calls",
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(common_router)
    app.include_router(metrics_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)},
        )

    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
