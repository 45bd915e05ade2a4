"""newsrag FastAPI application entry point.

Builds the pipeline context (providers + stage services) once per process
in the lifespan, stores it on ``app.state.context`` and mounts the API
router.  Tests pass a ready-made context to :func:`create_app`, in which
case the lifespan only initialises the store.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from newsrag import __version__
from newsrag.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from newsrag.api.routes import router as api_router
from newsrag.config.settings import Settings
from newsrag.pipeline.context import PipelineContext, build_context
from newsrag.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def create_app(context: PipelineContext | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise the pipeline context on startup, clean up on shutdown."""
        app_context = context or build_context()
        application.state.context = app_context
        await app_context.startup()

        _logger.info(
            "app_startup",
            version=__version__,
            environment=app_context.settings.app_env,
            publications=app_context.publications,
        )

        yield

        await app_context.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="newsrag API",
        version=__version__,
        description=(
            "Scrape news stories, chunk and embed them, then answer questions "
            "about the news grounded on the most similar story chunks."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(api_router)
    return application


def main() -> None:
    """Run the API server with uvicorn."""
    settings = Settings()
    configure_logging(log_level=settings.log_level, app_env=settings.app_env)
    uvicorn.run(
        "newsrag.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
