"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from trend_monitor import __version__
from trend_monitor.api.dependencies import cleanup_dependencies
from trend_monitor.api.routes import collect, health

logger = structlog.get_logger(__name__)

# The trigger is called from browser admin pages on other origins
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Trend monitor API starting up")

    yield

    logger.info("Trend monitor API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "collection", "description": "On-demand collection runs"},
    ]

    app = FastAPI(
        title="Keyword Trend Monitor API",
        description="""
Manual trigger for keyword collection runs.

`POST /collect` runs one collection pass over every active source and
keyword and reports how many sources succeeded or failed.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Request logging, correlation ID and CORS origin header
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id
            response.headers.update(CORS_HEADERS)

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()

    # Exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc) or "Internal server error"},
            headers=CORS_HEADERS,
        )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(collect.router, tags=["collection"])

    return app
