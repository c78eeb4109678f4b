"""
FastAPI Application Entry Point.

This module builds and configures the FastAPI application.
It handles:
1. Collaborator wiring (database, store, logger, rate limiter, service)
2. Router registration
3. Middleware configuration
4. Exception handlers
5. Startup/shutdown events

Run with: uvicorn simsimi.api.main:create_app --factory --reload
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from simsimi.api.routes import health_router, simsimi_router
from simsimi.core.audit import AuditMiddleware
from simsimi.core.config import Settings, get_settings
from simsimi.core.exceptions import RateLimitExceeded, SimSimiException
from simsimi.core.logging_config import get_logger, setup_logging
from simsimi.core.rate_limiter import RateLimiter
from simsimi.database import (
    DatabaseConnection,
    InteractionLogger,
    ResponseStore,
    StatsCollector,
    init_tables,
    seed_default_data,
)
from simsimi.services.conversation_service import ConversationService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: connect (with retries), create tables, seed defaults
    - Shutdown: dispose the connection pool
    """
    settings: Settings = app.state.settings
    database: DatabaseConnection = app.state.database

    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"Rate Limit: {settings.rate_limit_per_minute} req/{settings.rate_limit_window_seconds}s")
    logger.info(f"Audit Logging: {settings.enable_audit_logging}")

    database.connect()
    init_tables(database)
    if settings.seed_default_data:
        seed_default_data(app.state.response_store)

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")
    database.close()


def create_app(
    settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use. Defaults to environment settings.
        rate_limiter: Limiter to apply to API routes. Defaults to a
            sliding window sized from settings.

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="SimSimi API",
        description="""
        A chatbot that learns from conversations.

        - **Ask**: get the answer taught for a question (case and
          surrounding whitespace are ignored)
        - **Teach**: store a question/answer pair; re-teaching replaces the
          answer and increments the teach count
        - **Search**: find taught pairs by substring
        - **Stats**: interaction counters
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    database = DatabaseConnection(settings)
    store = ResponseStore(database)

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.database = database
    app.state.response_store = store
    app.state.rate_limiter = rate_limiter or RateLimiter(
        requests_per_window=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.conversation_service = ConversationService(
        store=store,
        interaction_logger=InteractionLogger(database),
        stats_collector=StatsCollector(database),
        settings=settings,
    )

    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)
        logger.info("Audit logging middleware enabled")

    _register_exception_handlers(app, settings)

    app.include_router(health_router)
    app.include_router(simsimi_router, prefix=settings.api_prefix)

    return app


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        """Handle rate limit exceeded errors."""
        return JSONResponse(
            status_code=exc.status_code,
            content={**exc.to_dict(), "retry_after": exc.retry_after,
                     "timestamp": datetime.utcnow().isoformat()},
            headers={"Retry-After": str(exc.retry_after)}
        )

    @app.exception_handler(SimSimiException)
    async def simsimi_exception_handler(request: Request, exc: SimSimiException):
        """Handle validation and storage errors."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={**exc.to_dict(), "timestamp": datetime.utcnow().isoformat()}
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception):
        """Unknown routes get the same error body as every other failure."""
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": "Route not found",
                "details": f"path={request.url.path}",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions globally.

        Detailed error information is only included in development mode.
        """
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.is_development() else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "simsimi.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_development()
    )
