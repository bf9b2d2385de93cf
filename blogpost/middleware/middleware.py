# blogpost/middleware/middleware.py
"""
Middleware components for the blog post backend.

This module contains middleware for security headers, request logging and
CORS handling, plus the lifespan event handler that prepares the database
and the cache and releases them on shutdown.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import basicConfig, getLogger
from pathlib import Path
from time import perf_counter

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.logging import RichHandler
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from blogpost.configs import file_logger, settings
from blogpost.db import close_db, init_db
from blogpost.db.init_db import seed_sample_posts
from blogpost.dependencies import get_post_service
from blogpost.managers import cache_manager
from blogpost.utils.helpers import host

if log_to_file := settings.LOG_TO_FILE:
    Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

# --- Logging Configuration ---
basicConfig(
    level="NOTSET",
    format="%(message)s",
    datefmt="%X",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = file_logger(getLogger("rich"))

install()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application startup and shutdown events with service initialization."""
    # Startup
    logger.info(f"Starting {app.title}...")

    try:
        if log_to_file:
            logger.info("Logging to file enabled.")

        await init_db()
        await cache_manager.initialize()
        app.state.cache_manager = cache_manager

        if settings.ENVIRONMENT != "test":
            await seed_sample_posts(get_post_service())

        logger.info("Services initialized successfully")
        logger.info("Services:")
        logger.info("  - Backend API: http://localhost:8000")
        logger.info("  - API Documentation: http://localhost:8000/docs")
        logger.info("  - Health Check: http://localhost:8000/health")

    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {app.title}...")

    try:
        await close_db()
        await cache_manager.shutdown()
        logger.info("Services cleaned up successfully")

    except Exception:
        logger.exception("Error during service cleanup")


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    if frontend_url := settings.PRODUCTION_FRONTEND_URL:
        allowed_origins.append(frontend_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request summary and timing information."""

        start_time = perf_counter()
        logger.info(f"Request: {request.method} {request.url.path}, from ip: {host(request)}")

        response = await call_next(request)
        duration = perf_counter() - start_time

        logger.info(
            f"Response: {response.status_code} for {request.method} {request.url.path} "
            f"in {duration:.2f}s",
        )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
