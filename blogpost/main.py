# blogpost/main.py

"""Blog Post Backend - posts and comments over FastAPI, SQLModel and Redis."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from blogpost.configs import settings
from blogpost.errors import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
    database_exception_handler,
    domain_exception_handler,
    request_validation_exception_handler,
    validation_exception_handler,
)
from blogpost.managers import cache_manager
from blogpost.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from blogpost.routes import comment_router, post_router
from blogpost.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="Blog posts, comments, tags and search",
    version="1.0.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

routes = [post_router, comment_router]

_ = [app.include_router(router) for router in routes]

errors = [
    (DatabaseError, database_exception_handler),
    (NotFoundError, domain_exception_handler),
    (ConflictError, domain_exception_handler),
    (ValidationError, validation_exception_handler),
    (RequestValidationError, request_validation_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 10:00:00",
                        "cache": {"backend": "in-memory", "status": "healthy"},
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
async def health_check() -> ORJSONResponse:
    """
    Health check endpoint.

    Returns
    -------
    ORJSONResponse
        Version, timestamp and cache status.
    """
    return ORJSONResponse(
        {
            "version": app.version,
            "status": "ok",
            "timestamp": today_str(),
            "cache": await cache_manager.health_check(),
        },
    )
