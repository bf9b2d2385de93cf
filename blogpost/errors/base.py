"""Root of the application error tree and the handler that renders it."""

from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from blogpost.utils.helpers import host

# Low-level failures a cache backend may surface besides its own errors
BASE_EXCEPTION = (
    OSError,
    MemoryError,
    RuntimeError,
    TimeoutError,
)

type ExceptionHandler = Callable[[Request, Exception], Awaitable[ORJSONResponse]]


class BaseAppError(Exception):
    """
    Error that maps onto an HTTP response.

    Public attributes set by subclasses (``post_id``, ``errors``...) are sent
    to the client next to ``detail``.
    """

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail

    def to_content(self) -> dict[str, Any]:
        """Response body: the detail plus every public attribute."""
        extra = {
            name: value
            for name, value in vars(self).items()
            if not name.startswith("_") and name not in ("detail", "status_code")
        }
        return {"detail": self.detail, **extra}


def create_exception_handler(logger: Logger) -> ExceptionHandler:
    """
    Build a FastAPI exception handler that logs through ``logger``.

    Client errors are logged as warnings, server errors with their traceback.

    Args:
        logger: Logger of the module owning the error family.

    Returns:
        ExceptionHandler: Handler rendering ``BaseAppError.to_content``.
    """

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        error = exc if isinstance(exc, BaseAppError) else BaseAppError()

        where = f"for ip: {host(request)} at endpoint {request.method} {request.url.path}"
        if error.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{error.detail} {where}", exc_info=exc)
        else:
            logger.warning(f"{error.detail} {where}")

        return ORJSONResponse(content=error.to_content(), status_code=error.status_code)

    return handler
