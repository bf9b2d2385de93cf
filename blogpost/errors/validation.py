"""Validation errors and request validation handling."""

from logging import getLogger
from typing import Any, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from blogpost.configs import file_logger
from blogpost.errors.base import BaseAppError, create_exception_handler
from blogpost.utils.helpers import host

logger = file_logger(getLogger(__name__))


class ValidationError(BaseAppError):
    """Raised when input violates one or more field constraints."""

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(detail=detail, status_code=HTTP_422_UNPROCESSABLE_CONTENT)
        self.errors = errors or []

    @property
    def messages(self) -> list[str]:
        """Violation messages in the order they were found."""
        return [error["message"] for error in self.errors]

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Collect every violation of a pydantic validation run."""
        return cls(errors=format_errors(exc.errors()))


def _error_message(error: dict[str, Any]) -> str:
    # Custom validators raise ValueError, keep their message verbatim
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and isinstance(ctx.get("error"), Exception):
        return str(ctx["error"])
    return error.get("msg", "Invalid value")


def format_errors(errors: Any, *, skip_location: int = 0) -> list[dict[str, Any]]:
    """
    Flatten pydantic error entries into ``{"field", "message", "type"}`` dicts.

    Args:
        errors: Error entries from ``ValidationError.errors()``.
        skip_location: Leading location parts to drop (``body``, ``query``).

    Returns:
        list[dict[str, Any]]: Formatted errors.
    """
    formatted: list[dict[str, Any]] = []
    for error in errors:
        loc = error.get("loc", ())[skip_location:]
        formatted.append(
            {
                "field": ".".join(str(part) for part in loc),
                "message": _error_message(error),
                "type": error.get("type", "validation_error"),
            },
        )
    return formatted


async def request_validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle FastAPI request validation errors with the application error shape.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with formatted validation errors.
    """
    exec_error = cast(RequestValidationError, exc)
    formatted_errors = format_errors(exec_error.errors(), skip_location=1)

    logger.warning(
        f"Validation error for ip: {host(request)} at endpoint {request.url.path}: {formatted_errors}",
    )

    return ORJSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": "Validation failed",
            "errors": formatted_errors,
        },
    )


validation_exception_handler = create_exception_handler(logger)
