from logging import getLogger

from starlette.status import (
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from blogpost.configs import file_logger
from blogpost.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class DatabaseError(BaseAppError):
    """Base exception for database errors."""

    def __init__(
        self,
        detail: str = "Database Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail, status_code)


class DatabaseInitializationError(DatabaseError):
    """Raised when the schema or the sample data cannot be set up."""

    def __init__(self, detail: str = "Failed to initialize database") -> None:
        super().__init__(detail)


class DuplicateEntryError(DatabaseError):
    """Exception raised when attempting to create a duplicate entry."""

    def __init__(
        self,
        detail: str = "A record with this value already exists",
    ) -> None:
        super().__init__(detail, HTTP_409_CONFLICT)


database_exception_handler = create_exception_handler(logger)
