from blogpost.errors.base import BASE_EXCEPTION, BaseAppError, create_exception_handler
from blogpost.errors.cache import CacheCodecError, CacheExceptionError, CacheKeyError
from blogpost.errors.database import (
    DatabaseError,
    DatabaseInitializationError,
    DuplicateEntryError,
    database_exception_handler,
)
from blogpost.errors.domain import (
    CommentNotFoundError,
    ConflictError,
    NotFoundError,
    PostNotFoundError,
    SlugConflictError,
    domain_exception_handler,
)
from blogpost.errors.validation import (
    ValidationError,
    request_validation_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "BASE_EXCEPTION",
    "BaseAppError",
    "CacheCodecError",
    "CacheExceptionError",
    "CacheKeyError",
    "CommentNotFoundError",
    "ConflictError",
    "DatabaseError",
    "DatabaseInitializationError",
    "DuplicateEntryError",
    "NotFoundError",
    "PostNotFoundError",
    "SlugConflictError",
    "ValidationError",
    "create_exception_handler",
    "database_exception_handler",
    "domain_exception_handler",
    "request_validation_exception_handler",
    "validation_exception_handler",
]
