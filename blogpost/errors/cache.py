"""
Cache failures.

None of these reach a client: the cache manager logs them and serves the
request straight from the database instead.
"""

from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from blogpost.errors.base import BaseAppError


class CacheExceptionError(BaseAppError):
    """The read cache could not serve an operation."""

    def __init__(self, detail: str = "Cache unavailable", key: str | None = None) -> None:
        super().__init__(detail, HTTP_503_SERVICE_UNAVAILABLE)
        self.key = key


class CacheKeyError(CacheExceptionError):
    """The backend failed while reading, writing or clearing entries."""

    def __init__(self, operation: str, key: str) -> None:
        super().__init__(f"Cache {operation} failed for {key}", key)
        self.operation = operation


class CacheCodecError(CacheExceptionError):
    """A cached value could not be encoded or decoded."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation} cached value")
        self.operation = operation
