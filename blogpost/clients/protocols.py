"""Interface shared by the cache backends."""

from collections.abc import AsyncIterator, Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheClientProtocol(Protocol):
    """Commands the cache manager sends to Redis or to the in-memory store."""

    def get(self, key: str) -> Awaitable[str | None]: ...

    def set(self, key: str, value: str, ex: int | None = None) -> Awaitable[bool]:
        """Store a value; ``ex`` is a ttl in seconds, falsy for no expiry."""
        ...

    def delete(self, *keys: str) -> Awaitable[int]:
        """Remove keys, returning how many existed."""
        ...

    def scan_iter(self, pattern: str, count: int = 100) -> AsyncIterator[str]:
        """Yield keys matching a glob pattern."""
        ...

    def ping(self) -> Awaitable[bool]: ...

    def info(self) -> Awaitable[dict[str, Any]]: ...
