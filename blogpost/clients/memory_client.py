"""In-process cache backend used when Redis is disabled or unreachable."""

from asyncio import Lock
from collections import OrderedDict
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from fnmatch import fnmatchcase
from logging import DEBUG, getLogger
from sys import getsizeof
from time import monotonic

from blogpost.configs import file_logger

logger = file_logger(getLogger(__name__))


@dataclass(slots=True)
class _Entry:
    value: str
    size: int
    expires_at: float | None = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryClient:
    """
    Least-recently-used store of serialized cache entries.

    Speaks the same subset of commands the cache manager sends to Redis.
    Entries are bounded by count and by estimated size; expired entries are
    dropped when they are next touched.
    """

    DEFAULT_MAX_ENTRIES: int = 10_000
    DEFAULT_MAX_MEMORY_MB: int = 64

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_memory_mb: int = DEFAULT_MAX_MEMORY_MB,
    ) -> None:
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._max_bytes = max_memory_mb * 1024 * 1024
        self._used_bytes = 0
        self._lock = Lock()
        self.is_connected: bool = True

    def _pop(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._used_bytes -= entry.size
        return True

    def _make_room(self, size: int) -> None:
        while self._entries and (
            len(self._entries) >= self._max_entries or self._used_bytes + size > self._max_bytes
        ):
            key = next(iter(self._entries))
            self._pop(key)
            if logger.isEnabledFor(DEBUG):
                logger.debug("Evicted cache key %s", key)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(monotonic()):
                self._pop(key)
                return None
            self._entries.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Store a value, evicting the least recently used entries to fit it."""
        entry = _Entry(
            value=value,
            size=getsizeof(key) + getsizeof(value),
            expires_at=monotonic() + ex if ex else None,
        )
        async with self._lock:
            self._pop(key)
            self._make_room(entry.size)
            self._entries[key] = entry
            self._used_bytes += entry.size
        return True

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            return sum(self._pop(key) for key in keys)

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:  # noqa: ARG002
        """Yield the live keys matching a Redis-style glob pattern."""
        async with self._lock:
            now = monotonic()
            keys = [key for key, entry in self._entries.items() if not entry.expired(now)]
        for key in keys:
            if fnmatchcase(key, pattern):
                yield key

    async def ping(self) -> bool:
        return self.is_connected

    async def info(self) -> dict[str, str | int]:
        """Usage figures shaped like the ``INFO`` reply of Redis."""
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "used_memory_bytes": self._used_bytes,
                "used_memory_human": f"{self._used_bytes / 1024 / 1024:.2f}MB",
                "total_keys": len(self._entries),
                "max_entries": self._max_entries,
                "max_memory_mb": self._max_bytes // 1024 // 1024,
            }

    async def close(self) -> None:
        """Drop every entry and mark the client as disconnected."""
        async with self._lock:
            self._entries.clear()
            self._used_bytes = 0
        self.is_connected = False
