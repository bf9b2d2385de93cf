"""Redis backend of the read cache."""

from collections.abc import AsyncGenerator, Iterator
from contextlib import contextmanager
from logging import getLogger
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from blogpost.configs import file_logger, pool_kwargs

logger = file_logger(getLogger(__name__))


@contextmanager
def _unavailable_on_error(command: str, target: str = "") -> Iterator[None]:
    """
    Re-raise any Redis failure as ``RedisConnectionError``.

    The cache manager treats that single error type as "Redis is gone" and
    switches to the in-memory backend.
    """
    try:
        yield
    except RedisConnectionError:
        logger.exception(f"Redis connection lost during {command} {target}".rstrip())
        raise
    except RedisError as e:
        logger.exception(f"Redis {command} failed {target}".rstrip())
        mssg = f"Redis {command} failed {target}: {e}"
        raise RedisConnectionError(mssg) from e


class RedisClient:
    """Pooled async Redis connection exposing the commands the cache needs."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or pool_kwargs
        self._redis: Redis | None = None

    @property
    def client(self) -> Redis:
        if self._redis is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        return self._redis

    async def connect(self) -> None:
        """Open the pool and make sure the server answers."""
        address = f"{self.config.get('host')}:{self.config.get('port')}"
        redis = Redis(connection_pool=ConnectionPool(**self.config))
        try:
            with _unavailable_on_error("connect", address):
                if not await redis.ping():
                    mssg = f"Redis at {address} did not answer PING"
                    raise RedisConnectionError(mssg)
        except (RedisConnectionError, OSError) as e:
            await redis.aclose()
            mssg = f"Cannot connect to Redis at {address}"
            raise RedisConnectionError(mssg) from e
        self._redis = redis
        logger.info(f"Connected to Redis at {address}.")

    async def disconnect(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed.")

    async def get(self, key: str) -> str | None:
        with _unavailable_on_error("GET", key):
            return await self.client.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        with _unavailable_on_error("SET", key):
            return bool(await self.client.set(key, value, ex=ex or None))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with _unavailable_on_error("DEL", f"{len(keys)} keys"):
            return await self.client.delete(*keys)

    async def ping(self) -> bool:
        with _unavailable_on_error("PING"):
            return bool(await self.client.ping())

    async def info(self) -> dict[str, Any]:
        with _unavailable_on_error("INFO"):
            info = await self.client.info()
        return info if isinstance(info, dict) else {}

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:
        """Yield keys matching the pattern, one SCAN page at a time."""
        cursor = 0
        while True:
            with _unavailable_on_error("SCAN", pattern):
                cursor, keys = await self.client.scan(cursor, match=pattern, count=count)
            for key in keys:
                yield key.decode("utf-8") if isinstance(key, bytes) else key
            if cursor == 0:
                break
