"""Cache manager fronting Redis or the in-memory client."""

from asyncio import Lock as AsyncLock
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, fields
from logging import DEBUG, getLogger
from threading import Lock as ThreadLock
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError

from blogpost.clients.memory_client import MemoryClient
from blogpost.clients.protocols import CacheClientProtocol
from blogpost.clients.redis_client import RedisClient
from blogpost.configs import CacheConfig, file_logger, settings
from blogpost.errors import BASE_EXCEPTION, CacheExceptionError, CacheKeyError
from blogpost.utils.cache_serializer import compress, decompress, deserialize, do_compress, serialize
from blogpost.utils.helpers import today_str

logger = file_logger(getLogger(__name__))

CacheLoader = Callable[[], Awaitable[Any]]

CACHE_FAILURES = BASE_EXCEPTION + (CacheExceptionError, RedisConnectionError)


@dataclass
class CacheStatistics:
    """Cache statistics tracker."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    invalidations: int = 0
    errors: int = 0
    created_at: str = field(default_factory=today_str)
    _lock: ThreadLock = field(default_factory=ThreadLock, init=False, repr=False)

    def record(self, counter: str) -> None:
        """Increment one of the counters."""
        with self._lock:
            setattr(self, counter, getattr(self, counter) + 1)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")
        }
        lookups = self.hits + self.misses
        data["hit_rate"] = round(self.hits / lookups, 4) if lookups else 0.0
        return data


class CacheManager:
    """
    Namespaced cache for the expensive post read paths.

    Features:
        - Automatic fallback to the in-memory client when Redis is unavailable
        - Request coalescing per key (one loader runs, others wait for it)
        - Namespace invalidation that only removes entries
        - Generation counters so a loader that raced an invalidation does not
          store its result
        - Pass-through mode when caching is disabled or the backend fails
    """

    # Maximum number of locks to keep in memory (LRU eviction)
    MAX_LOCKS: int = 10_000

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        memory_client: MemoryClient | None = None,
        redis_client: RedisClient | None = None,
    ) -> None:
        """Initialize cache manager."""
        self.cache_config = config or CacheConfig()
        self.memory_client = memory_client or MemoryClient()
        self.redis_client = redis_client or RedisClient()
        self._client: CacheClientProtocol = self.memory_client
        self.is_redis_available = False
        self.statistics = CacheStatistics()

        self._generations: dict[str, int] = {}
        self._locks: OrderedDict[str, AsyncLock] = OrderedDict()
        self._locks_lock = ThreadLock()

    @property
    def enabled(self) -> bool:
        return self.cache_config.enabled

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    async def initialize(self) -> None:
        """
        Connect to Redis when enabled.

        If the Redis connection fails, it falls back to the in-memory cache.
        """
        if not settings.REDIS_ENABLED:
            logger.info("Redis disabled. Using in-memory cache.")
            self._use_memory()
            return
        try:
            await self.redis_client.connect()
            self._client = self.redis_client
            self.is_redis_available = True
        except RedisConnectionError as e:
            logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
            self._use_memory()
        logger.info("Cache manager initialized successfully.")

    async def shutdown(self) -> None:
        """Close the active client connection."""
        if self.is_redis_available:
            await self.redis_client.disconnect()
        await self.memory_client.close()
        logger.info("Cache manager shutdown successfully.")

    def _use_memory(self) -> None:
        self._client = self.memory_client
        self.is_redis_available = False
        self.memory_client.is_connected = True

    def _build_key(self, key: str, namespace: str) -> str:
        """Build full cache key with prefix and namespace."""
        return f"{self.cache_config.key_prefix}:{namespace}:{key}"

    def generation(self, namespace: str) -> int:
        """Return how many times the namespace has been invalidated."""
        return self._generations.get(namespace, 0)

    async def get(self, key: str, namespace: str) -> Any | None:
        """Get a value from the cache, ``None`` on a miss."""
        full_key = self._build_key(key, namespace)
        try:
            if logger.isEnabledFor(DEBUG):
                logger.debug("Getting from cache: %s", full_key)
            cached_value = await self._client.get(full_key)
        except RedisConnectionError as e:
            await self._fallback_to_memory()
            raise CacheKeyError("get", full_key) from e
        except BASE_EXCEPTION as e:
            self.statistics.record("errors")
            raise CacheKeyError("get", full_key) from e

        if cached_value is None:
            self.statistics.record("misses")
            return None

        self.statistics.record("hits")
        return deserialize(decompress(cached_value))

    async def set(self, key: str, value: object, namespace: str, ttl: int | None = None) -> bool:
        """Store a value. A ttl of 0 (the default config) means no expiry."""
        full_key = self._build_key(key, namespace)
        serialized = serialize(value)
        if self.cache_config.compression_enabled and do_compress(
            serialized,
            self.cache_config.compression_threshold,
        ):
            serialized = compress(serialized)

        ex = ttl if ttl is not None else self.cache_config.default_ttl
        try:
            success = await self._client.set(full_key, serialized, ex=ex or None)
        except RedisConnectionError as e:
            await self._fallback_to_memory()
            raise CacheKeyError("set", full_key) from e
        except BASE_EXCEPTION as e:
            self.statistics.record("errors")
            raise CacheKeyError("set", full_key) from e
        self.statistics.record("sets")
        return success

    async def clear(self, namespace: str | None = None) -> int:
        """
        Remove every entry of a namespace, or of the whole cache.

        The namespace generation is bumped before any key is removed, so
        loaders still in flight will not write their results back.
        """
        if namespace is None:
            for name in list(self._generations):
                self._generations[name] += 1
            pattern = f"{self.cache_config.key_prefix}:*"
        else:
            self._generations[namespace] = self.generation(namespace) + 1
            pattern = f"{self.cache_config.key_prefix}:{namespace}:*"

        deleted_total = 0
        keys_batch: list[str] = []
        try:
            async for key in self._client.scan_iter(pattern):
                keys_batch.append(key)
                if len(keys_batch) >= 1000:
                    deleted_total += await self._client.delete(*keys_batch)
                    keys_batch = []
            if keys_batch:
                deleted_total += await self._client.delete(*keys_batch)
        except RedisConnectionError:
            # Entries left in Redis are unreachable once we fall back
            await self._fallback_to_memory()
            return await self.clear(namespace)
        except BASE_EXCEPTION as e:
            logger.exception("Cache clear failed")
            self.statistics.record("errors")
            raise CacheKeyError("clear", pattern) from e

        self.statistics.record("invalidations")
        if logger.isEnabledFor(DEBUG):
            logger.debug("Cleared %d keys for pattern '%s'.", deleted_total, pattern)
        return deleted_total

    async def invalidate(self, *namespaces: str) -> None:
        """Clear each namespace, logging failures instead of raising them."""
        for namespace in namespaces:
            try:
                await self.clear(namespace)
            except CacheExceptionError:
                logger.exception("Failed to invalidate cache namespace %s", namespace)

    def _get_or_create_lock(self, key: str) -> AsyncLock:
        """Get or create the coalescing lock of a key, evicting the oldest locks."""
        with self._locks_lock:
            if key in self._locks:
                self._locks.move_to_end(key)
                return self._locks[key]

            while len(self._locks) >= self.MAX_LOCKS:
                self._locks.popitem(last=False)

            lock = AsyncLock()
            self._locks[key] = lock
            return lock

    async def _safe_get(self, key: str, namespace: str) -> Any | None:
        try:
            return await self.get(key, namespace)
        except CACHE_FAILURES as e:
            logger.warning("Failed to retrieve from cache: %s", e)
            return None

    async def get_or_set(self, key: str, loader: CacheLoader, namespace: str) -> Any:
        """
        Return the cached value or compute it with ``loader`` and store it.

        ``None`` results are returned but never stored. Cache failures turn
        this into a plain call to ``loader``.
        """
        if not self.enabled:
            return await loader()

        cached = await self._safe_get(key, namespace)
        if cached is not None:
            return cached

        lock = self._get_or_create_lock(self._build_key(key, namespace))
        async with lock:
            # Another request may have filled it while we waited
            cached = await self._safe_get(key, namespace)
            if cached is not None:
                return cached

            generation = self.generation(namespace)
            value = await loader()
            if value is None or self.generation(namespace) != generation:
                return value

            try:
                await self.set(key, value, namespace)
            except CACHE_FAILURES as e:
                logger.warning("Failed to store cache entry: %s", e)
            return value

    async def _fallback_to_memory(self) -> None:
        """Switch to the in-memory client when Redis fails at runtime."""
        self.statistics.record("errors")
        if self.is_redis_available:
            logger.warning("Redis connection lost. Falling back to in-memory cache.")
            self._use_memory()

    async def ping(self) -> bool:
        """Ping the cache server."""
        try:
            return await self._client.ping()
        except CACHE_FAILURES:
            logger.exception("Cache ping failed")
            return False

    async def health_check(self) -> dict[str, Any]:
        """Report backend, reachability and statistics."""
        result: dict[str, Any] = {
            "backend": self.backend,
            "enabled": self.enabled,
            "statistics": self.statistics.to_dict(),
        }
        try:
            result["status"] = "healthy" if await self._client.ping() else "unhealthy"
            result["info"] = await self._client.info()
        except CACHE_FAILURES as e:
            result["status"] = "unhealthy"
            result["error"] = str(e)
        return result


cache_manager = CacheManager()
