from blogpost.clients.memory_client import MemoryClient
from blogpost.clients.protocols import CacheClientProtocol
from blogpost.clients.redis_client import RedisClient

__all__ = ["CacheClientProtocol", "MemoryClient", "RedisClient"]
