from blogpost.configs.logger import file_logger
from blogpost.configs.settings import (
    CacheConfig,
    pool_kwargs,
    settings,
)

__all__ = [
    "CacheConfig",
    "file_logger",
    "pool_kwargs",
    "settings",
]
