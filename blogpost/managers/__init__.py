from blogpost.managers.cache_manager import CacheManager, CacheStatistics, cache_manager

__all__ = ["CacheManager", "CacheStatistics", "cache_manager"]
