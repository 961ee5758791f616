"""Cache generation stores."""

from daily_tasks.cache.storage.base import CacheStorage
from daily_tasks.cache.storage.filesystem import FileSystemCacheStorage
from daily_tasks.cache.storage.memory import MemoryCacheStorage

__all__ = ["CacheStorage", "FileSystemCacheStorage", "MemoryCacheStorage"]
