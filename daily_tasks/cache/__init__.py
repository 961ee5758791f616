"""Offline resource cache for the application shell."""

from daily_tasks.cache.events import ActivateEvent, FetchEvent, InstallEvent, MessageEvent
from daily_tasks.cache.manifest import DEFAULT_PRECACHE_URLS, PrecacheManifest
from daily_tasks.cache.models import CacheRequest, RequestMode, ResponseSnapshot, ResponseType
from daily_tasks.cache.network import NetworkFetcher
from daily_tasks.cache.runtime import Client, WorkerContainer
from daily_tasks.cache.storage import CacheStorage, FileSystemCacheStorage, MemoryCacheStorage
from daily_tasks.cache.worker import SKIP_WAITING, CacheWorker, WorkerState

__all__ = [
    "DEFAULT_PRECACHE_URLS",
    "SKIP_WAITING",
    "ActivateEvent",
    "CacheRequest",
    "CacheStorage",
    "CacheWorker",
    "Client",
    "FetchEvent",
    "FileSystemCacheStorage",
    "InstallEvent",
    "MemoryCacheStorage",
    "MessageEvent",
    "NetworkFetcher",
    "PrecacheManifest",
    "RequestMode",
    "ResponseSnapshot",
    "ResponseType",
    "WorkerContainer",
    "WorkerState",
]
