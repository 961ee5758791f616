"""In-process cache store."""

from collections.abc import Sequence

from daily_tasks.cache.models import CacheRequest, ResponseSnapshot
from daily_tasks.cache.storage.base import CacheStorage


class MemoryCacheStorage(CacheStorage):
    """Cache generations kept in a dict for the lifetime of the process."""

    def __init__(self) -> None:
        # dicts keep insertion order, which is generation creation order
        self._caches: dict[str, dict[str, ResponseSnapshot]] = {}

    async def keys(self) -> list[str]:
        return list(self._caches)

    async def has(self, cache_name: str) -> bool:
        return cache_name in self._caches

    async def delete(self, cache_name: str) -> bool:
        return self._caches.pop(cache_name, None) is not None

    async def match(
        self, request: CacheRequest, cache_name: str | None = None
    ) -> ResponseSnapshot | None:
        key = request.cache_key()
        if cache_name is not None:
            found = self._caches.get(cache_name, {}).get(key)
            return found.clone() if found else None

        for entries in self._caches.values():
            if key in entries:
                return entries[key].clone()
        return None

    async def put(
        self, cache_name: str, request: CacheRequest, response: ResponseSnapshot
    ) -> None:
        self._caches.setdefault(cache_name, {})[request.cache_key()] = response.clone()

    async def put_all(
        self,
        cache_name: str,
        entries: Sequence[tuple[CacheRequest, ResponseSnapshot]],
    ) -> None:
        staged = dict(self._caches.get(cache_name, {}))
        for request, response in entries:
            staged[request.cache_key()] = response.clone()
        self._caches[cache_name] = staged

    async def entries(self, cache_name: str) -> list[str]:
        return list(self._caches.get(cache_name, {}))
