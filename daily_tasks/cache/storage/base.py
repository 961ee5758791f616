"""Abstract base class for cache generation stores."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from daily_tasks.cache.models import CacheRequest, ResponseSnapshot


class CacheStorage(ABC):
    """Named cache generations holding request-key to response entries.

    A store handle is owned by one worker process and passed into each
    lifecycle handler. Writes for a key overwrite any earlier entry.
    """

    @abstractmethod
    async def keys(self) -> list[str]:
        """Names of every generation, in creation order."""
        pass

    @abstractmethod
    async def has(self, cache_name: str) -> bool:
        """Check whether a generation exists."""
        pass

    @abstractmethod
    async def delete(self, cache_name: str) -> bool:
        """Delete a generation and every entry in it.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def match(
        self, request: CacheRequest, cache_name: str | None = None
    ) -> ResponseSnapshot | None:
        """Find a stored response for a request.

        Args:
            request: Request to look up by its cache key
            cache_name: Restrict the lookup to one generation. When omitted,
                generations are searched in creation order.

        Returns:
            The stored response, or None on a miss
        """
        pass

    @abstractmethod
    async def put(
        self, cache_name: str, request: CacheRequest, response: ResponseSnapshot
    ) -> None:
        """Store one entry, creating the generation if needed."""
        pass

    @abstractmethod
    async def put_all(
        self,
        cache_name: str,
        entries: Sequence[tuple[CacheRequest, ResponseSnapshot]],
    ) -> None:
        """Store a batch of entries so that all or none become visible."""
        pass

    @abstractmethod
    async def entries(self, cache_name: str) -> list[str]:
        """Cache keys stored in a generation."""
        pass

    async def clear(self) -> None:
        """Delete every generation."""
        for name in await self.keys():
            await self.delete(name)
