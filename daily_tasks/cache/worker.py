"""Offline resource cache worker.

Handles the install, activate, fetch and message events for one version
of the application shell. All cache state lives in the ``CacheStorage``
handle passed in at construction; the worker holds no module-level state.
"""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING

import httpx

from daily_tasks.cache.events import ActivateEvent, FetchEvent, InstallEvent, MessageEvent
from daily_tasks.cache.manifest import PrecacheManifest
from daily_tasks.cache.models import CacheRequest, ResponseSnapshot
from daily_tasks.cache.network import NetworkFetcher
from daily_tasks.cache.storage.base import CacheStorage
from daily_tasks.config import Settings, get_settings
from daily_tasks.errors import (
    ErrorCategory,
    ErrorSeverity,
    PrecacheError,
    StructuredLogger,
    get_logger,
)

if TYPE_CHECKING:
    from daily_tasks.cache.runtime import Clients, WorkerContainer

SKIP_WAITING = "SKIP_WAITING"


class WorkerState(Enum):
    """Lifecycle state of a worker version."""

    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class CacheWorker:
    """Serves the application shell from cache generations."""

    def __init__(
        self,
        manifest: PrecacheManifest,
        storage: CacheStorage,
        network: NetworkFetcher,
        settings: Settings | None = None,
        logger: StructuredLogger | None = None,
    ):
        self.manifest = manifest
        self.storage = storage
        self.network = network
        self.settings = settings or get_settings()
        self.logger = logger or get_logger("daily_tasks.cache")
        self.state = WorkerState.PARSED
        self.skip_waiting_requested = False
        self.container: "WorkerContainer | None" = None
        self.clients: "Clients | None" = None
        self._writes: set[asyncio.Future[None]] = set()

    def __repr__(self) -> str:
        return f"<CacheWorker {self.manifest.version} {self.state.value}>"

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def precache_name(self) -> str:
        return self.manifest.precache_name

    @property
    def runtime_name(self) -> str:
        return self.manifest.runtime_name

    async def skip_waiting(self) -> None:
        """Ask to be activated without waiting for controlled pages to close."""
        self.skip_waiting_requested = True
        if self.container is not None:
            await self.container.skip_waiting(self)

    async def wait_for_writes(self) -> None:
        """Wait for runtime cache writes already in progress."""
        if self._writes:
            await asyncio.gather(*self._writes, return_exceptions=True)

    # Install

    async def handle_install(self, event: InstallEvent) -> None:
        event.wait_until(self._precache())

    async def _precache(self) -> None:
        results = await asyncio.gather(
            *(self._fetch_for_precache(url) for url in self.manifest.urls),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                self.logger.log_exception(
                    result,
                    ErrorCategory.INSTALL,
                    severity=ErrorSeverity.ERROR,
                    component="cache_worker",
                    url=getattr(result, "url", None),
                    metadata={"version": self.version},
                )
                raise result

        # every response is in hand before anything is written
        await self.storage.put_all(self.precache_name, results)
        self.logger.info(
            "Precached %d resources into %s", len(results), self.precache_name
        )

        if self.settings.cache.skip_waiting_on_install:
            await self.skip_waiting()

    async def _fetch_for_precache(self, url: str) -> tuple[CacheRequest, ResponseSnapshot]:
        request = self.network.request_for(url)
        try:
            response = await self.network.fetch(request)
        except httpx.TransportError as e:
            raise PrecacheError(request.url, str(e) or e.__class__.__name__) from e

        if not response.ok:
            raise PrecacheError(request.url, f"HTTP {response.status}")
        return request, response

    # Activate

    async def handle_activate(self, event: ActivateEvent) -> None:
        event.wait_until(self._activate())

    async def _activate(self) -> None:
        live = self.manifest.cache_names
        for name in await self.storage.keys():
            if name not in live:
                await self.storage.delete(name)
                self.logger.info("Deleted stale cache generation %s", name)

        if self.clients is not None:
            await self.clients.claim()

    # Fetch

    async def handle_fetch(self, event: FetchEvent) -> None:
        request = event.request
        # cross-origin and non-GET requests go straight to the network
        if request.method != "GET" or not request.is_same_origin(self.network.origin):
            return

        if request.is_navigation:
            event.respond_with(self._network_first(event))
        else:
            event.respond_with(self._cache_first(event))

    async def _network_first(self, event: FetchEvent) -> ResponseSnapshot:
        request = event.request
        try:
            response = await self.network.fetch(request)
        except httpx.TransportError:
            cached = await self.storage.match(request)
            if cached is None:
                shell = self.network.request_for(self.settings.cache.shell_url)
                cached = await self.storage.match(shell)
            if cached is None:
                raise
            self.logger.debug("Serving %s from cache while offline", request.url)
            return cached

        if response.status == 200:
            event.wait_until(self._store(request, response.clone()))
        return response

    async def _cache_first(self, event: FetchEvent) -> ResponseSnapshot:
        request = event.request
        cached = await self.storage.match(request)
        if cached is not None:
            return cached

        response = await self.network.fetch(request)
        if not response.is_cacheable():
            return response

        event.wait_until(self._store(request, response.clone()))
        return response

    async def _store(self, request: CacheRequest, response: ResponseSnapshot) -> None:
        # a replaced version must not recreate its generation after cleanup
        if self.state == WorkerState.REDUNDANT:
            return
        write = asyncio.ensure_future(self.storage.put(self.runtime_name, request, response))
        self._writes.add(write)
        write.add_done_callback(self._writes.discard)
        try:
            await write
        except Exception as e:
            self.logger.log_exception(
                e,
                ErrorCategory.CACHE,
                severity=ErrorSeverity.WARNING,
                component="cache_worker",
                url=request.url,
                metadata={"cache_name": self.runtime_name},
            )

    # Message

    async def handle_message(self, event: MessageEvent) -> None:
        data = event.data
        if isinstance(data, dict) and data.get("type") == SKIP_WAITING:
            event.wait_until(self.skip_waiting())
        else:
            self.logger.debug("Ignoring message %r", data)
