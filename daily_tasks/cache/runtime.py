"""Host runtime for cache worker versions.

``WorkerContainer`` plays the part of the platform: it installs new
worker versions, decides when a waiting version may activate, tracks
the pages (clients) each version controls, and routes their requests.
"""

import asyncio
import itertools
from typing import Any

from daily_tasks.cache.events import ActivateEvent, FetchEvent, InstallEvent, MessageEvent
from daily_tasks.cache.models import CacheRequest, ResponseSnapshot
from daily_tasks.cache.network import NetworkFetcher
from daily_tasks.cache.worker import CacheWorker, WorkerState
from daily_tasks.errors import ErrorCategory, ErrorSeverity, StructuredLogger, get_logger

_client_ids = itertools.count(1)


class Client:
    """An open page of the application."""

    def __init__(self, controller: CacheWorker | None = None) -> None:
        self.id = next(_client_ids)
        self.controller = controller

    def __repr__(self) -> str:
        return f"<Client {self.id} controller={self.controller!r}>"


class Clients:
    """The view of open pages given to one worker version."""

    def __init__(self, container: "WorkerContainer", worker: CacheWorker) -> None:
        self._container = container
        self._worker = worker

    def match_all(self) -> list[Client]:
        return [c for c in self._container.clients if c.controller is self._worker]

    async def claim(self) -> None:
        """Take control of every open page right away."""
        if self._container.active is not self._worker:
            raise RuntimeError("Only the active worker can claim clients")
        for client in self._container.clients:
            client.controller = self._worker


class WorkerContainer:
    """Registration of worker versions for one origin."""

    def __init__(self, network: NetworkFetcher, logger: StructuredLogger | None = None):
        self.network = network
        self.logger = logger or get_logger("daily_tasks.cache")
        self.installing: CacheWorker | None = None
        self.waiting: CacheWorker | None = None
        self.active: CacheWorker | None = None
        self.clients: list[Client] = []
        self._extended: set[asyncio.Task[None]] = set()

    # Pages

    def open_client(self) -> Client:
        """Open a page; it is controlled by the active worker, if any."""
        client = Client(controller=self.active)
        self.clients.append(client)
        return client

    async def close_client(self, client: Client) -> None:
        """Close a page, which may let a waiting worker activate."""
        if client in self.clients:
            self.clients.remove(client)
        await self._try_activate()

    # Lifecycle

    async def register(self, worker: CacheWorker) -> None:
        """Install a new worker version.

        Raises:
            PrecacheError: The install failed; the active worker is untouched.
        """
        worker.container = self
        worker.clients = Clients(self, worker)
        worker.state = WorkerState.INSTALLING
        self.installing = worker

        event = InstallEvent()
        try:
            await worker.handle_install(event)
            await event.settle()
        except BaseException:
            worker.state = WorkerState.REDUNDANT
            self.installing = None
            self.logger.warning("Install of %s failed; keeping %r", worker.version, self.active)
            raise

        self.installing = None
        if self.waiting is not None:
            self.waiting.state = WorkerState.REDUNDANT
        worker.state = WorkerState.INSTALLED
        self.waiting = worker
        await self._try_activate()

    async def skip_waiting(self, worker: CacheWorker) -> None:
        if worker is self.waiting:
            await self._activate(worker)

    async def _try_activate(self) -> None:
        worker = self.waiting
        if worker is None:
            return
        controlled = [c for c in self.clients if c.controller is self.active]
        if self.active is None or worker.skip_waiting_requested or not controlled:
            await self._activate(worker)

    async def _activate(self, worker: CacheWorker) -> None:
        previous = self.active
        self.waiting = None
        self.active = worker
        worker.state = WorkerState.ACTIVATING
        if previous is not None:
            previous.state = WorkerState.REDUNDANT
            await previous.wait_for_writes()

        event = ActivateEvent()
        try:
            await worker.handle_activate(event)
            await event.settle()
        finally:
            worker.state = WorkerState.ACTIVATED
        self.logger.info("Activated cache worker %s", worker.version)

    # Requests

    async def fetch(
        self, request: CacheRequest, client: Client | None = None
    ) -> ResponseSnapshot:
        """Route a request through the worker controlling the page.

        Requests from a page no worker controls, or that the worker does not
        answer, go directly to the network.
        """
        worker = client.controller if client is not None else self.active
        if worker is None:
            return await self.network.fetch(request)

        event = FetchEvent(request)
        await worker.handle_fetch(event)
        if not event.handled:
            return await self.network.fetch(request)
        try:
            return await event.response()
        finally:
            self._keep_alive(event)

    async def post_message(self, data: Any) -> None:
        """Deliver a message from a page to the newest worker version."""
        worker = self.waiting or self.active
        if worker is None:
            return
        event = MessageEvent(data)
        await worker.handle_message(event)
        await event.settle()

    def _keep_alive(self, event: FetchEvent) -> None:
        task = asyncio.ensure_future(event.settle())
        self._extended.add(task)
        task.add_done_callback(self._extended.discard)

    async def idle(self) -> None:
        """Wait until all extended fetch work has settled."""
        while self._extended:
            batch = list(self._extended)
            self._extended.difference_update(batch)
            results = await asyncio.gather(*batch, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    self.logger.log_exception(
                        result,
                        ErrorCategory.CACHE,
                        severity=ErrorSeverity.WARNING,
                        component="worker_container",
                    )
