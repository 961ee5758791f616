"""Lifecycle and request events dispatched to the cache worker.

Every event carries an explicit lifetime handle: work registered with
``wait_until`` keeps the worker alive until it settles, and the host
awaits ``settle()`` before it considers the event finished.
"""

import asyncio
from collections.abc import Awaitable
from typing import Any

from daily_tasks.cache.models import CacheRequest, ResponseSnapshot


class ExtendableEvent:
    """Event whose handler may extend the worker's lifetime."""

    type = "extendable"

    def __init__(self) -> None:
        self._pending: list[asyncio.Future[Any]] = []

    def wait_until(self, work: Awaitable[Any]) -> None:
        """Keep the worker alive until ``work`` settles."""
        self._pending.append(asyncio.ensure_future(work))

    @property
    def pending(self) -> int:
        return sum(1 for future in self._pending if not future.done())

    async def settle(self) -> None:
        """Wait for all extended work, re-raising the first failure."""
        # work registered while settling is picked up on the next pass
        while self._pending:
            batch, self._pending = self._pending, []
            results = await asyncio.gather(*batch, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    for future in self._pending:
                        future.cancel()
                    raise result


class InstallEvent(ExtendableEvent):
    type = "install"


class ActivateEvent(ExtendableEvent):
    type = "activate"


class FetchEvent(ExtendableEvent):
    """An intercepted request; the handler may answer it with ``respond_with``."""

    type = "fetch"

    def __init__(self, request: CacheRequest) -> None:
        super().__init__()
        self.request = request
        self._response: asyncio.Future[ResponseSnapshot] | None = None

    def respond_with(self, response: Awaitable[ResponseSnapshot]) -> None:
        """Take over the response for this request."""
        if self._response is not None:
            raise RuntimeError("respond_with() already called for this request")
        self._response = asyncio.ensure_future(response)

    @property
    def handled(self) -> bool:
        return self._response is not None

    async def response(self) -> ResponseSnapshot:
        if self._response is None:
            raise RuntimeError("Request was not handled by the worker")
        return await self._response


class MessageEvent(ExtendableEvent):
    """A message posted to the worker by a page."""

    type = "message"

    def __init__(self, data: Any) -> None:
        super().__init__()
        self.data = data
