"""Wall clock and timer abstraction for reminder scheduling."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A pending timer callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback from running, if it has not run yet."""
        pass


class Clock(ABC):
    """Source of wall-clock time and deferred callbacks."""

    @abstractmethod
    def now_millis(self) -> int:
        """Milliseconds since the epoch."""
        pass

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        pass


class _AsyncioTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioClock(Clock):
    """Wall clock backed by the running event loop's timers.

    Timers are relative: if the host sleeps, a reminder may fire late.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now_millis(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimerHandle(self.loop.call_later(delay_ms / 1000, callback))
