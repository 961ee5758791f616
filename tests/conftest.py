"""Shared fixtures and test doubles."""

import os
from collections.abc import Callable

import httpx
import pytest

from daily_tasks.cache.manifest import PrecacheManifest
from daily_tasks.cache.network import NetworkFetcher
from daily_tasks.cache.storage import MemoryCacheStorage
from daily_tasks.config import CacheConfig, Settings, get_settings
from daily_tasks.errors.logger import get_logger
from daily_tasks.reminders.clock import Clock, TimerHandle
from daily_tasks.reminders.notifications import NotificationFacility, PermissionState

ORIGIN = "https://tasks.example.com"
SHELL_URLS = ("/", "/index.html", "/app.js")


@pytest.fixture(autouse=True, scope="session")
def isolated_logs(tmp_path_factory):
    """Keep log files out of the working tree."""
    os.environ["LOG_DIR"] = str(tmp_path_factory.mktemp("logs"))
    get_settings.cache_clear()
    get_logger.cache_clear()
    yield
    get_settings.cache_clear()
    get_logger.cache_clear()


class FakeServer:
    """Origin server behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes] | Exception] = {}
        self.calls: list[str] = []
        self.offline = False

    def url(self, path_or_url: str) -> str:
        if path_or_url.startswith("http"):
            return path_or_url
        return ORIGIN + path_or_url

    def add(self, path_or_url: str, status: int = 200, content: bytes | None = None) -> None:
        body = content if content is not None else f"body of {path_or_url}".encode()
        self.routes[self.url(path_or_url)] = (status, body)

    def fail(self, path_or_url: str, error: Exception | None = None) -> None:
        self.routes[self.url(path_or_url)] = error or httpx.ConnectError("connection refused")

    def count(self, path_or_url: str) -> int:
        return self.calls.count(self.url(path_or_url))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if self.offline:
            raise httpx.ConnectError("network is unreachable", request=request)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, content=body, headers={"Content-Type": "text/plain"})


@pytest.fixture
def server():
    server = FakeServer()
    for path in SHELL_URLS:
        server.add(path)
    return server


@pytest.fixture
async def network(server):
    fetcher = NetworkFetcher(
        ORIGIN, client=httpx.AsyncClient(transport=httpx.MockTransport(server.handler))
    )
    yield fetcher
    await fetcher.close()


@pytest.fixture
def storage():
    return MemoryCacheStorage()


@pytest.fixture
def settings():
    return Settings(cache=CacheConfig(origin=ORIGIN, skip_waiting_on_install=True))


@pytest.fixture
def manifest():
    return PrecacheManifest(version="v1", urls=SHELL_URLS)


class FakeTimerHandle(TimerHandle):
    def __init__(self, fire_at: int, callback: Callable[[], None], cancellable: bool) -> None:
        self.fire_at = fire_at
        self.callback = callback
        self.cancellable = cancellable
        self.cancelled = False
        self.ran = False

    def cancel(self) -> None:
        if self.cancellable:
            self.cancelled = True


class FakeClock(Clock):
    """Manually advanced clock; timers run when time passes them."""

    def __init__(self, now: int = 1_700_000_000_000, cancellable: bool = True) -> None:
        self.now = now
        self.cancellable = cancellable
        self.timers: list[FakeTimerHandle] = []

    def now_millis(self) -> int:
        return self.now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = FakeTimerHandle(self.now + delay_ms, callback, self.cancellable)
        self.timers.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeTimerHandle]:
        return [t for t in self.timers if not t.cancelled and not t.ran]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.pending if t.fire_at <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.fire_at)
            self.now = timer.fire_at
            timer.ran = True
            timer.callback()
        self.now = target


@pytest.fixture
def clock():
    return FakeClock()


class FakeFacility(NotificationFacility):
    """Platform notification facility that records what it shows."""

    def __init__(
        self,
        permission: PermissionState = PermissionState.GRANTED,
        available: bool = True,
        answer: PermissionState = PermissionState.GRANTED,
    ) -> None:
        self._permission = permission
        self._available = available
        self.answer = answer
        self.shown: list[dict[str, str]] = []

    @property
    def available(self) -> bool:
        return self._available

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        self._permission = self.answer
        return self._permission

    def show(self, title: str, body: str, icon: str, tag: str) -> None:
        self.shown.append({"title": title, "body": body, "icon": icon, "tag": tag})


@pytest.fixture
def facility():
    return FakeFacility()


@pytest.fixture
def uncancellable_clock():
    """Clock whose timers ignore cancel(), like a platform without clearTimeout."""
    return FakeClock(cancellable=False)


@pytest.fixture
def facility_factory():
    return FakeFacility
