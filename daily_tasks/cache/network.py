"""Network access for the cache worker."""

from urllib.parse import urljoin

import httpx

from daily_tasks.cache.models import CacheRequest, RequestMode, ResponseSnapshot, ResponseType


class NetworkFetcher:
    """Fetches requests over HTTP and captures the responses as snapshots.

    Transport failures (offline, DNS, timeouts) propagate as
    ``httpx.TransportError`` so callers can tell them from HTTP error
    statuses, which are returned as ordinary snapshots.
    """

    def __init__(
        self,
        origin: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the fetcher.

        Args:
            origin: Origin of the application shell, used to resolve paths
                and to classify responses
            client: Optional preconfigured client (tests pass a mock transport)
            timeout: Request timeout in seconds
        """
        self.origin = origin.rstrip("/")
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": "daily-tasks-worker/1.0"},
            follow_redirects=True,
            timeout=timeout,
        )

    def resolve(self, path_or_url: str) -> str:
        """Turn a manifest path into an absolute URL on the shell's origin."""
        return urljoin(self.origin + "/", path_or_url)

    def request_for(
        self, path_or_url: str, mode: RequestMode = RequestMode.SAME_ORIGIN
    ) -> CacheRequest:
        return CacheRequest(url=self.resolve(path_or_url), mode=mode)

    async def fetch(self, request: CacheRequest) -> ResponseSnapshot:
        """Perform the request and capture its response."""
        response = await self.client.request(
            request.method, request.url, headers=request.headers
        )
        if request.is_same_origin(self.origin):
            response_type = ResponseType.BASIC
        elif request.mode == RequestMode.NO_CORS:
            return ResponseSnapshot.opaque(request.url)
        else:
            response_type = ResponseType.CORS

        return ResponseSnapshot(
            url=str(response.url),
            status=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            type=response_type,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
