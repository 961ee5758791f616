"""Exception types raised by the cache worker and the remote client."""


class DailyTasksError(Exception):
    """Base class for errors raised by this package."""


class PrecacheError(DailyTasksError):
    """A precache manifest entry could not be fetched during install."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to precache {url}: {reason}")


class RemoteServiceError(DailyTasksError):
    """The remote task service rejected or failed a call."""

    def __init__(self, method: str, status: int | None, detail: str = "") -> None:
        self.method = method
        self.status = status
        self.detail = detail
        message = f"Remote call {method} failed"
        if status is not None:
            message += f" with status {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
