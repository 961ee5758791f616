"""Request and response snapshot models for the offline cache."""

import base64
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from urllib.parse import urldefrag, urlsplit

from pydantic import BaseModel, Field, field_serializer, field_validator


class RequestMode(str, Enum):
    """How a request was issued by the page."""

    NAVIGATE = "navigate"
    SAME_ORIGIN = "same-origin"
    CORS = "cors"
    NO_CORS = "no-cors"


class ResponseType(str, Enum):
    """Visibility of a response to the page."""

    BASIC = "basic"
    CORS = "cors"
    OPAQUE = "opaque"
    ERROR = "error"


def _origin_of(url: str) -> tuple[str, str, int | None]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    port = parts.port
    if port is None:
        port = {"http": 80, "https": 443}.get(scheme)
    return scheme, (parts.hostname or "").lower(), port


class CacheRequest(BaseModel):
    """An outgoing request intercepted by the worker."""

    url: str
    method: str = "GET"
    mode: RequestMode = RequestMode.SAME_ORIGIN
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Methods compare case-insensitively."""
        return v.upper()

    @property
    def is_navigation(self) -> bool:
        return self.mode == RequestMode.NAVIGATE

    def cache_key(self) -> str:
        """Normalized request identity: method plus URL without fragment."""
        url, _ = urldefrag(self.url)
        return f"{self.method} {url}"

    def is_same_origin(self, origin: str) -> bool:
        """Check whether the request targets the given origin."""
        return _origin_of(self.url) == _origin_of(origin)


class ResponseSnapshot(BaseModel):
    """A full response captured at a point in time."""

    url: str
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    content: bytes = b""
    type: ResponseType = ResponseType.BASIC
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def validate_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure timestamp is timezone-aware."""
        if v.tzinfo is None:
            raise ValueError("Timestamp must be timezone-aware")
        return v

    @field_validator("content", mode="before")
    @classmethod
    def decode_content(cls, v: Any) -> Any:
        """Accept base64 text when loading a stored snapshot."""
        if isinstance(v, str):
            return base64.b64decode(v)
        return v

    @field_serializer("content", when_used="json")
    def encode_content(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")

    @classmethod
    def opaque(cls, url: str) -> "ResponseSnapshot":
        """Response to a cross-origin no-cors request: nothing is readable."""
        return cls(url=url, status=0, type=ResponseType.OPAQUE)

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    def is_cacheable(self) -> bool:
        """Only full, readable 200 responses may be persisted."""
        return self.status == 200 and self.type in (ResponseType.BASIC, ResponseType.CORS)

    def clone(self) -> "ResponseSnapshot":
        """Independent copy, safe to persist while the original is returned."""
        return self.model_copy(deep=True)
