"""
Form-data HTTP connector models and exceptions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol


class HttpClientError(Exception):
    """Base exception for HTTP connector errors."""

    pass


class HttpTransportError(HttpClientError):
    """
    Raised when a request produced no response at all.

    Covers refused connections, DNS failures and timeouts. HTTP error
    statuses are returned as :class:`HttpResponse` instead.
    """

    code = "REQUEST_ERROR"

    def __init__(self, message: str = "", *, url: Optional[str] = None):
        self.url = url
        super().__init__(f"{self.code}: {message}" if message else self.code)


@dataclass(frozen=True)
class HttpRequest:
    """Outbound request; ``body`` is sent as multipart form fields."""

    url: str
    method: str = "POST"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HttpResponse:
    """Normalized response for any completed exchange, 2xx or not."""

    status_code: int
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient(Protocol):
    """Protocol for clients that send :class:`HttpRequest` objects."""

    def request(self, data: HttpRequest) -> HttpResponse: ...
