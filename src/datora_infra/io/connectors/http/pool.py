"""
Keep-alive connection pool for outbound form-data requests.

One pooled ``requests.Session`` is built per client and reused for every
request that client sends.
"""

import threading
import time
from dataclasses import dataclass
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from datora_infra.config.settings import Settings, get_settings
from datora_infra.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionPoolConfig:
    """
    Connection pool limits.

    Attributes:
        max_sockets: Connections per host; requests block once all are busy
        max_free_sockets: Host pools kept warm. This bounds the number of
            hosts with pooled sockets, not the idle sockets per host; each
            host pool keeps up to ``max_sockets`` connections
        timeout: Active socket timeout (connect and read), seconds
        free_socket_timeout: Idle time after which pooled sockets are discarded
        retries: Connection-level retries (reads are never retried)
    """

    max_sockets: int = 100
    max_free_sockets: int = 10
    timeout: float = 60.0
    free_socket_timeout: float = 30.0
    retries: int = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ConnectionPoolConfig":
        settings = settings or get_settings()
        return cls(
            max_sockets=settings.http_max_sockets,
            max_free_sockets=settings.http_max_free_sockets,
            timeout=settings.http_timeout,
            free_socket_timeout=settings.http_free_socket_timeout,
            retries=settings.http_retry_max,
        )


class KeepAliveAdapter(HTTPAdapter):
    """
    HTTPAdapter that drops idle pooled sockets before reuse.

    When nothing was sent through the adapter for ``free_socket_timeout``
    seconds, the pooled connections are closed so the next request opens a
    fresh socket instead of reusing one the server may already have dropped.
    The adapter and its pool manager stay in place.
    """

    def __init__(self, free_socket_timeout: float, **kwargs):
        self.free_socket_timeout = free_socket_timeout
        self._last_used: Optional[float] = None
        self._idle_lock = threading.Lock()
        super().__init__(**kwargs)

    def _discard_idle_sockets(self) -> None:
        with self._idle_lock:
            if self._last_used is None:
                return
            idle_for = time.monotonic() - self._last_used
            if idle_for > self.free_socket_timeout:
                logger.debug(
                    "http.pool.idle_sockets_discarded",
                    idle_seconds=round(idle_for, 1),
                )
                self.poolmanager.clear()

    def send(self, request, **kwargs):
        self._discard_idle_sockets()
        try:
            return super().send(request, **kwargs)
        finally:
            self._last_used = time.monotonic()


def build_session(config: ConnectionPoolConfig) -> requests.Session:
    """Create a session with one keep-alive adapter mounted for http and https."""
    adapter = KeepAliveAdapter(
        free_socket_timeout=config.free_socket_timeout,
        pool_connections=config.max_free_sockets,
        pool_maxsize=config.max_sockets,
        pool_block=True,
        max_retries=Retry(total=config.retries, read=False),
    )
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    logger.debug(
        "http.pool.created",
        max_sockets=config.max_sockets,
        max_free_sockets=config.max_free_sockets,
        timeout=config.timeout,
        free_socket_timeout=config.free_socket_timeout,
        retries=config.retries,
    )
    return session
