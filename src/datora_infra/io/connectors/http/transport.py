"""
Form-data HTTP client.

Sends request bodies as multipart form fields over a pooled keep-alive
session, returns every completed exchange as data (whatever the status) and
hands the pair to the audit mirror afterwards.
"""

import time
from typing import Optional

import requests

from datora_infra.config.settings import Settings, get_settings
from datora_infra.io.connectors.search import ElasticsearchClient
from datora_infra.utils.logging import get_logger

from .audit import AuditMirror
from .models import HttpRequest, HttpResponse, HttpTransportError
from .multipart import encode_multipart
from .pool import ConnectionPoolConfig, build_session
from .tracing import TraceContext
from .utils import merge_headers, sanitize_url_for_logging

logger = get_logger(__name__)


def normalize_response(response: requests.Response) -> HttpResponse:
    """
    Convert a ``requests`` response into :class:`HttpResponse`.

    JSON payloads are decoded; anything else is kept as text.
    """
    if not response.content:
        body = ""
    else:
        try:
            body = response.json()
        except ValueError:
            body = response.text
    return HttpResponse(
        status_code=response.status_code,
        body=body,
        headers=dict(response.headers),
    )


class FormDataHttpClient:
    """
    HTTP client that sends request bodies as ``multipart/form-data``.

    The connection pool is created once, at construction, and shared by all
    requests sent through the instance. Only transport failures raise;
    4xx/5xx responses come back as :class:`HttpResponse`.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        pool_config: Optional[ConnectionPoolConfig] = None,
        audit_mirror: Optional[AuditMirror] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the client.

        Args:
            session: Pre-built session. If None, a keep-alive pool is built
                from ``pool_config``
            pool_config: Pool limits. If None, read from settings
            audit_mirror: Mirror for traced requests. If None, nothing is mirrored
            settings: Settings override; defaults to get_settings()
        """
        self.settings = settings or get_settings()
        self.pool_config = pool_config or ConnectionPoolConfig.from_settings(
            self.settings
        )
        self.session = session or build_session(self.pool_config)
        self.audit_mirror = audit_mirror

        logger.info(
            "http.client.initialized",
            timeout=self.pool_config.timeout,
            max_sockets=self.pool_config.max_sockets,
            audit_enabled=audit_mirror is not None,
        )

    def request(
        self, data: HttpRequest, trace: Optional[TraceContext] = None
    ) -> HttpResponse:
        """
        Send ``data`` and return its normalized response.

        Args:
            data: Request to send; ``data.body`` becomes multipart form fields
            trace: Trace to audit under. If None, the ambient trace is used

        Returns:
            HttpResponse for any completed exchange, including 4xx/5xx

        Raises:
            HttpTransportError: When no response was received
        """
        payload = encode_multipart(data.body)
        headers = merge_headers(data.headers, payload.headers)
        method = data.method.upper()
        sanitized_url = sanitize_url_for_logging(data.url)

        started = time.monotonic()
        try:
            raw_response = self.session.request(
                method,
                data.url,
                headers=headers,
                data=payload.body,
                timeout=self.pool_config.timeout,
            )
        except requests.RequestException as e:
            logger.warning(
                "http.request.failed",
                method=method,
                url=sanitized_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise HttpTransportError(str(e), url=data.url) from e

        if raw_response is None:
            logger.warning("http.request.failed", method=method, url=sanitized_url)
            raise HttpTransportError("no response received", url=data.url)

        response = normalize_response(raw_response)

        logger.info(
            "http.request.completed",
            method=method,
            url=sanitized_url,
            status_code=response.status_code,
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )

        if self.audit_mirror is not None:
            self.audit_mirror.mirror(data, response, trace)

        return response

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def __enter__(self) -> "FormDataHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def build_form_data_client(settings: Optional[Settings] = None) -> FormDataHttpClient:
    """
    Build a client wired from settings.

    Audit mirroring is enabled when ``audit_enabled`` is set and a search
    base URL is configured.
    """
    settings = settings or get_settings()

    audit_mirror = None
    if settings.audit_enabled and settings.search_base_url:
        audit_mirror = AuditMirror(
            ElasticsearchClient(settings=settings),
            event_index=settings.audit_event_index,
            request_index=settings.audit_request_index,
        )

    return FormDataHttpClient(settings=settings, audit_mirror=audit_mirror)
