"""
Audit mirroring of form-data requests into the search index.

After a request completes, the mirror looks up the event record indexed for
the current transaction and, when one exists, writes a document pairing the
request with its response. Mirroring is observability only: every failure is
logged and swallowed so the caller's response is never affected.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from datora_infra.io.connectors.search import SearchIndex
from datora_infra.utils.logging import get_logger

from .models import HttpRequest, HttpResponse
from .multipart import is_structured
from .tracing import TraceContext, current_trace

logger = get_logger(__name__)

DEFAULT_EVENT_INDEX = "datora-event"
DEFAULT_REQUEST_INDEX = "datora-http-request"


def payload_snapshot(payload: Any) -> Dict[str, Any]:
    """Nest structured payloads under ``body`` and anything else under ``rawBody``."""
    if is_structured(payload):
        return {"body": payload}
    return {"rawBody": str(payload)}


def build_audit_document(
    event_document: Dict[str, Any],
    trace: TraceContext,
    request: HttpRequest,
    response: HttpResponse,
    *,
    request_transaction_id: str,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the document written to the audit index."""
    created_at = created_at or datetime.now(timezone.utc)
    return {
        "event": event_document.get("event"),
        "mvno": event_document.get("mvno"),
        "traceId": trace.trace_id,
        "eventId": trace.transaction_id,
        "request": {
            "transactionId": request_transaction_id,
            "url": request.url,
            "method": request.method,
            **payload_snapshot(dict(request.body)),
            "headers": dict(request.headers),
        },
        "response": {
            "statusCode": response.status_code,
            **payload_snapshot(response.body),
            "headers": dict(response.headers),
        },
        "createdAt": created_at.isoformat(),
    }


class AuditMirror:
    """Writes request/response pairs for traced transactions to the search index."""

    def __init__(
        self,
        search: SearchIndex,
        *,
        event_index: str = DEFAULT_EVENT_INDEX,
        request_index: str = DEFAULT_REQUEST_INDEX,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.search = search
        self.event_index = event_index
        self.request_index = request_index
        self.id_factory = id_factory

    def mirror(
        self,
        request: HttpRequest,
        response: HttpResponse,
        trace: Optional[TraceContext] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Record ``request``/``response`` if the transaction has an event record.

        Args:
            request: The request that was sent
            response: Its normalized response
            trace: Explicit trace; falls back to the ambient trace context

        Returns:
            The document written, or None when nothing was written
        """
        try:
            return self._mirror(request, response, trace)
        except Exception as e:
            logger.warning(
                "http.audit.failed",
                url=request.url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _mirror(
        self,
        request: HttpRequest,
        response: HttpResponse,
        trace: Optional[TraceContext],
    ) -> Optional[Dict[str, Any]]:
        trace = trace or current_trace()
        if trace is None:
            return None

        event_document = self.search.get_by_id(trace.transaction_id, self.event_index)
        if event_document is None:
            logger.debug(
                "http.audit.skipped",
                reason="event_not_found",
                transaction_id=trace.transaction_id,
            )
            return None

        document = build_audit_document(
            event_document,
            trace,
            request,
            response,
            request_transaction_id=self.id_factory(),
        )
        self.search.create(self.request_index, document)

        logger.debug(
            "http.audit.written",
            index=self.request_index,
            trace_id=trace.trace_id,
            transaction_id=trace.transaction_id,
        )
        return document
