"""
Form-data HTTP connector package.
"""

from .audit import AuditMirror, build_audit_document
from .models import (
    HttpClient,
    HttpClientError,
    HttpRequest,
    HttpResponse,
    HttpTransportError,
)
from .multipart import MultipartPayload, encode_form_fields, encode_multipart
from .pool import ConnectionPoolConfig, build_session
from .tracing import TraceContext, current_trace, reset_trace, set_trace, trace_scope
from .transport import FormDataHttpClient, build_form_data_client

__all__ = [
    "AuditMirror",
    "build_audit_document",
    "HttpClient",
    "HttpClientError",
    "HttpRequest",
    "HttpResponse",
    "HttpTransportError",
    "MultipartPayload",
    "encode_form_fields",
    "encode_multipart",
    "ConnectionPoolConfig",
    "build_session",
    "TraceContext",
    "current_trace",
    "set_trace",
    "reset_trace",
    "trace_scope",
    "FormDataHttpClient",
    "build_form_data_client",
]
