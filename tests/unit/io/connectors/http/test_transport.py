"""
Unit tests for the form-data HTTP client.

The session is mocked; no request leaves the process.
"""

from typing import Optional
from unittest.mock import Mock, patch

import pytest
import requests

from datora_infra.io.connectors.http import (
    AuditMirror,
    ConnectionPoolConfig,
    FormDataHttpClient,
    HttpRequest,
    HttpResponse,
    HttpTransportError,
    TraceContext,
    build_form_data_client,
)
from datora_infra.io.connectors.http.pool import KeepAliveAdapter
from datora_infra.io.connectors.http.transport import normalize_response
from datora_infra.io.connectors.search import ElasticsearchClient, SearchIndexError


def make_response(
    status_code: int, content: bytes = b"", headers: Optional[dict] = None
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    return response


@pytest.fixture
def session():
    session = Mock()
    session.request.return_value = make_response(
        200, b'{"status": "ok"}', {"Content-Type": "application/json"}
    )
    return session


@pytest.fixture
def client(session, settings):
    return FormDataHttpClient(session=session, settings=settings)


@pytest.fixture
def activation_request():
    return HttpRequest(
        url="https://partner.example.com/v1/activate",
        method="post",
        headers={"Authorization": "Bearer abc", "X-Partner": "acme"},
        body={"msisdn": "5511999990000", "plan": {"tier": "gold"}, "qty": 2},
    )


@pytest.mark.unit
class TestFormDataHttpClientRequest:
    """Tests for request dispatch and response normalization."""

    def test_success_returns_normalized_response(self, client, activation_request):
        """2xx JSON responses are decoded into the body."""
        response = client.request(activation_request)

        assert response == HttpResponse(
            status_code=200,
            body={"status": "ok"},
            headers={"Content-Type": "application/json"},
        )
        assert response.ok

    def test_sends_multipart_body(self, client, session, activation_request):
        """The body goes out as multipart form fields with structured values as JSON."""
        client.request(activation_request)

        args, kwargs = session.request.call_args
        assert args == ("POST", "https://partner.example.com/v1/activate")
        body = kwargs["data"]
        assert b'name="msisdn"\r\n\r\n5511999990000\r\n' in body
        assert b'name="plan"\r\n\r\n{"tier": "gold"}\r\n' in body
        assert b'name="qty"\r\n\r\n2\r\n' in body

    def test_binary_body_value_sent(self, client, session):
        """Binary payloads that are not valid UTF-8 are sent, not rejected."""
        response = client.request(
            HttpRequest(url="https://partner.example.com/upload", body={"file": b"\xff\xd8\xff"})
        )

        assert response.status_code == 200
        body = session.request.call_args.kwargs["data"]
        assert b'name="file"\r\n\r\n\xff\xd8\xff\r\n' in body

    def test_caller_headers_kept_and_content_type_added(
        self, client, session, activation_request
    ):
        """Caller headers survive; the multipart Content-Type is added."""
        client.request(activation_request)

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer abc"
        assert headers["X-Partner"] == "acme"
        assert headers["Content-Type"].startswith("multipart/form-data; boundary=")
        boundary = headers["Content-Type"].split("boundary=", 1)[1]
        assert session.request.call_args.kwargs["data"].startswith(
            f"--{boundary}".encode()
        )

    def test_caller_content_type_replaced(self, client, session):
        """A caller Content-Type cannot contradict the multipart boundary."""
        client.request(
            HttpRequest(
                url="https://partner.example.com",
                headers={"content-type": "application/json"},
                body={"a": "1"},
            )
        )

        headers = session.request.call_args.kwargs["headers"]
        assert "content-type" not in headers
        assert headers["Content-Type"].startswith("multipart/form-data")

    def test_uses_pool_timeout(self, session, settings, activation_request):
        """The active timeout from the pool config is applied per request."""
        client = FormDataHttpClient(
            session=session,
            settings=settings,
            pool_config=ConnectionPoolConfig(timeout=5.0),
        )
        client.request(activation_request)

        assert session.request.call_args.kwargs["timeout"] == 5.0

    def test_http_error_status_is_returned(self, client, session, activation_request):
        """4xx responses come back as data, not exceptions."""
        session.request.return_value = make_response(
            404, b'{"error": "not found"}', {"Content-Type": "application/json"}
        )

        response = client.request(activation_request)

        assert response.status_code == 404
        assert response.body == {"error": "not found"}
        assert response.headers == {"Content-Type": "application/json"}
        assert not response.ok

    def test_server_error_status_is_returned(self, client, session, activation_request):
        """5xx responses with text bodies come back as data."""
        session.request.return_value = make_response(503, b"Service Unavailable")

        response = client.request(activation_request)

        assert response.status_code == 503
        assert response.body == "Service Unavailable"

    @pytest.mark.parametrize(
        "error",
        [
            requests.ConnectionError("connection refused"),
            requests.Timeout("read timed out"),
        ],
    )
    def test_transport_failure_raises_request_error(
        self, client, session, activation_request, error
    ):
        """No response at all surfaces as a REQUEST_ERROR failure."""
        session.request.side_effect = error

        with pytest.raises(HttpTransportError) as exc_info:
            client.request(activation_request)

        assert exc_info.value.code == "REQUEST_ERROR"
        assert str(exc_info.value).startswith("REQUEST_ERROR")
        assert exc_info.value.__cause__ is error
        assert exc_info.value.url == activation_request.url

    def test_missing_response_raises_request_error(
        self, client, session, activation_request
    ):
        """A session returning nothing is treated as a transport failure."""
        session.request.return_value = None

        with pytest.raises(HttpTransportError, match="REQUEST_ERROR"):
            client.request(activation_request)

    def test_session_reused_across_requests(self, client, session, activation_request):
        """Every request goes through the same session."""
        client.request(activation_request)
        client.request(activation_request)

        assert session.request.call_count == 2
        assert client.session is session

    def test_context_manager_closes_session(self, session, settings):
        """Leaving the context releases pooled connections."""
        with FormDataHttpClient(session=session, settings=settings):
            pass
        session.close.assert_called_once()


@pytest.mark.unit
class TestFormDataHttpClientAudit:
    """Tests for the interaction between dispatch and audit mirroring."""

    @pytest.fixture
    def search(self):
        search = Mock()
        search.get_by_id.return_value = {"event": "ACTIVATION", "mvno": "acme"}
        return search

    @pytest.fixture
    def audited_client(self, session, settings, search):
        mirror = AuditMirror(search, id_factory=lambda: "req-1")
        return FormDataHttpClient(session=session, settings=settings, audit_mirror=mirror)

    def test_explicit_trace_is_mirrored(self, audited_client, search, activation_request):
        """A traced request writes one audit document."""
        audited_client.request(activation_request, trace=TraceContext("trace-1", "tx-1"))

        search.get_by_id.assert_called_once_with("tx-1", "datora-event")
        search.create.assert_called_once()
        index, document = search.create.call_args.args
        assert index == "datora-http-request"
        assert document["response"]["body"] == {"status": "ok"}
        assert document["request"]["method"] == "post"

    def test_untraced_request_not_mirrored(self, audited_client, search, activation_request):
        """Without a trace nothing touches the search index."""
        audited_client.request(activation_request)

        search.get_by_id.assert_not_called()
        search.create.assert_not_called()

    def test_audit_failure_does_not_change_response(
        self, audited_client, search, activation_request
    ):
        """A failing audit write leaves the response intact."""
        search.create.side_effect = SearchIndexError("cluster down", status_code=503)

        response = audited_client.request(
            activation_request, trace=TraceContext("trace-1", "tx-1")
        )

        assert response.status_code == 200
        assert response.body == {"status": "ok"}

    def test_audit_not_attempted_on_transport_failure(
        self, audited_client, session, search, activation_request
    ):
        """The mirror only runs once a response exists."""
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(HttpTransportError):
            audited_client.request(activation_request, trace=TraceContext("t", "tx"))

        search.get_by_id.assert_not_called()


@pytest.mark.unit
class TestNormalizeResponse:
    """Tests for response normalization."""

    def test_empty_body_is_empty_string(self):
        assert normalize_response(make_response(204)).body == ""

    def test_json_array_decoded(self):
        assert normalize_response(make_response(200, b"[1, 2]")).body == [1, 2]

    def test_invalid_json_kept_as_text(self):
        assert normalize_response(make_response(200, b"{not json")).body == "{not json"


@pytest.mark.unit
class TestBuildFormDataClient:
    """Tests for settings-driven client wiring."""

    def test_pool_built_from_settings(self, settings):
        """Without an injected session a keep-alive pool is mounted."""
        client = build_form_data_client(settings)

        adapter = client.session.get_adapter("https://partner.example.com")
        assert isinstance(adapter, KeepAliveAdapter)
        assert client.session.get_adapter("http://partner.example.com") is adapter
        assert adapter._pool_maxsize == 100
        assert adapter._pool_connections == 10
        assert adapter._pool_block is True
        assert adapter.free_socket_timeout == 30.0
        assert client.pool_config.timeout == 60.0

    def test_audit_disabled_without_search_url(self, settings):
        """No search cluster configured means no mirror."""
        assert build_form_data_client(settings).audit_mirror is None

    def test_audit_enabled_with_search_url(self, settings):
        """A configured search cluster wires an Elasticsearch-backed mirror."""
        configured = settings.model_copy(
            update={"search_base_url": "http://search.local:9200"}
        )

        client = build_form_data_client(configured)

        assert isinstance(client.audit_mirror, AuditMirror)
        assert isinstance(client.audit_mirror.search, ElasticsearchClient)
        assert client.audit_mirror.request_index == "datora-http-request"

    def test_audit_can_be_switched_off(self, settings):
        """audit_enabled=False disables mirroring even with a cluster."""
        configured = settings.model_copy(
            update={"search_base_url": "http://search.local:9200", "audit_enabled": False}
        )
        assert build_form_data_client(configured).audit_mirror is None

    def test_uses_global_settings_by_default(self, settings):
        """get_settings() supplies defaults when nothing is passed."""
        with patch(
            "datora_infra.io.connectors.http.transport.get_settings",
            return_value=settings,
        ):
            client = build_form_data_client()
        assert client.settings is settings
