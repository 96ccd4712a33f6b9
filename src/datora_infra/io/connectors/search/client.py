"""
Search index client over the Elasticsearch document REST API.
"""

import json
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import quote

import requests

from datora_infra.config.settings import Settings, get_settings
from datora_infra.utils.logging import get_logger

from .models import SearchIndexError

logger = get_logger(__name__)


class SearchIndex(Protocol):
    """Protocol for document stores used by the audit mirror."""

    def get_by_id(self, id: str, index: str) -> Optional[Dict[str, Any]]: ...
    def create(self, index: str, data: Mapping[str, Any]) -> Dict[str, Any]: ...


class ElasticsearchClient:
    """
    Minimal Elasticsearch client: fetch a document by id, index a new one.

    Uses its own ``requests.Session`` so connections to the cluster are
    reused across calls.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Cluster URL. If None, uses DATORA_SEARCH_BASE_URL
            username: Basic auth user. If None, uses settings
            password: Basic auth password. If None, uses settings
            timeout: Request timeout in seconds. If None, uses settings
            session: Pre-built session (tests, shared pools)
            settings: Settings override; defaults to get_settings()
        """
        self.settings = settings or get_settings()

        base_url = base_url or self.settings.search_base_url
        if not base_url:
            raise SearchIndexError(
                "Search base URL required via constructor parameter or "
                "DATORA_SEARCH_BASE_URL"
            )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else self.settings.search_timeout

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json; charset=utf-8",
            }
        )
        username = username or self.settings.search_username
        password = password or self.settings.search_password
        if username:
            self.session.auth = (username, password or "")

    def _url(self, index: str, *parts: str) -> str:
        segments = [quote(index, safe="")] + [quote(p, safe="") for p in parts]
        return "/".join([self.base_url, *segments])

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("search.request_failed", method=method, url=url, error=str(e))
            raise SearchIndexError(f"Search request failed: {e}") from e

    def get_by_id(self, id: str, index: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a document's source by id.

        Returns:
            The ``_source`` dict, or None when the document does not exist
        """
        response = self._send("GET", self._url(index, "_doc", id))

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise SearchIndexError(
                f"Unexpected status code fetching {index}/{id}: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SearchIndexError(f"Invalid JSON from search cluster: {e}") from e

        if not payload.get("found", True):
            return None
        return payload.get("_source")

    def create(self, index: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Index a new document with a cluster-assigned id.

        Returns:
            The cluster's JSON acknowledgement (``_id``, ``result``, ...)
        """
        body = json.dumps(data, ensure_ascii=False, default=str).encode("utf-8")
        response = self._send("POST", self._url(index, "_doc"), data=body)

        if not 200 <= response.status_code < 300:
            raise SearchIndexError(
                f"Unexpected status code indexing into {index}: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return {}

    def close(self) -> None:
        self.session.close()
