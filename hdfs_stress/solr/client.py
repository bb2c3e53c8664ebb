"""
Async Solr REST client.

Wraps the Collections API, update/select handlers, the Config API and the
core-level system status handler behind one httpx client per node.
"""

from logging import Logger
from typing import Any

import httpx
from pydantic import ValidationError

from hdfs_stress.config import Settings
from hdfs_stress.errors import SolrResponseError, TransportError
from hdfs_stress.redaction import redact_headers, safe_log_request
from hdfs_stress.solr.types import (
    CollectionStatus,
    CommitVariant,
    QueryResponse,
    SystemInfo,
    parse_cluster_status,
)

COLLECTIONS_PATH = "/admin/collections"
SYSTEM_INFO_PATH = "/admin/system"


class AsyncSolrClient:
    """
    Async client bound to one Solr node.

    Requests that target a collection use ``collection`` when given, otherwise
    the client's default collection. Transport failures and non-2xx answers
    surface as TransportError. Every request is a single attempt.
    """

    def __init__(
        self,
        base_url: str,
        settings: Settings,
        logger: Logger,
        *,
        default_collection: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._settings = settings
        self._logger = logger
        self._timeout = settings.solr_request_timeout_s
        self._default_collection = default_collection

        self._auth: httpx.BasicAuth | None = None
        if settings.solr_username and settings.solr_password is not None:
            self._auth = httpx.BasicAuth(
                settings.solr_username, settings.solr_password.get_secret_value()
            )

        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_collection(self) -> str | None:
        return self._default_collection

    def set_default_collection(self, collection: str | None) -> None:
        """Route collection-less requests to ``collection``."""
        self._default_collection = collection

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, auth=self._auth)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncSolrClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _collection_path(self, collection: str | None) -> str:
        name = collection or self._default_collection
        if not name:
            raise ValueError("No collection given and no default collection set")
        return f"/{name}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request to Solr and decode the JSON body.

        Args:
            method: HTTP method
            path: Path below the node base URL
            params: Query parameters (``wt=json`` is always added)
            json_body: JSON request body
            timeout: Per-request timeout override in seconds

        Returns:
            Decoded response body

        Raises:
            TransportError: Network failure or non-2xx status
            SolrResponseError: Body is not JSON or reports a non-zero status
        """
        url = f"{self._base_url}{path}"
        query = {**(params or {}), "wt": "json"}

        self._logger.debug("Solr request: %s", safe_log_request(method, url, query))

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                url,
                params=query,
                json=json_body,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.RequestError as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        self._logger.debug(
            "Solr response: status=%d headers=%s",
            response.status_code,
            redact_headers(response.headers),
        )
        return self._decode(response)

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        url = str(response.request.url)
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = _error_message(body) or response.text[:200]
            raise TransportError(
                f"Solr returned {response.status_code} for {url}: {message}",
                status_code=response.status_code,
                url=url,
            )

        if not isinstance(body, dict):
            raise SolrResponseError(
                f"Solr returned a non-JSON body for {url}",
                status_code=response.status_code,
                url=url,
            )

        status = (body.get("responseHeader") or {}).get("status", 0)
        if status != 0:
            raise SolrResponseError(
                f"Solr reported status {status} for {url}: {_error_message(body)}",
                status_code=response.status_code,
                url=url,
            )
        return body

    # =========================================================================
    # Collections API
    # =========================================================================

    async def collections_api(self, action: str, **params: Any) -> dict[str, Any]:
        """Issue one Collections API action."""
        return await self._request(
            "GET", COLLECTIONS_PATH, params={"action": action, **params}
        )

    async def list_collections(self) -> list[str]:
        data = await self.collections_api("LIST")
        return list(data.get("collections") or [])

    async def cluster_status(self, collection: str) -> CollectionStatus | None:
        """
        Get the layout of ``collection``.

        Returns None when Solr does not know the collection.
        """
        try:
            data = await self.collections_api("CLUSTERSTATUS", collection=collection)
        except TransportError as e:
            if e.status_code in (400, 404):
                return None
            raise
        return parse_cluster_status(collection, data)

    # =========================================================================
    # Update / query handlers
    # =========================================================================

    async def add(self, docs: list[dict[str, Any]], collection: str | None = None) -> None:
        """Add documents through the JSON update handler."""
        await self._request(
            "POST", f"{self._collection_path(collection)}/update", json_body=docs
        )

    async def commit(
        self,
        variant: CommitVariant = CommitVariant.HARD,
        collection: str | None = None,
    ) -> None:
        await self._request(
            "POST",
            f"{self._collection_path(collection)}/update",
            params=variant.params,
            json_body={},
        )

    async def delete_by_query(self, query: str, collection: str | None = None) -> None:
        await self._request(
            "POST",
            f"{self._collection_path(collection)}/update",
            json_body={"delete": {"query": query}},
        )

    async def query(
        self,
        params: dict[str, Any],
        collection: str | None = None,
        handler: str = "/select",
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Run a request against a collection handler and return the raw body."""
        return await self._request(
            "GET",
            f"{self._collection_path(collection)}{handler}",
            params=params,
            timeout=timeout,
        )

    async def search(self, q: str = "*:*", collection: str | None = None) -> QueryResponse:
        """Run a select query and parse the result block."""
        data = await self.query({"q": q}, collection=collection)
        try:
            return QueryResponse.model_validate(data.get("response") or {})
        except ValidationError as e:
            raise SolrResponseError(f"Malformed select response: {e}") from e

    async def system_info(
        self,
        collection: str | None = None,
        timeout: float | None = None,
    ) -> SystemInfo:
        """
        Query the system status handler of the core serving ``collection``.

        Raises:
            SolrResponseError: The response lacks ``core.directory.data``
        """
        data = await self.query(
            {}, collection=collection, handler=SYSTEM_INFO_PATH, timeout=timeout
        )
        try:
            return SystemInfo.model_validate(data)
        except ValidationError as e:
            raise SolrResponseError(
                f"System status for {self._collection_path(collection)} on "
                f"{self._base_url} has no core.directory.data"
            ) from e

    async def set_config_property(
        self,
        name: str,
        value: Any,
        collection: str | None = None,
    ) -> None:
        """Set a common property through the Config API."""
        await self._request(
            "POST",
            f"{self._collection_path(collection)}/config",
            json_body={"set-property": {name: value}},
        )


def _error_message(body: Any) -> str | None:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("msg")
        if body.get("exception"):
            return str(body["exception"])
    return None
