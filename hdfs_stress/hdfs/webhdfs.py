"""
Minimal WebHDFS file status client.

Each WebHdfsFileSystem owns its own HTTP connection pool with keep-alive
disabled, so a handle never serves a status answer from an earlier
connection. Open one per check and close it afterwards.
"""

from logging import Logger
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from hdfs_stress.errors import TransportError
from hdfs_stress.redaction import safe_log_request

WEBHDFS_PREFIX = "/webhdfs/v1"


def to_hdfs_path(path_or_uri: str) -> str:
    """
    Strip scheme and authority from an HDFS location.

    ``hdfs://nn:8020/solr/c1/core_node1/data`` -> ``/solr/c1/core_node1/data``
    """
    parsed = urlparse(path_or_uri)
    path = parsed.path if parsed.scheme else path_or_uri
    if not path.startswith("/"):
        raise ValueError(f"HDFS path must be absolute: {path_or_uri}")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


class WebHdfsFileSystem:
    """Uncached handle on the NameNode's WebHDFS endpoint."""

    def __init__(self, base_url: str, user: str, logger: Logger, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._user = user
        self._logger = logger
        self._client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=0),
            headers={"Cache-Control": "no-cache"},
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "WebHdfsFileSystem":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_file_status(self, path: str) -> dict[str, Any] | None:
        """
        GETFILESTATUS for ``path``.

        Returns:
            The FileStatus object, or None when the path does not exist

        Raises:
            TransportError: NameNode unreachable or answered with an error
        """
        hdfs_path = to_hdfs_path(path)
        url = f"{self._base_url}{WEBHDFS_PREFIX}{quote(hdfs_path)}"
        params = {"op": "GETFILESTATUS", "user.name": self._user}

        self._logger.debug("WebHDFS request: %s", safe_log_request("GET", url, params))
        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise TransportError(f"WebHDFS request failed for {hdfs_path}: {e}", url=url) from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise TransportError(
                f"WebHDFS returned {response.status_code} for {hdfs_path}: {response.text[:200]}",
                status_code=response.status_code,
                url=url,
            )
        return response.json().get("FileStatus") or {}

    async def exists(self, path: str) -> bool:
        return await self.get_file_status(path) is not None
