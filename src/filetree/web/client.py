"""
HTTP client for a remote filetree server.

Implements the same query contract as the local DirectoryIndex by forwarding
every call to a server built with ``create_app``:
- POST {base_url}/dir with a JSON body
- GET  {base_url}/corpusRoots

No caching and no retries: transport failures surface as
FileTreeConnectionError, error statuses as FileTreeRemoteError.
"""

from typing import Any

import httpx
import structlog

from ..errors import FileTreeConnectionError, FileTreeRemoteError
from ..indexer.tree import DirectoryRecord
from .codec import (
    BINARY_PARAM,
    JSON_MEDIA_TYPE,
    MSGPACK_MEDIA_TYPE,
    corpus_roots_from_wire,
    decode,
    dir_from_wire,
)

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0


class WebClient:
    """FileTreeService backed by a remote filetree server."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        binary: bool = False,
        http: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server address, e.g. http://localhost:8080
            timeout: Per-request timeout in seconds
            binary: If True, ask the server for msgpack responses
            http: Pre-built httpx client (e.g. a TestClient); the caller
                keeps ownership of it
        """
        self.base_url = base_url.rstrip("/")
        self.binary = binary
        self.log = logger.bind(component="filetree.client", url=self.base_url)
        self._owns_http = http is None
        accept = MSGPACK_MEDIA_TYPE if binary else JSON_MEDIA_TYPE
        self.http = http or httpx.Client(
            headers={"Accept": accept},
            timeout=timeout,
            follow_redirects=True,
        )

    def dir(self, corpus: str, root: str, path: str) -> DirectoryRecord | None:
        """Forward a directory lookup. None means not found."""
        data = self._call("POST", "dir", {"corpus": corpus, "root": root, "path": path})
        return dir_from_wire(data)

    def corpus_roots(self) -> dict[str, set[str]]:
        """Forward a corpus/roots listing."""
        return corpus_roots_from_wire(self._call("GET", "corpusRoots"))

    def _call(self, method: str, endpoint: str, body: dict[str, Any] | None = None) -> Any:
        """Send one request and decode the reply.

        Raises:
            FileTreeConnectionError: If the request cannot be completed
            FileTreeRemoteError: If the server answers with an error status
            FileTreeError: If the reply cannot be decoded
        """
        url = f"{self.base_url}/{endpoint}"
        params = {BINARY_PARAM: "1"} if self.binary else None

        self.log.debug("filetree.client.call", method=method, endpoint=endpoint)
        try:
            response = self.http.request(method, url, json=body, params=params)
        except httpx.HTTPError as e:
            self.log.error("filetree.client.connection_error", endpoint=endpoint, error=str(e))
            raise FileTreeConnectionError(
                f"error calling {endpoint} on filetree server {self.base_url}: {e}"
            ) from e

        if response.is_error:
            raise FileTreeRemoteError(
                f"filetree server {self.base_url} returned {response.status_code} "
                f"for {endpoint}: {response.text[:200]}",
                status_code=response.status_code,
            )

        return decode(response.content, response.headers.get("content-type", ""))

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self) -> str:
        return f"<WebClient(url='{self.base_url}', binary={self.binary})>"
