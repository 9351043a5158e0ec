"""
Tests for the HTTP server, the wire codec and the forwarding client.

The client is pointed at the FastAPI app through a TestClient, which is an
httpx.Client, so the full request/response path is exercised in-process.
"""

import json

import httpx
import msgpack
import pytest
from fastapi.testclient import TestClient

from filetree.errors import (
    FileTreeConnectionError,
    FileTreeError,
    FileTreeRemoteError,
)
from filetree.indexer import DirectoryIndex, DirectoryRecord, MemoryFactSource, build_index, file_entry
from filetree.tickets import FileIdentifier, to_ticket
from filetree.web import WebClient, create_app
from filetree.web.codec import (
    MSGPACK_MEDIA_TYPE,
    corpus_roots_from_wire,
    corpus_roots_to_wire,
    decode,
)

BASE_URL = "http://testserver"


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def index() -> DirectoryIndex:
    return build_index(MemoryFactSource([
        file_entry("k", "", "/docs/readme.md"),
        file_entry("k", "", "/docs/api/index.md"),
        file_entry("c1", "", "main.go"),
        file_entry("c2", "r1", "pkg/lib.go"),
        file_entry("c2", "r2", "pkg/lib.go"),
    ]))


@pytest.fixture
def http(index: DirectoryIndex) -> TestClient:
    return TestClient(create_app(index))


@pytest.fixture(params=[False, True], ids=["json", "msgpack"])
def client(request, http: TestClient) -> WebClient:
    return WebClient(BASE_URL, binary=request.param, http=http)


class BrokenService:
    """Service whose every call fails."""

    def dir(self, corpus, root, path):
        raise FileTreeError("index exploded")

    def corpus_roots(self):
        raise FileTreeError("index exploded")


# ── Tests: server ────────────────────────────────────────────────────────


class TestServer:
    def test_corpus_roots_json(self, http: TestClient) -> None:
        response = http.get("/corpusRoots")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {
            "corpus": [
                {"corpus": "c1", "root": [""]},
                {"corpus": "c2", "root": ["r1", "r2"]},
                {"corpus": "k", "root": [""]},
            ]
        }

    def test_dir_json(self, http: TestClient) -> None:
        response = http.post("/dir", json={"corpus": "k", "root": "", "path": "/docs"})
        assert response.status_code == 200
        assert response.json() == {
            "subdirectory": [to_ticket("k", "", "/docs/api")],
            "file_ticket": [FileIdentifier("k", "", "/docs/readme.md").ticket],
        }

    def test_dir_accepts_get_with_body(self, http: TestClient) -> None:
        response = http.request(
            "GET", "/dir", content=json.dumps({"corpus": "k", "path": "/docs/api"})
        )
        assert response.status_code == 200
        assert response.json()["file_ticket"] == [
            FileIdentifier("k", "", "/docs/api/index.md").ticket
        ]

    def test_dir_not_found_is_null(self, http: TestClient) -> None:
        response = http.post("/dir", json={"corpus": "unknown-corpus", "root": "", "path": "/"})
        assert response.status_code == 200
        assert response.json() is None

    def test_dir_msgpack(self, http: TestClient) -> None:
        response = http.post("/dir?msgpack", json={"corpus": "c1", "path": "/"})
        assert response.status_code == 200
        assert response.headers["content-type"] == MSGPACK_MEDIA_TYPE
        data = msgpack.unpackb(response.content, raw=False)
        assert data["file_ticket"] == [FileIdentifier("c1", "", "main.go").ticket]

    def test_corpus_roots_msgpack(self, http: TestClient) -> None:
        response = http.get("/corpusRoots", params={"msgpack": "1"})
        assert response.headers["content-type"] == MSGPACK_MEDIA_TYPE
        data = msgpack.unpackb(response.content, raw=False)
        assert corpus_roots_from_wire(data)["c2"] == {"r1", "r2"}

    @pytest.mark.parametrize(
        "body",
        [
            b"{not json",
            b'{"corpus": 5}',
            b"[]",
            b"null",
        ],
    )
    def test_dir_malformed_request(self, http: TestClient, body: bytes) -> None:
        response = http.post("/dir", content=body)
        assert response.status_code == 400

    def test_dir_empty_body_means_defaults(self, http: TestClient) -> None:
        response = http.post("/dir")
        assert response.status_code == 200
        assert response.json() is None

    def test_service_failure_is_server_error(self) -> None:
        http = TestClient(create_app(BrokenService()))
        response = http.get("/corpusRoots")
        assert response.status_code == 500
        assert "index exploded" in response.text

        response = http.post("/dir", json={"corpus": "k"})
        assert response.status_code == 500
        assert "index exploded" in response.text


# ── Tests: client ────────────────────────────────────────────────────────


class TestWebClient:
    @pytest.mark.parametrize(
        "corpus, root, path",
        [
            ("k", "", "/"),
            ("k", "", "/docs"),
            ("k", "", "docs/api"),
            ("c2", "r1", "/pkg"),
            ("c2", "r3", "/pkg"),
            ("unknown-corpus", "", "/"),
            ("k", "", "/missing"),
        ],
    )
    def test_dir_matches_local_index(
        self, client: WebClient, index: DirectoryIndex, corpus: str, root: str, path: str
    ) -> None:
        assert client.dir(corpus, root, path) == index.dir(corpus, root, path)

    def test_corpus_roots_matches_local_index(
        self, client: WebClient, index: DirectoryIndex
    ) -> None:
        assert client.corpus_roots() == index.corpus_roots()

    def test_not_found_is_none(self, client: WebClient) -> None:
        assert client.dir("unknown-corpus", "", "/") is None

    def test_returns_directory_record(self, client: WebClient) -> None:
        record = client.dir("k", "", "/docs/api")
        assert isinstance(record, DirectoryRecord)
        assert record.subdirectories == set()

    def test_server_error_is_remote_error(self) -> None:
        http = TestClient(create_app(BrokenService()))
        client = WebClient(BASE_URL, http=http)
        with pytest.raises(FileTreeRemoteError) as exc_info:
            client.corpus_roots()
        assert exc_info.value.status_code == 500
        assert "index exploded" in str(exc_info.value)

    def test_transport_failure_is_connection_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.Client(transport=httpx.MockTransport(refuse))
        client = WebClient("http://remote:9999", http=http)
        with pytest.raises(FileTreeConnectionError, match="connection refused"):
            client.dir("k", "", "/")

    def test_connection_error_is_not_not_found(self) -> None:
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = WebClient(
            "http://remote:9999", http=httpx.Client(transport=httpx.MockTransport(timeout))
        )
        with pytest.raises(FileTreeConnectionError):
            client.corpus_roots()

    def test_undecodable_reply(self) -> None:
        def garbage(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})

        client = WebClient("http://remote", http=httpx.Client(transport=httpx.MockTransport(garbage)))
        with pytest.raises(FileTreeError, match="undecodable"):
            client.dir("k", "", "/")

    def test_forwards_every_call(self) -> None:
        calls: list[str] = []

        def record(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})

        client = WebClient("http://remote/", http=httpx.Client(transport=httpx.MockTransport(record)))
        client.dir("k", "", "/")
        client.dir("k", "", "/")
        client.corpus_roots()
        assert calls == ["/dir", "/dir", "/corpusRoots"]

    def test_server_backed_by_forwarding_client(
        self, http: TestClient, index: DirectoryIndex
    ) -> None:
        upstream = WebClient(BASE_URL, http=http)
        proxy = TestClient(create_app(upstream))

        response = proxy.post("/dir", json={"corpus": "k", "path": "/docs"})
        assert response.status_code == 200
        assert DirectoryRecord.from_dict(response.json()) == index.dir("k", "", "/docs")
        assert proxy.post("/dir", json={"corpus": "unknown-corpus"}).json() is None
        assert proxy.get("/corpusRoots").json() == http.get("/corpusRoots").json()

    def test_close_keeps_injected_client_open(self, http: TestClient) -> None:
        with WebClient(BASE_URL, http=http) as client:
            client.corpus_roots()
        assert not http.is_closed


# ── Tests: codec ─────────────────────────────────────────────────────────


class TestCodec:
    def test_corpus_roots_from_wire_merges_duplicates(self) -> None:
        data = {"corpus": [{"corpus": "c", "root": ["a"]}, {"corpus": "c", "root": ["b"]}]}
        assert corpus_roots_from_wire(data) == {"c": {"a", "b"}}

    def test_corpus_roots_from_wire_empty(self) -> None:
        assert corpus_roots_from_wire(None) == {}
        assert corpus_roots_from_wire({}) == {}
        assert corpus_roots_to_wire({}) == {"corpus": []}

    def test_decode_invalid_msgpack(self) -> None:
        with pytest.raises(FileTreeError):
            decode(b"\xc1", MSGPACK_MEDIA_TYPE)
