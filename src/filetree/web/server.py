"""
HTTP surface of a filetree service.

Exposes the query contract as two endpoints:

    GET /corpusRoots
        Response: corpus -> roots
    GET|POST /dir
        Request: JSON body {"corpus": <str>, "root": <str>, "path": <str>}
        Response: the directory, or null if it is not known

Responses are JSON unless the ``msgpack`` query parameter is present.
Malformed /dir input -> 400. Service failures -> 500 with the message.

Service calls run in the threadpool, so a forwarding WebClient can back the
app without blocking the event loop.

The app only reads from the service it is given: build and freeze the
index before calling ``create_app``.
"""

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from ..errors import FileTreeError
from ..service import FileTreeService
from .codec import BINARY_PARAM, corpus_roots_to_wire, dir_to_wire, encode

logger = structlog.get_logger()


class CorpusPath(BaseModel):
    """Body of a /dir request."""

    corpus: str = ""
    root: str = ""
    path: str = ""


def _respond(request: Request, payload) -> Response:
    body, media_type = encode(payload, binary=BINARY_PARAM in request.query_params)
    return Response(content=body, media_type=media_type)


def create_app(service: FileTreeService) -> FastAPI:
    """Build the FastAPI app serving ``service``.

    Args:
        service: Populated (frozen) index, or any other FileTreeService

    Returns:
        ASGI app ready for uvicorn or a TestClient.
    """
    app = FastAPI(title="filetree", docs_url=None, redoc_url=None)
    log = logger.bind(component="filetree.server")

    @app.get("/corpusRoots")
    def corpus_roots(request: Request) -> Response:
        start = time.monotonic()
        try:
            result = service.corpus_roots()
        except FileTreeError as e:
            log.error("filetree.corpus_roots.error", error=str(e))
            return PlainTextResponse(str(e), status_code=500)
        finally:
            log.info(
                "filetree.corpus_roots",
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )
        return _respond(request, corpus_roots_to_wire(result))

    @app.api_route("/dir", methods=["GET", "POST"])
    async def directory(request: Request) -> Response:
        start = time.monotonic()
        try:
            body = await request.body()
            try:
                req = CorpusPath.model_validate_json(body or b"{}")
            except ValidationError as e:
                log.warning("filetree.dir.bad_request", error=str(e))
                return PlainTextResponse(str(e), status_code=400)

            try:
                record = await run_in_threadpool(service.dir, req.corpus, req.root, req.path)
            except FileTreeError as e:
                log.error("filetree.dir.error", error=str(e), corpus=req.corpus, path=req.path)
                return PlainTextResponse(str(e), status_code=500)

            return _respond(request, dir_to_wire(record))
        finally:
            log.info(
                "filetree.dir",
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

    return app
