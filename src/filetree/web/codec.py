"""
Wire encoding of filetree responses.

Two encodings carry the same payloads:
- JSON (default), ``application/json``
- msgpack, ``application/x-msgpack``, selected per request with the
  ``msgpack`` query parameter

Payloads:
    dir          {"subdirectory": [...], "file_ticket": [...]} or null
    corpusRoots  {"corpus": [{"corpus": "c", "root": ["", "r"]}, ...]}
"""

import json
from typing import Any

import msgpack

from ..errors import FileTreeError
from ..indexer.tree import DirectoryRecord

JSON_MEDIA_TYPE = "application/json"
MSGPACK_MEDIA_TYPE = "application/x-msgpack"

# Query parameter selecting the binary encoding
BINARY_PARAM = "msgpack"


def corpus_roots_to_wire(corpus_roots: dict[str, set[str]]) -> dict[str, Any]:
    return {
        "corpus": [
            {"corpus": corpus, "root": sorted(roots)}
            for corpus, roots in sorted(corpus_roots.items())
        ]
    }


def corpus_roots_from_wire(data: dict | None) -> dict[str, set[str]]:
    result: dict[str, set[str]] = {}
    for item in (data or {}).get("corpus") or []:
        result.setdefault(item.get("corpus", ""), set()).update(item.get("root") or [])
    return result


def dir_to_wire(record: DirectoryRecord | None) -> dict[str, list[str]] | None:
    return record.to_dict() if record is not None else None


def dir_from_wire(data: dict | None) -> DirectoryRecord | None:
    if data is None:
        return None
    return DirectoryRecord.from_dict(data)


def encode(payload: Any, binary: bool) -> tuple[bytes, str]:
    """Encode a payload. Returns (body, media type)."""
    if binary:
        return msgpack.packb(payload, use_bin_type=True), MSGPACK_MEDIA_TYPE
    return json.dumps(payload).encode("utf-8"), JSON_MEDIA_TYPE


def decode(body: bytes, content_type: str) -> Any:
    """Decode a response body according to its content type.

    Raises:
        FileTreeError: If the body cannot be decoded.
    """
    try:
        if MSGPACK_MEDIA_TYPE in content_type:
            return msgpack.unpackb(body, raw=False)
        return json.loads(body)
    except (ValueError, msgpack.UnpackException) as e:
        raise FileTreeError(
            f"undecodable response ({content_type or 'no content type'}): {e}"
        ) from e
