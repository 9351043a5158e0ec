"""
Fact sources that feed the index builder.

A fact source stores (subject, fact name, fact value) entries and exposes a
single ``scan`` operation: call back once per entry whose fact name starts
with the requested prefix. Two sources are provided:

- MemoryFactSource: a list of entries held in memory (tests, embedding)
- EntriesFileSource: a JSON-lines dump, one entry per line:

    {"source": {"corpus": "c", "root": "", "path": "a/b.go"},
     "fact_name": "/kythe/node/kind", "fact_value": "ZmlsZQ=="}

  ``fact_value`` is base64, as in the JSON form of a graph entry stream.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Protocol

from ..errors import FactSourceError
from ..tickets import FileIdentifier

# Fact naming the kind of a node, and the kind value marking files
NODE_KIND_FACT = "/kythe/node/kind"
FILE_KIND = "file"


@dataclass(frozen=True)
class Entry:
    """A single fact about a subject."""

    source: FileIdentifier
    fact_name: str
    fact_value: bytes = b""


@dataclass(frozen=True)
class ScanRequest:
    """Filter for ``FactSource.scan``. An empty prefix matches everything."""

    fact_prefix: str = ""

    def matches(self, entry: Entry) -> bool:
        return entry.fact_name.startswith(self.fact_prefix)


class FactSource(Protocol):
    """Scan contract consumed by the index builder."""

    def scan(self, request: ScanRequest, callback: Callable[[Entry], None]) -> None:
        """Call ``callback`` for every matching entry.

        Raises:
            FactSourceError: If the underlying storage cannot be read.
        """
        ...


class MemoryFactSource:
    """Fact source over entries held in memory."""

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self.entries: list[Entry] = list(entries)

    def add(self, entry: Entry) -> None:
        self.entries.append(entry)

    def scan(self, request: ScanRequest, callback: Callable[[Entry], None]) -> None:
        for entry in self.entries:
            if request.matches(entry):
                callback(entry)


class EntriesFileSource:
    """Fact source reading a JSON-lines entry dump from disk.

    The file is streamed on each scan; nothing is cached.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def scan(self, request: ScanRequest, callback: Callable[[Entry], None]) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    entry = self._parse_line(line, lineno)
                    if request.matches(entry):
                        callback(entry)
        except (OSError, UnicodeDecodeError) as e:
            raise FactSourceError(f"cannot read entries from {self.path}: {e}") from e

    def _parse_line(self, line: str, lineno: int) -> Entry:
        """Decode one JSON line into an Entry."""
        try:
            data = json.loads(line)
            source = FileIdentifier.from_dict(data.get("source") or {})
            fact_name = data["fact_name"]
            fact_value = base64.b64decode(data.get("fact_value") or "")
        except (json.JSONDecodeError, binascii.Error, KeyError, TypeError, AttributeError) as e:
            raise FactSourceError(
                f"malformed entry at {self.path}:{lineno}: {e}"
            ) from e

        fields = {
            "fact_name": fact_name,
            "corpus": source.corpus,
            "root": source.root,
            "path": source.path,
        }
        for name, value in fields.items():
            if not isinstance(value, str):
                raise FactSourceError(
                    f"malformed entry at {self.path}:{lineno}: "
                    f"{name} must be a string, got {type(value).__name__}"
                )

        return Entry(source=source, fact_name=fact_name, fact_value=fact_value)

    def __repr__(self) -> str:
        return f"<EntriesFileSource(path='{self.path}')>"


def file_entry(corpus: str, root: str, path: str) -> Entry:
    """Build the node-kind entry that marks (corpus, root, path) as a file."""
    return Entry(
        source=FileIdentifier(corpus=corpus, root=root, path=path),
        fact_name=NODE_KIND_FACT,
        fact_value=FILE_KIND.encode(),
    )
