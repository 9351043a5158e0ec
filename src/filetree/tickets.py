"""
File identifiers and their canonical ticket strings.

A ticket is the display/reference form of a (corpus, root, path) name:

    kythe://corpus?path=some/file.go?root=bazel-out

Empty components are omitted. Values are percent-escaped, keeping "/".
"""

from dataclasses import dataclass
from urllib.parse import quote

SCHEME = "kythe:"


def _escape(value: str) -> str:
    return quote(value, safe="/")


def to_ticket(corpus: str, root: str = "", path: str = "") -> str:
    """Build the canonical ticket for a (corpus, root, path) name."""
    parts = [SCHEME]
    if corpus:
        parts.append("//" + _escape(corpus))
    if path:
        parts.append("?path=" + _escape(path))
    if root:
        parts.append("?root=" + _escape(root))
    return "".join(parts)


@dataclass(frozen=True)
class FileIdentifier:
    """Structured name of a single file."""

    corpus: str
    root: str
    path: str

    @property
    def ticket(self) -> str:
        return to_ticket(self.corpus, self.root, self.path)

    def to_dict(self) -> dict[str, str]:
        return {"corpus": self.corpus, "root": self.root, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict) -> "FileIdentifier":
        return cls(
            corpus=data.get("corpus", ""),
            root=data.get("root", ""),
            path=data.get("path", ""),
        )
