"""
Query contract shared by the local index and the remote client.
"""

from typing import Protocol

from .indexer.tree import DirectoryRecord


class FileTreeService(Protocol):
    """Read surface of a file tree, local or remote."""

    def dir(self, corpus: str, root: str, path: str) -> DirectoryRecord | None:
        """Return the directory at corpus/root/path, or None if not found."""
        ...

    def corpus_roots(self) -> dict[str, set[str]]:
        """Return a map from corpus to its known roots."""
        ...
