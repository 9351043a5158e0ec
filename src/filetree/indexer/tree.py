"""
In-memory directory index.

Derives a directory tree from a flat stream of file identifiers. Every file
is filed under its containing directory, and every directory is linked from
its parent, up to the root "/" of its (corpus, root) pair.

Records are keyed by the composite (corpus, root, directory path) key, so no
per-corpus or per-root containers are needed. The index is populated once,
frozen, and only read afterwards.
"""

import posixpath
from dataclasses import dataclass, field

from ..errors import IndexFrozenError
from ..tickets import FileIdentifier, to_ticket

ROOT_DIR = "/"


def normalize_path(path: str) -> str:
    """Anchor a path at "/" and clean it.

    "a/b.go" -> "/a/b.go", "" -> "/", "/a/./b/../c" -> "/a/c".
    ".." never climbs above "/".
    """
    return posixpath.normpath(ROOT_DIR + path.lstrip("/"))


def parent_dir(path: str) -> str:
    """Containing directory of a normalized path. The parent of "/" is "/"."""
    return posixpath.dirname(path)


# --- Data structures ---

@dataclass
class DirectoryRecord:
    """Immediate children of one directory."""

    files: set[str] = field(default_factory=set)            # file tickets
    subdirectories: set[str] = field(default_factory=set)   # directory tickets

    def to_dict(self) -> dict[str, list[str]]:
        """Wire form. Lists are sorted so encodings are deterministic."""
        return {
            "subdirectory": sorted(self.subdirectories),
            "file_ticket": sorted(self.files),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DirectoryRecord":
        return cls(
            files=set(data.get("file_ticket") or []),
            subdirectories=set(data.get("subdirectory") or []),
        )


# --- Index ---

class DirectoryIndex:
    """Directory tree of every (corpus, root) pair seen during population.

    Lifecycle:
    1. ``add_file`` for each file of the corpus (single-threaded)
    2. ``freeze`` once population is complete
    3. ``dir`` / ``corpus_roots`` from any number of readers

    Reads take no locks; they are safe only because nothing writes after
    ``freeze``.
    """

    def __init__(self) -> None:
        self._dirs: dict[tuple[str, str, str], DirectoryRecord] = {}
        self._file_count = 0
        self._frozen = False

    # -- population --

    def add_file(self, file: FileIdentifier) -> bool:
        """Insert a file, creating its directory and any missing ancestors.

        Args:
            file: Identifier of the file to insert

        Returns:
            True if the file was not already recorded in its directory.

        Raises:
            IndexFrozenError: If the index has already been frozen.
        """
        if self._frozen:
            raise IndexFrozenError(
                f"cannot add {file.ticket}: index is frozen"
            )

        path = normalize_path(file.path)
        record = self._ensure_dir(file.corpus, file.root, parent_dir(path))

        ticket = file.ticket
        if ticket in record.files:
            return False
        record.files.add(ticket)
        self._file_count += 1
        return True

    def _ensure_dir(self, corpus: str, root: str, path: str) -> DirectoryRecord:
        """Return the record for a directory, creating it and its ancestors."""
        key = (corpus, root, path)
        record = self._dirs.get(key)
        if record is not None:
            return record

        record = DirectoryRecord()
        self._dirs[key] = record

        if path != ROOT_DIR:
            parent = self._ensure_dir(corpus, root, parent_dir(path))
            parent.subdirectories.add(to_ticket(corpus, root, path))
        return record

    def freeze(self) -> None:
        """Mark population as complete. Further ``add_file`` calls fail."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- queries --

    def dir(self, corpus: str, root: str, path: str) -> DirectoryRecord | None:
        """Return the record for a directory, or None if it is not known."""
        return self._dirs.get((corpus, root, normalize_path(path)))

    def corpus_roots(self) -> dict[str, set[str]]:
        """Map each known corpus to the roots seen under it.

        Derived from the directory keys on each call; every (corpus, root)
        pair with a file has at least its "/" record.
        """
        result: dict[str, set[str]] = {}
        for corpus, root, _ in self._dirs:
            result.setdefault(corpus, set()).add(root)
        return result

    @property
    def file_count(self) -> int:
        """Number of distinct files inserted."""
        return self._file_count

    def __len__(self) -> int:
        return len(self._dirs)

    def __repr__(self) -> str:
        return (
            f"<DirectoryIndex(dirs={len(self._dirs)}, files={self._file_count}, "
            f"frozen={self._frozen})>"
        )
