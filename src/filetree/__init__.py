"""
filetree - directory index over a corpus of file names.

Derives a directory tree from a stream of (corpus, root, path) file
identifiers and answers "what is under this directory?" and "which corpora
and roots exist?", locally or through a remote server.
"""

from .errors import FileTreeError
from .indexer import DirectoryIndex, DirectoryRecord, build_index
from .service import FileTreeService
from .tickets import FileIdentifier, to_ticket

__version__ = "0.1.0"

__all__ = [
    "DirectoryIndex",
    "DirectoryRecord",
    "FileIdentifier",
    "FileTreeError",
    "FileTreeService",
    "build_index",
    "to_ticket",
]
