"""
Indexer module - in-memory directory tree of a file corpus.

Builds the tree from a fact source once, then serves directory and
corpus/root lookups read-only.
"""

from .builder import build_index, populate
from .sources import (
    FILE_KIND,
    NODE_KIND_FACT,
    EntriesFileSource,
    Entry,
    FactSource,
    MemoryFactSource,
    ScanRequest,
    file_entry,
)
from .tree import DirectoryIndex, DirectoryRecord, normalize_path, parent_dir

__all__ = [
    # Tree
    "DirectoryIndex",
    "DirectoryRecord",
    "normalize_path",
    "parent_dir",
    # Builder
    "build_index",
    "populate",
    # Sources
    "Entry",
    "EntriesFileSource",
    "FactSource",
    "MemoryFactSource",
    "ScanRequest",
    "file_entry",
    "NODE_KIND_FACT",
    "FILE_KIND",
]
