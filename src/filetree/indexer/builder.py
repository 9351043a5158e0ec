"""
Index builder - populates a DirectoryIndex from a fact source.

Typical usage:
    index = build_index(EntriesFileSource(Path("entries.jsonl")))
    record = index.dir("corpus", "", "/src")
"""

import time

import structlog

from ..errors import FactSourceError, PopulateError
from .sources import FILE_KIND, NODE_KIND_FACT, Entry, FactSource, ScanRequest
from .tree import DirectoryIndex

logger = structlog.get_logger()

_FILE_KIND_VALUE = FILE_KIND.encode()


def populate(index: DirectoryIndex, source: FactSource) -> int:
    """Add every file node of ``source`` to ``index``.

    Only entries whose fact is the node kind and whose value is the file
    kind are inserted; directories and other node kinds are skipped.

    Args:
        index: Index to populate (must not be frozen)
        source: Fact source to scan

    Returns:
        Number of file entries seen (duplicates included).

    Raises:
        PopulateError: If the fact source scan fails. Files inserted before
            the failure stay in the index.
    """
    log = logger.bind(component="filetree.builder")
    log.info("filetree.populate.start", source=repr(source))
    start = time.monotonic()
    total = 0

    def _on_entry(entry: Entry) -> None:
        nonlocal total
        if entry.fact_name == NODE_KIND_FACT and entry.fact_value == _FILE_KIND_VALUE:
            index.add_file(entry.source)
            total += 1

    try:
        source.scan(ScanRequest(fact_prefix=NODE_KIND_FACT), _on_entry)
    except FactSourceError as e:
        log.error("filetree.populate.scan_failed", error=str(e), files=total)
        raise PopulateError(
            f"failed to scan fact source for directory structure: {e}"
        ) from e

    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    log.info(
        "filetree.populate.done",
        files=total,
        dirs=len(index),
        elapsed_ms=elapsed_ms,
    )
    return total


def build_index(source: FactSource) -> DirectoryIndex:
    """Create an index, populate it from ``source`` and freeze it.

    Raises:
        PopulateError: If the fact source scan fails.
    """
    index = DirectoryIndex()
    populate(index, source)
    index.freeze()
    return index
