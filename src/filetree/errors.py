"""
Exception hierarchy for filetree.

"Not found" is never an exception: lookups return None for it.
"""


class FileTreeError(Exception):
    """Base error for filetree operations."""

    pass


class IndexFrozenError(FileTreeError):
    """A file was inserted into an index that is already being served."""

    pass


class FactSourceError(FileTreeError):
    """The fact source failed while scanning."""

    pass


class PopulateError(FileTreeError):
    """Populating the index failed because the fact source scan failed."""

    pass


class FileTreeConnectionError(FileTreeError):
    """Network error talking to a remote filetree server."""

    pass


class FileTreeRemoteError(FileTreeError):
    """The remote filetree server answered with an error status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code
