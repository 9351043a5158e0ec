"""
Web module - HTTP server and forwarding client for the filetree service.
"""

from .client import WebClient
from .server import CorpusPath, create_app

__all__ = [
    "WebClient",
    "CorpusPath",
    "create_app",
]
