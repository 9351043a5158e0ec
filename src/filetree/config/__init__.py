"""
Configuration module for filetree.
"""

from .loader import load_config
from .schema import (
    AppConfig,
    LoggingConfig,
    RemoteConfig,
    ServerConfig,
    SourceConfig,
)

__all__ = [
    "load_config",
    "AppConfig",
    "LoggingConfig",
    "RemoteConfig",
    "ServerConfig",
    "SourceConfig",
]
