"""
Logging module - Structured logging system.
"""

from .setup import configure_logging, console_level

__all__ = [
    "configure_logging",
    "console_level",
]
