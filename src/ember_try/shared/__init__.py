"""Shared modules for ember-try.

This module provides functionality used across the CLI and the task layer:
- Logging configuration (structlog on top of standard logging)
"""

from .logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
