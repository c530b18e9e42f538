"""Shared helpers for imapquery.

Interfaces:
  ``JsonLogger`` and ``get_logger`` for structured logging.
"""

from .logging import JsonLogger, get_logger

__all__ = ["JsonLogger", "get_logger"]
