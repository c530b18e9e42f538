"""
Module: imapquery.__init__

What:
  Aggregate package exports for the imapquery search-and-retrieval engine:
  the query facade, the connection handle, the event channel, and the error
  hierarchy.

How:
  Re-export the supported names and list them in ``__all__``; subpackages
  (``config``, ``imap``, ``query``, ``utils``) stay importable for callers
  that need the individual stages.

Interfaces:
  - ``Query``: criteria, search, pagination, and idle against one client.
  - ``ImapClient`` / ``ImapConfig``: connection handle and its parameters.
  - ``EventChannel`` / ``MessageNewEvent``: new-mail notifications.
  - Errors: ``ImapQueryError`` and its subclasses.
"""

from .errors import (
    ConnectionUnavailable,
    FetchFailed,
    ImapQueryError,
    SearchFailed,
    ValidationError,
    ValidationKind,
)
from .events import EventChannel, MessageNewEvent, default_channel
from .imap import ImapClient, ImapConfig, Message
from .query import Query

__all__ = [
    "Query",
    "ImapClient",
    "ImapConfig",
    "Message",
    "EventChannel",
    "MessageNewEvent",
    "default_channel",
    "ImapQueryError",
    "ValidationError",
    "ValidationKind",
    "SearchFailed",
    "FetchFailed",
    "ConnectionUnavailable",
]
