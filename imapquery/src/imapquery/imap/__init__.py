"""Facade for the IMAP integration layer.

What:
  Surface the connection handle, its configuration dataclass, the message
  handle, and the response-code helpers used by the query layer.

Interfaces:
  ``ImapConfig``, ``ImapClient``, ``OverviewEntry``, ``Message``,
  ``ResponseCode``, ``badcharset_suggestions``.

Invariants & Safety:
  - All identifiers flowing through this package are UIDs.
"""

from .client import ImapClient, ImapConfig, OverviewEntry
from .message import Message
from .response import ResponseCode, badcharset_suggestions, parse_response_codes

__all__ = [
    "ImapClient",
    "ImapConfig",
    "OverviewEntry",
    "Message",
    "ResponseCode",
    "badcharset_suggestions",
    "parse_response_codes",
]
