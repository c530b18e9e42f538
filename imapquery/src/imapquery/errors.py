"""Error hierarchy shared by the query, search, and fetch layers.

What:
  Define the exceptions callers of :mod:`imapquery` are expected to handle:
  malformed criteria input, protocol-level search errors, failures while
  materialising messages, and a missing IMAP connection.

Why:
  Callers distinguish "your input is wrong" from "the server could not give
  us the data" from "there is no connection at all". One module keeps the
  vocabulary in a single place so every layer raises the same types.

How:
  All errors derive from :class:`ImapQueryError`. :class:`ValidationError`
  additionally derives from :class:`ValueError` and carries a
  :class:`ValidationKind` so handlers can branch without parsing messages.

Interfaces:
  :class:`ImapQueryError`, :class:`ValidationKind`, :class:`ValidationError`,
  :class:`SearchFailed`, :class:`FetchFailed`, :class:`ConnectionUnavailable`.

Invariants & Safety:
  - Wrapping errors always chain the original exception via ``raise ... from``.
  - :class:`SearchFailed` never escapes :func:`imapquery.query.search.search`;
    it is converted into an empty match set at the search boundary.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ImapQueryError(Exception):
    """Base class for every error raised by :mod:`imapquery`."""


class ValidationKind(str, Enum):
    """Category of a :class:`ValidationError`."""

    INVALID_DATE = "invalid_date"


class ValidationError(ImapQueryError, ValueError):
    """Raised when criteria input is malformed, before any network call.

    Attributes:
      kind: Machine-readable category of the failure.
    """

    def __init__(self, message: str, *, kind: ValidationKind = ValidationKind.INVALID_DATE) -> None:
        super().__init__(message)
        self.kind = kind


class SearchFailed(ImapQueryError):
    """Raised by the client when the server rejects a SEARCH command.

    Attributes:
      response_text: Raw text of the server response, used to extract
        response codes such as ``BADCHARSET``.
    """

    def __init__(self, message: str, *, response_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.response_text = response_text if response_text is not None else message


class FetchFailed(ImapQueryError):
    """Raised when matched identifiers cannot be turned into message handles."""


class ConnectionUnavailable(ImapQueryError):
    """Raised when an operation needs an open IMAP connection and none exists."""
