"""Stateful IMAP connection handle shared by queries and idle watchers.

What:
  Wrap the third-party ``imapclient`` library with configuration defaults,
  mailbox selection, connection liveness tracking, and the narrow set of
  operations the query layer needs (UID search, overview, fetch, expunge).

Why:
  The query pipeline treats the connection as an external collaborator. A
  single wrapper keeps error translation in one place: protocol errors become
  :class:`~imapquery.errors.SearchFailed`, dropped sockets become
  :class:`~imapquery.errors.ConnectionUnavailable`, and nothing else leaks
  ``imaplib`` exception types into the core.

How:
  :class:`ImapClient` lazily connects in :meth:`connect` (or ``__enter__``),
  logs in, and selects the configured mailbox. Every network call goes through
  :attr:`connection`, which raises when the handle is closed. Socket-level
  failures mark the handle closed so loops polling :meth:`is_connected`
  terminate.

Interfaces:
  :class:`ImapConfig`, :class:`OverviewEntry`, :class:`ImapClient`.

Invariants & Safety:
  - The underlying client always runs in UID mode; identifiers returned by
    :meth:`ImapClient.search` and :meth:`ImapClient.overview` are UIDs.
  - One handle must not be used by two threads at the same time; callers
    serialise access externally.
"""
from __future__ import annotations

import contextlib
import socket
import ssl as ssl_lib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from imapclient import IMAPClient

from ..config.schema import ImapSettings
from ..errors import ConnectionUnavailable, SearchFailed
from ..utils.logging import JsonLogger, get_logger

_IMAP_ERROR = IMAPClient.Error
_SOCKET_ERRORS = (IMAPClient.AbortError, socket.error, ssl_lib.SSLError)


@dataclass
class ImapConfig:
    """Connection parameters for an IMAP server.

    Attributes:
      host: IMAP hostname.
      username: Login credential.
      password: Password or app-specific token.
      port: IMAP port (defaults to 993).
      ssl: Whether to use TLS.
      mailbox: Mailbox selected after login.
      timeout: Optional socket timeout in seconds.
    """

    host: str
    username: str
    password: str
    port: int = 993
    ssl: bool = True
    mailbox: str = "INBOX"
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: ImapSettings) -> "ImapConfig":
        """Build a config from the validated ``imap`` block of ``config.yaml``."""

        return cls(
            host=settings.host,
            username=settings.username,
            password=settings.password,
            port=settings.port,
            ssl=settings.ssl,
            mailbox=settings.mailbox,
            timeout=settings.timeout,
        )


@dataclass(frozen=True)
class OverviewEntry:
    """Lightweight description of one message in the selected mailbox."""

    uid: int
    number: int
    flags: Tuple[str, ...] = field(default_factory=tuple)
    size: Optional[int] = None
    internaldate: Optional[datetime] = None


def _decode(value: Any) -> str:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)


class ImapClient:
    """Context manager owning one ``imapclient.IMAPClient`` connection.

    What:
      Opens, tracks, and closes the connection and exposes the operations the
      query layer relies on.

    How:
      :meth:`connect` instantiates ``IMAPClient`` in UID mode, logs in, and
      selects :attr:`ImapConfig.mailbox`. :meth:`close` logs out and clears the
      handle even when logout fails.
    """

    def __init__(self, config: ImapConfig, *, logger: Optional[JsonLogger] = None):
        self._config = config
        self._client: Optional[IMAPClient] = None
        self._selected: Optional[str] = None
        self._logger = logger or get_logger("imapquery.client")

    def __enter__(self) -> "ImapClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def config(self) -> ImapConfig:
        return self._config

    @property
    def selected_mailbox(self) -> Optional[str]:
        return self._selected

    @property
    def connection(self) -> IMAPClient:
        """Return the live ``IMAPClient``.

        Raises:
          ConnectionUnavailable: If the handle is not connected.
        """

        if self._client is None:
            raise ConnectionUnavailable("IMAP client not connected")
        return self._client

    def connect(self) -> None:
        """Open the connection, authenticate, and select the configured mailbox.

        Raises:
          ConnectionUnavailable: When the server cannot be reached or login
            fails. The original error is chained.
        """

        if self._client is not None:
            return
        try:
            client = IMAPClient(
                self._config.host,
                port=self._config.port,
                ssl=self._config.ssl,
                timeout=self._config.timeout,
            )
            client.login(self._config.username, self._config.password)
        except (_IMAP_ERROR, *_SOCKET_ERRORS) as exc:
            self._logger.error("connect_failed", host=self._config.host, error=str(exc))
            raise ConnectionUnavailable(f"Unable to connect to {self._config.host}: {exc}") from exc
        self._client = client
        self._logger.info("connected", host=self._config.host, username=self._config.username)
        self.select(self._config.mailbox)

    def close(self) -> None:
        """Log out and release the connection; safe to call repeatedly."""

        if self._client is None:
            return
        client, self._client = self._client, None
        self._selected = None
        try:
            client.logout()
        except (_IMAP_ERROR, *_SOCKET_ERRORS) as exc:
            self._logger.warning("logout_failed", error=str(exc))
        else:
            self._logger.info("disconnected", host=self._config.host)

    def is_connected(self) -> bool:
        """Return ``True`` while the handle holds an open connection.

        This never touches the network, so polling loops can call it cheaply.
        """

        return self._client is not None

    def check_connection(self) -> None:
        """Reconnect a closed handle, raising if that is impossible.

        Raises:
          ConnectionUnavailable: When reconnecting fails.
        """

        if not self.is_connected():
            self.connect()

    def select(self, mailbox: str, *, readonly: bool = False) -> None:
        """Select ``mailbox`` for subsequent commands."""

        with self._guard("select"):
            self.connection.select_folder(mailbox, readonly=readonly)
        self._selected = mailbox

    @contextlib.contextmanager
    def session(self, mailbox: str, *, readonly: bool = False) -> Iterator[str]:
        """Select ``mailbox`` for the duration of the block, then restore."""

        previous = self._selected
        self.select(mailbox, readonly=readonly)
        try:
            yield mailbox
        finally:
            if previous and self.is_connected():
                self.select(previous)

    def search(self, criteria: str, charset: Optional[str] = None) -> List[int]:
        """Run ``UID SEARCH`` with a pre-rendered criteria string.

        The string is sent verbatim (no additional quoting); ``charset`` is
        only sent when it is not ``None``.

        Raises:
          SearchFailed: When the server answers ``NO``/``BAD``.
          ConnectionUnavailable: When the connection is gone.
        """

        client = self.connection
        try:
            with self._guard("search"):
                if charset is None:
                    result = client.search(criteria)
                else:
                    result = client.search(criteria, charset=charset)
        except ConnectionUnavailable:
            raise
        except _IMAP_ERROR as exc:
            raise SearchFailed(f"SEARCH failed: {exc}", response_text=str(exc)) from exc
        return [int(uid) for uid in result or []]

    def overview(self) -> List[OverviewEntry]:
        """Return every message of the selected mailbox in server-listing order."""

        client = self.connection
        with self._guard("overview"):
            uids = client.search("ALL")
            if not uids:
                return []
            response = client.fetch(uids, ["FLAGS", "RFC822.SIZE", "INTERNALDATE"])
        entries = []
        for uid, data in response.items():
            entries.append(
                OverviewEntry(
                    uid=int(uid),
                    number=int(data.get(b"SEQ", uid)),
                    flags=tuple(_decode(flag) for flag in data.get(b"FLAGS", ())),
                    size=data.get(b"RFC822.SIZE"),
                    internaldate=data.get(b"INTERNALDATE"),
                )
            )
        entries.sort(key=lambda entry: entry.number)
        return entries

    def fetch(self, uids: Iterable[int], parts: List[str]) -> Dict[int, Dict[bytes, Any]]:
        """Fetch ``parts`` for ``uids``; returns imapclient's UID-keyed mapping."""

        client = self.connection
        with self._guard("fetch"):
            return client.fetch(list(uids), parts)

    def expunge(self) -> None:
        """Permanently remove ``\\Deleted`` messages from the selected mailbox."""

        client = self.connection
        with self._guard("expunge"):
            client.expunge()

    @contextlib.contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate socket-level failures into :class:`ConnectionUnavailable`.

        The handle is dropped first so :meth:`is_connected` reports the loss.
        """

        try:
            yield
        except _SOCKET_ERRORS as exc:
            self._client = None
            self._selected = None
            self._logger.error("connection_lost", operation=operation, error=str(exc))
            raise ConnectionUnavailable(f"Connection lost during {operation}: {exc}") from exc
