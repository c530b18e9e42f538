"""Pytest fixtures for unit tests requiring IMAP fakes.

What:
  Make ``tests/unit`` importable and expose an ``imap_client`` fixture backed
  by :class:`FakeImapBackend`.

How:
  Monkeypatch ``imapquery.imap.client.IMAPClient`` so that
  :meth:`ImapClient.connect` receives the fake, then yield the connected
  wrapper together with the backend for assertions.

Interfaces:
  :func:`imap_client`, :func:`backend`, :func:`options`.
"""

import sys
from pathlib import Path

import pytest

from imapquery.config import QueryOptions
from imapquery.imap.client import ImapClient, ImapConfig
from imapquery.utils.logging import JsonLogger

UNIT_DIR = Path(__file__).resolve().parent
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

from fakes import FakeImapBackend


@pytest.fixture
def backend() -> FakeImapBackend:
    return FakeImapBackend()


@pytest.fixture
def imap_client(monkeypatch: pytest.MonkeyPatch, backend: FakeImapBackend):
    """Yield ``(ImapClient, FakeImapBackend)`` with the client connected."""

    monkeypatch.setattr("imapquery.imap.client.IMAPClient", lambda *args, **kwargs: backend)
    config = ImapConfig(host="localhost", username="user", password="pass")
    with ImapClient(config, logger=JsonLogger(stream=_NullStream())) as client:
        yield client, backend


@pytest.fixture
def options() -> QueryOptions:
    return QueryOptions()


class _NullStream:
    """Swallow log output so test reports stay readable."""

    def write(self, _text: str) -> int:
        return 0

    def flush(self) -> None:
        return None
