"""
Module: tests/unit/test_imap_client.py

What:
    Cover the connection wrapper: login/select on connect, liveness tracking,
    overview ordering, error translation, and mailbox sessions.

Why:
    The query and idle layers rely on :meth:`ImapClient.is_connected` going
    false after a socket failure; otherwise polling loops never terminate.
"""

import pytest
from imapclient import IMAPClient

from imapquery.config import ImapSettings
from imapquery.errors import ConnectionUnavailable, SearchFailed
from imapquery.imap.client import ImapClient, ImapConfig


def test_connect_logs_in_and_selects_mailbox(imap_client):
    client, backend = imap_client
    assert client.is_connected()
    assert backend.logged_in
    assert backend.selected == "INBOX"
    assert client.selected_mailbox == "INBOX"


def test_close_is_idempotent(imap_client):
    client, backend = imap_client
    client.close()
    client.close()
    assert not client.is_connected()
    assert not backend.logged_in
    with pytest.raises(ConnectionUnavailable):
        client.connection


def test_overview_lists_uids_with_sequence_numbers(imap_client):
    client, backend = imap_client
    backend.add_message("a", flags=[b"\\Seen"])
    backend.add_message("b")
    backend.add_message("c")
    del backend.messages[2]

    entries = client.overview()
    assert [(entry.uid, entry.number) for entry in entries] == [(1, 1), (3, 2)]
    assert entries[0].flags == ("\\Seen",)
    assert entries[0].size > 0


def test_overview_of_empty_mailbox(imap_client):
    client, _ = imap_client
    assert client.overview() == []


def test_search_translates_protocol_errors(imap_client):
    client, backend = imap_client
    backend.rejected_charsets = {"UTF-8": ["US-ASCII"]}
    with pytest.raises(SearchFailed) as info:
        client.search("ALL", charset="UTF-8")
    assert "BADCHARSET (US-ASCII)" in info.value.response_text
    assert client.is_connected()


def test_socket_failure_drops_handle(imap_client):
    client, backend = imap_client
    backend.drop_on = "fetch"
    with pytest.raises(ConnectionUnavailable):
        client.fetch([1], ["FLAGS"])
    assert not client.is_connected()
    assert client.selected_mailbox is None


def test_expunge_removes_deleted(imap_client):
    client, backend = imap_client
    backend.add_message(flags=[b"\\Deleted"])
    backend.add_message()
    client.expunge()
    assert list(backend.messages) == [2]


def test_session_restores_previous_mailbox(imap_client):
    client, backend = imap_client
    with client.session("Archive", readonly=True) as mailbox:
        assert mailbox == "Archive"
        assert backend.selected == "Archive"
    assert backend.selected == "INBOX"


def test_login_failure_raises_connection_unavailable(monkeypatch, backend):
    def _login(username, password):
        raise IMAPClient.Error("LOGIN failed")

    backend.login = _login
    monkeypatch.setattr("imapquery.imap.client.IMAPClient", lambda *args, **kwargs: backend)
    client = ImapClient(ImapConfig(host="localhost", username="u", password="p"))
    with pytest.raises(ConnectionUnavailable):
        client.connect()
    assert not client.is_connected()


def test_config_from_settings():
    settings = ImapSettings(host="h", username="u", password="p", port=143, ssl=False, mailbox="Work")
    config = ImapConfig.from_settings(settings)
    assert (config.host, config.port, config.ssl, config.mailbox) == ("h", 143, False, "Work")
