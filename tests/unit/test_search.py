"""
Module: tests/unit/test_search.py

What:
    Exercise the search executor against the fake backend: plain searches,
    ``BADCHARSET`` negotiation, termination of the retry loop, and the
    conversion of server errors into empty match sets.

Why:
    Charset negotiation mutates the query and recurses; a regression could
    loop forever or leak protocol exceptions to callers that expect a list.
"""

import pytest
from imapclient import IMAPClient

from imapquery.errors import ConnectionUnavailable
from imapquery.query import search as executor
from imapquery.query.builder import QueryBuilder


def test_search_returns_server_matches(imap_client):
    client, backend = imap_client
    for subject in ("a", "b", "c"):
        backend.add_message(subject)
    backend.matches = [3, 1]

    builder = QueryBuilder().unseen()
    assert executor.search(builder, client) == [3, 1]
    assert backend.search_calls == [("UNSEEN", "UTF-8")]


def test_search_omits_charset_when_none(imap_client):
    client, backend = imap_client
    backend.add_message()

    builder = QueryBuilder(charset=None).seen()
    executor.search(builder, client)
    assert backend.search_calls == [("SEEN", None)]


def test_badcharset_retries_with_first_suggestion(imap_client):
    """
    What:
        A ``NO [BADCHARSET (US-ASCII)]`` reply triggers one retry with the
        suggested charset, which then sticks on the builder.
    """

    client, backend = imap_client
    backend.add_message("Grüße")
    backend.rejected_charsets = {"UTF-8": ["US-ASCII", "ISO-8859-1"]}

    builder = QueryBuilder().subject("Gruesse")
    assert executor.search(builder, client) == [1]
    assert backend.search_calls == [
        ('SUBJECT "Gruesse"', "UTF-8"),
        ('SUBJECT "Gruesse"', "US-ASCII"),
    ]
    assert builder.get_charset() == "US-ASCII"


def test_badcharset_suggesting_same_charset_stops_after_one_attempt(imap_client):
    client, backend = imap_client
    backend.add_message()
    backend.rejected_charsets = {"UTF-8": ["UTF-8"]}

    assert executor.search(QueryBuilder().all(), client) == []
    assert len(backend.search_calls) == 1


def test_badcharset_ping_pong_terminates(imap_client):
    client, backend = imap_client
    backend.add_message()
    backend.rejected_charsets = {"UTF-8": ["US-ASCII"], "US-ASCII": ["utf-8"]}

    builder = QueryBuilder().all()
    assert executor.search(builder, client) == []
    assert [charset for _, charset in backend.search_calls] == ["UTF-8", "US-ASCII"]


def test_bare_badcharset_yields_empty(imap_client):
    client, backend = imap_client
    backend.add_message()
    backend.rejected_charsets = {"UTF-8": []}

    assert executor.search(QueryBuilder().all(), client) == []
    assert len(backend.search_calls) == 1


def test_other_server_errors_yield_empty(imap_client):
    client, backend = imap_client
    backend.add_message()
    backend.search_error = IMAPClient.Error("SEARCH command error: BAD [b'Invalid search']")

    assert executor.search(QueryBuilder().add_criterion("BOGUS"), client) == []


def test_empty_query_yields_empty(imap_client):
    client, backend = imap_client
    backend.add_message()

    assert executor.search(QueryBuilder(), client) == []
    assert backend.search_calls == [("", "UTF-8")]


def test_empty_response_yields_empty_list(imap_client):
    client, backend = imap_client
    backend.matches = []

    assert executor.search(QueryBuilder().unseen(), client) == []


def test_count_matches_search_length(imap_client):
    client, backend = imap_client
    for subject in ("a", "b", "c", "d"):
        backend.add_message(subject)
    backend.matches = [1, 2, 4]

    builder = QueryBuilder().unseen()
    assert executor.count(builder, client) == len(executor.search(builder, client)) == 3


def test_connection_loss_propagates(imap_client):
    client, backend = imap_client
    backend.add_message()
    backend.drop_on = "search"

    with pytest.raises(ConnectionUnavailable):
        executor.search(QueryBuilder().all(), client)
    assert not client.is_connected()


def test_closed_client_propagates(imap_client):
    client, _ = imap_client
    client.close()

    with pytest.raises(ConnectionUnavailable):
        executor.search(QueryBuilder().all(), client)
