"""
Module: tests/unit/test_mapper.py

What:
    Check key resolution for every :class:`MessageKey` strategy, duplicate
    disambiguation, and the conversion of failures into ``FetchFailed``.

Why:
    Two messages sharing a ``Message-ID`` must both survive in the resulting
    collection; losing one silently would hide mail from callers.
"""

import random

import pytest

from imapquery.config import FetchMode, MessageKey
from imapquery.errors import FetchFailed
from imapquery.query.mapper import map_messages


def test_message_id_keys_with_number_fallback(imap_client):
    client, backend = imap_client
    backend.add_message("first", message_id="<one@example.org>")
    backend.add_message("second")

    collection = map_messages([(0, 1), (1, 2)], client)
    assert list(collection) == ["<one@example.org>", "2"]
    assert collection["2"].subject == "second"


def test_number_and_list_keys(imap_client):
    client, backend = imap_client
    for subject in ("a", "b", "c"):
        backend.add_message(subject)

    by_number = map_messages([(0, 3), (1, 1)], client, message_key=MessageKey.NUMBER)
    assert list(by_number) == ["3", "1"]

    by_position = map_messages([(4, 3), (5, 1)], client, message_key=MessageKey.LIST)
    assert list(by_position) == ["4", "5"]
    assert by_position["4"].position == 4


def test_duplicate_message_ids_are_both_kept(imap_client):
    """
    What:
        Identical ``Message-ID`` headers produce distinct keys.

    How:
        Seed the random source so the suffix is predictable enough to assert
        on its shape, then confirm insertion order and membership.
    """

    client, backend = imap_client
    backend.add_message("original", message_id="<dup@example.org>")
    backend.add_message("resent", message_id="<dup@example.org>")

    collection = map_messages([(0, 1), (1, 2)], client, rng=random.Random(7))
    keys = list(collection)
    assert len(keys) == 2
    assert keys[0] == "<dup@example.org>"
    assert keys[1].startswith("<dup@example.org>duplicated")
    suffix = keys[1][len("<dup@example.org>duplicated"):]
    assert 1 <= int(suffix) <= 999999
    assert [m.subject for m in collection.values()] == ["original", "resent"]


def test_missing_uid_raises_fetch_failed(imap_client):
    client, backend = imap_client
    backend.add_message()

    with pytest.raises(FetchFailed) as info:
        map_messages([(0, 1), (1, 99)], client)
    assert isinstance(info.value.__cause__, LookupError)


def test_fetch_parts_follow_configuration(imap_client):
    client, backend = imap_client
    backend.add_message()

    map_messages([(0, 1)], client, fetch_body=False, fetch_attachments=False, fetch_flags=False)
    assert backend.fetch_calls[-1] == ([1], ["BODY.PEEK[HEADER]"])

    map_messages([(0, 1)], client, fetch_options=FetchMode.CONSUME)
    assert backend.fetch_calls[-1] == ([1], ["BODY.PEEK[HEADER]", "FLAGS", "BODY[]"])


def test_peek_mode_leaves_message_unread(imap_client):
    client, backend = imap_client
    backend.add_message()

    collection = map_messages([(0, 1)], client)
    message = collection["1"]
    assert not message.is_seen
    assert message.text.strip() == "Hello there."
    assert backend.messages[1].flags == []
