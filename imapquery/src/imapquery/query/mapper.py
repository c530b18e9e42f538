"""Turn a paginated window of UIDs into a keyed :class:`MessageCollection`.

What:
  Build one :class:`~imapquery.imap.message.Message` per ``(position, uid)``
  pair and key it according to the configured :class:`MessageKey` strategy.

Why:
  Callers index results by sequence number, list position, or protocol
  ``Message-ID``. ``Message-ID`` is not guaranteed unique (resent mail,
  broken clients), so colliding keys are disambiguated instead of silently
  overwriting an earlier message.

How:
  :func:`resolve_key` picks the key; :func:`_unique_key` appends
  ``duplicated<random>`` until the key is free. Any exception raised while
  building a handle or resolving its key aborts the whole mapping and is
  re-raised as :class:`~imapquery.errors.FetchFailed`.

Interfaces:
  :func:`resolve_key`, :func:`map_messages`.

Invariants & Safety:
  - Collection keys are unique strings.
  - Insertion order follows the window order.
  - A failure never yields a partially filled collection.
"""
from __future__ import annotations

import random
from typing import Iterable, Optional, Tuple

from ..config.schema import FetchMode, MessageKey
from ..errors import FetchFailed
from ..imap.client import ImapClient
from ..imap.message import Message
from ..utils.logging import JsonLogger, get_logger
from .collection import MessageCollection

_LOGGER = get_logger("imapquery.mapper")


def resolve_key(message: Message, position: int, strategy: MessageKey) -> str:
    """Return the collection key of ``message`` for ``strategy``."""

    strategy = MessageKey(strategy)
    if strategy is MessageKey.NUMBER:
        return str(message.number)
    if strategy is MessageKey.LIST:
        return str(position)
    if strategy is MessageKey.MESSAGE_ID:
        return message.message_id or str(message.number)
    raise ValueError(f"Unsupported message key strategy: {strategy!r}")


def _unique_key(key: str, collection: MessageCollection, rng: random.Random) -> str:
    candidate = key
    while candidate in collection:
        candidate = f"{key}duplicated{rng.randint(1, 999999)}"
    return candidate


def map_messages(
    window: Iterable[Tuple[int, int]],
    client: ImapClient,
    *,
    message_key: MessageKey = MessageKey.MESSAGE_ID,
    fetch_options: FetchMode = FetchMode.PEEK,
    fetch_body: bool = True,
    fetch_attachments: bool = True,
    fetch_flags: bool = True,
    rng: Optional[random.Random] = None,
    logger: Optional[JsonLogger] = None,
) -> MessageCollection:
    """Build a keyed collection from ``(position, uid)`` pairs.

    Args:
      window: Pairs produced by :func:`imapquery.query.paginator.paginate`.
      client: Connection used by every :class:`Message` to fetch its data.
      message_key: Key strategy.
      fetch_options: Peek or consume.
      fetch_body: Fetch text/html parts.
      fetch_attachments: Fetch attachments.
      fetch_flags: Fetch flags.
      rng: Random source for collision suffixes.
      logger: Optional structured logger.

    Raises:
      FetchFailed: When any handle cannot be built or keyed.
    """

    rng = rng or random.Random()
    logger = logger or _LOGGER
    collection = MessageCollection()
    try:
        for position, uid in window:
            message = Message(
                uid,
                position,
                client,
                fetch_options=fetch_options,
                fetch_body=fetch_body,
                fetch_attachments=fetch_attachments,
                fetch_flags=fetch_flags,
            )
            key = resolve_key(message, position, message_key)
            unique = _unique_key(key, collection, rng)
            if unique != key:
                logger.debug("message_key_duplicated", uid=uid, key=key, stored_as=unique)
            collection[unique] = message
    except Exception as exc:
        logger.error("fetch_failed", error=repr(exc))
        raise FetchFailed(f"Unable to fetch messages: {exc}") from exc
    return collection
