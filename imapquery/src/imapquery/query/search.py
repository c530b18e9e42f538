"""Execute a rendered query against the server with charset negotiation.

What:
  :func:`search` sends the builder's raw query via ``UID SEARCH`` and returns
  the match set; :func:`count` is its length.

Why:
  Servers reject unknown charsets with a ``NO [BADCHARSET (...)]`` response
  that lists the charsets they accept. Retrying once with the first suggestion
  makes non-ASCII searches work on such servers without caller involvement,
  while every other failure is reported as "no match" so counting and listing
  stay total.

How:
  A failed attempt's response text is parsed for a ``BADCHARSET`` response
  code. If it names a charset that has not been tried yet, the builder's
  charset is overwritten and the search recurses. Each charset is tried at
  most once, so the recursion terminates even when the server keeps
  suggesting the same (or a previously tried) charset.

Interfaces:
  :func:`search`, :func:`count`.

Invariants & Safety:
  - :class:`~imapquery.errors.ConnectionUnavailable` propagates unchanged.
  - Any other error results in an empty list; :class:`SearchFailed` never
    escapes this module.
  - The match set is returned in server order and is never cached.
"""
from __future__ import annotations

from typing import List, Optional, Set

from ..errors import ConnectionUnavailable, SearchFailed
from ..imap.client import ImapClient
from ..imap.response import badcharset_suggestions
from ..utils.logging import JsonLogger, get_logger
from .builder import QueryBuilder

_LOGGER = get_logger("imapquery.search")


def search(
    builder: QueryBuilder,
    client: ImapClient,
    *,
    logger: Optional[JsonLogger] = None,
) -> List[int]:
    """Return the UIDs matching ``builder``'s criteria.

    Args:
      builder: Query whose statements and charset are used; its charset may be
        replaced during negotiation.
      client: Open connection handle.
      logger: Optional structured logger.

    Returns:
      UIDs in the order the server reported them, or ``[]``.

    Raises:
      ConnectionUnavailable: When the client has no open connection.
    """

    return _search(builder, client, logger or _LOGGER, tried=set())


def _search(builder: QueryBuilder, client: ImapClient, logger: JsonLogger, *, tried: Set[Optional[str]]) -> List[int]:
    raw = builder.render()
    charset = builder.get_charset()
    tried.add(_normalise(charset))
    logger.debug("search_attempt", query=raw, charset=charset)
    try:
        result = client.search(raw, charset=charset)
    except ConnectionUnavailable:
        raise
    except SearchFailed as exc:
        suggestions = badcharset_suggestions(exc.response_text)
        if suggestions and _normalise(suggestions[0]) not in tried:
            logger.warning("search_charset_retry", rejected=charset, retry_with=suggestions[0])
            builder.set_charset(suggestions[0])
            return _search(builder, client, logger, tried=tried)
        logger.warning("search_failed", query=raw, charset=charset, error=str(exc))
        return []
    except Exception as exc:
        logger.error("search_error", query=raw, charset=charset, error=repr(exc))
        return []
    if not result:
        return []
    return list(result)


def count(builder: QueryBuilder, client: ImapClient, *, logger: Optional[JsonLogger] = None) -> int:
    """Return the number of messages matching ``builder``; always re-searches."""

    return len(search(builder, client, logger=logger))


def _normalise(charset: Optional[str]) -> Optional[str]:
    return charset.upper() if charset else None
