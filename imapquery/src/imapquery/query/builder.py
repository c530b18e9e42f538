"""Accumulate SEARCH criteria and render them into one raw query string.

What:
  :class:`Statement` is one ``(operator, value)`` pair; :class:`QueryBuilder`
  owns the ordered statement list, the charset, and the fetch configuration,
  and renders the statements into the string sent with ``UID SEARCH``.

Why:
  Statement order is significant for IMAP search keys (``OR``/``NOT`` bind to
  the keys that follow), so the builder never reorders or validates
  operators; protocol correctness stays with the caller.

How:
  Each mutation invalidates :attr:`QueryBuilder._raw_query`; :meth:`render`
  recomputes it lazily from the statement list. Values are encoded at append
  time through :func:`~imapquery.query.criteria.encode` with the configured
  date pattern, so statements are immutable once stored.

Interfaces:
  :class:`Statement`, :class:`QueryBuilder`.

Invariants & Safety:
  - ``render()`` is the trimmed, single-space join of the statements in
    insertion order; ``<op>`` for flag-only statements and ``<op> "<value>"``
    otherwise.
  - A cached raw string is never returned after the statement list changed.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple, Union

from ..config.schema import FetchMode
from .criteria import DEFAULT_DATE_FORMAT, CriterionValue, DateValue, as_value, encode, parse_date


@dataclass(frozen=True)
class Statement:
    """One SEARCH key with its already-encoded argument (``None`` for flags)."""

    operator: str
    value: Optional[str] = None

    def render(self) -> str:
        if self.value is None:
            return self.operator
        return f'{self.operator} "{self.value}"'


class QueryBuilder:
    """Ordered statement list plus the charset and fetch configuration."""

    def __init__(
        self,
        charset: Optional[str] = "UTF-8",
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
        fetch_options: FetchMode = FetchMode.PEEK,
        fetch_body: bool = True,
        fetch_attachments: bool = True,
        fetch_flags: bool = True,
    ) -> None:
        self._statements: List[Statement] = []
        self._raw_query: Optional[str] = None
        self._charset = charset
        self.date_format = date_format
        self._fetch_options = FetchMode(fetch_options)
        self._fetch_body = fetch_body
        self._fetch_attachments = fetch_attachments
        self._fetch_flags = fetch_flags

    # Statements ---------------------------------------------------------
    def add_criterion(self, operator: str, value: Optional[Union[CriterionValue, object]] = None) -> "QueryBuilder":
        """Append a statement; ``value=None`` makes it a flag-only key."""

        encoded = None if value is None else encode(as_value(value), self.date_format)
        self._statements.append(Statement(operator, encoded))
        self._raw_query = None
        return self

    @property
    def statements(self) -> Tuple[Statement, ...]:
        return tuple(self._statements)

    def set_statements(self, statements: Iterable[Statement]) -> "QueryBuilder":
        self._statements = list(statements)
        self._raw_query = None
        return self

    def render(self) -> str:
        """Return the raw SEARCH string for the current statements."""

        if self._raw_query is None:
            self._raw_query = " ".join(statement.render() for statement in self._statements).strip()
        return self._raw_query

    @property
    def raw_query(self) -> str:
        return self.render()

    # Charset ------------------------------------------------------------
    @property
    def charset(self) -> Optional[str]:
        return self._charset

    @charset.setter
    def charset(self, value: Optional[str]) -> None:
        self._charset = value or None

    def get_charset(self) -> Optional[str]:
        return self._charset

    def set_charset(self, charset: Optional[str]) -> "QueryBuilder":
        self.charset = charset
        return self

    # Fetch configuration ------------------------------------------------
    def get_fetch_options(self) -> FetchMode:
        return self._fetch_options

    def set_fetch_options(self, fetch_options: FetchMode) -> "QueryBuilder":
        self._fetch_options = FetchMode(fetch_options)
        return self

    def leave_unread(self) -> "QueryBuilder":
        """Do not mark fetched messages as read."""

        return self.set_fetch_options(FetchMode.PEEK)

    def mark_as_read(self) -> "QueryBuilder":
        """Mark fetched messages as read."""

        return self.set_fetch_options(FetchMode.CONSUME)

    def get_fetch_body(self) -> bool:
        return self._fetch_body

    def set_fetch_body(self, fetch_body: bool) -> "QueryBuilder":
        self._fetch_body = bool(fetch_body)
        return self

    def get_fetch_attachments(self) -> bool:
        return self._fetch_attachments

    def set_fetch_attachments(self, fetch_attachments: bool) -> "QueryBuilder":
        self._fetch_attachments = bool(fetch_attachments)
        return self

    def get_fetch_flags(self) -> bool:
        return self._fetch_flags

    def set_fetch_flags(self, fetch_flags: bool) -> "QueryBuilder":
        self._fetch_flags = bool(fetch_flags)
        return self

    # Convenience criteria -----------------------------------------------
    def all(self) -> "QueryBuilder":
        return self.add_criterion("ALL")

    def seen(self) -> "QueryBuilder":
        return self.add_criterion("SEEN")

    def unseen(self) -> "QueryBuilder":
        return self.add_criterion("UNSEEN")

    def answered(self) -> "QueryBuilder":
        return self.add_criterion("ANSWERED")

    def unanswered(self) -> "QueryBuilder":
        return self.add_criterion("UNANSWERED")

    def flagged(self) -> "QueryBuilder":
        return self.add_criterion("FLAGGED")

    def unflagged(self) -> "QueryBuilder":
        return self.add_criterion("UNFLAGGED")

    def deleted(self) -> "QueryBuilder":
        return self.add_criterion("DELETED")

    def undeleted(self) -> "QueryBuilder":
        return self.add_criterion("UNDELETED")

    def new(self) -> "QueryBuilder":
        return self.add_criterion("NEW")

    def old(self) -> "QueryBuilder":
        return self.add_criterion("OLD")

    def recent(self) -> "QueryBuilder":
        return self.add_criterion("RECENT")

    def subject(self, value: str) -> "QueryBuilder":
        return self.add_criterion("SUBJECT", value)

    def from_(self, value: str) -> "QueryBuilder":
        return self.add_criterion("FROM", value)

    def to(self, value: str) -> "QueryBuilder":
        return self.add_criterion("TO", value)

    def cc(self, value: str) -> "QueryBuilder":
        return self.add_criterion("CC", value)

    def bcc(self, value: str) -> "QueryBuilder":
        return self.add_criterion("BCC", value)

    def body(self, value: str) -> "QueryBuilder":
        """Match only in the body text."""

        return self.add_criterion("BODY", value)

    def text(self, value: str) -> "QueryBuilder":
        """Match in headers or body text."""

        return self.add_criterion("TEXT", value)

    def keyword(self, value: str) -> "QueryBuilder":
        return self.add_criterion("KEYWORD", value)

    def unkeyword(self, value: str) -> "QueryBuilder":
        return self.add_criterion("UNKEYWORD", value)

    # Dates are validated before they reach the statement list.
    def since(self, value: Union[date, str]) -> "QueryBuilder":
        return self.add_criterion("SINCE", DateValue(parse_date(value)))

    def before(self, value: Union[date, str]) -> "QueryBuilder":
        return self.add_criterion("BEFORE", DateValue(parse_date(value)))

    def on(self, value: Union[date, str]) -> "QueryBuilder":
        return self.add_criterion("ON", DateValue(parse_date(value)))
