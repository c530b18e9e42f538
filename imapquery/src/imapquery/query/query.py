"""Query facade composing builder, search, pagination, mapping, and idle.

What:
  :class:`Query` is the object callers chain criteria on and then call
  :meth:`Query.get`, :meth:`Query.paginate`, :meth:`Query.count`, or
  :meth:`Query.idle` against one connection handle.

Why:
  Each stage lives in its own module so it can be tested alone; the facade
  owns the mutable state that ties them together (statements, charset,
  fetch configuration, page, and limit) and applies the configured defaults.

How:
  Defaults come from the ``options`` block of the runtime configuration
  (:func:`~imapquery.config.get_query_options`) unless an explicit
  :class:`~imapquery.config.QueryOptions` is passed. ``get`` runs
  search -> order -> window -> map and records the unsliced match-set size on
  the returned collection.

Interfaces:
  :class:`Query`.

Invariants & Safety:
  - ``page >= 1`` and ``limit`` is a positive int or ``None`` at all times.
  - :meth:`count` and :meth:`search` never alter pagination state.
  - Every network operation first goes through :meth:`get_client`.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from ..config import FetchOrder, MessageKey, QueryOptions, get_query_options
from ..events import EventChannel
from ..imap.client import ImapClient
from ..imap.message import Message
from ..utils.logging import JsonLogger, get_logger
from . import mapper, paginator
from . import search as search_executor
from .builder import QueryBuilder
from .collection import LengthAwarePage, MessageCollection
from .idle import IdleWatcher


class Query(QueryBuilder):
    """Search criteria plus pagination bound to an :class:`ImapClient`."""

    def __init__(
        self,
        client: ImapClient,
        charset: Optional[str] = "UTF-8",
        *,
        options: Optional[QueryOptions] = None,
        events: Optional[EventChannel] = None,
        logger: Optional[JsonLogger] = None,
    ) -> None:
        options = options or get_query_options()
        super().__init__(
            charset,
            date_format=options.date_format,
            fetch_options=options.fetch,
            fetch_body=options.fetch_body,
            fetch_attachments=options.fetch_attachments,
            fetch_flags=options.fetch_flags,
        )
        self._client = client
        self.fetch_order = FetchOrder(options.fetch_order)
        self.message_key = MessageKey(options.message_key)
        self._events = events
        self._logger = logger or get_logger("imapquery.query")
        self._page = 1
        self._limit: Optional[int] = None

    # Pagination state ---------------------------------------------------
    @property
    def page(self) -> int:
        return self._page

    @property
    def limit_value(self) -> Optional[int]:
        return self._limit

    def limit(self, count: Optional[int], page: int = 1) -> "Query":
        """Set the page size and, when ``page >= 1``, the page number."""

        self.set_limit(count)
        if page >= 1:
            self._page = page
        return self

    def set_limit(self, count: Optional[int]) -> "Query":
        _, self._limit = paginator.normalise(self._page, count)
        return self

    def set_page(self, page: int) -> "Query":
        self._page, _ = paginator.normalise(page, None)
        return self

    def set_fetch_order(self, fetch_order: FetchOrder) -> "Query":
        self.fetch_order = FetchOrder(fetch_order)
        return self

    def fetch_order_asc(self) -> "Query":
        return self.set_fetch_order(FetchOrder.ASC)

    def fetch_order_desc(self) -> "Query":
        return self.set_fetch_order(FetchOrder.DESC)

    def set_message_key(self, message_key: MessageKey) -> "Query":
        self.message_key = MessageKey(message_key)
        return self

    # Execution ----------------------------------------------------------
    def get_client(self) -> ImapClient:
        """Return the client after making sure it is connected.

        Raises:
          ConnectionUnavailable: When the connection cannot be (re)opened.
        """

        self._client.check_connection()
        return self._client

    def search(self) -> List[int]:
        """Return the UIDs matching the current criteria, in server order."""

        client = self.get_client()
        return search_executor.search(self, client, logger=self._logger)

    def count(self) -> int:
        """Return how many messages match; pagination is not applied."""

        return len(self.search())

    def get(self) -> MessageCollection:
        """Fetch the current page of matching messages.

        Raises:
          FetchFailed: When any matched message cannot be materialised.
          ConnectionUnavailable: When there is no connection.
        """

        client = self.get_client()
        match_set = search_executor.search(self, client, logger=self._logger)
        window = paginator.paginate(match_set, self.fetch_order, self._page, self._limit)
        self._logger.debug(
            "query_get",
            total=len(match_set),
            page=self._page,
            limit=self._limit,
            order=self.fetch_order.value,
        )
        collection = mapper.map_messages(
            window,
            client,
            message_key=self.message_key,
            fetch_options=self.get_fetch_options(),
            fetch_body=self.get_fetch_body(),
            fetch_attachments=self.get_fetch_attachments(),
            fetch_flags=self.get_fetch_flags(),
            logger=self._logger,
        )
        return collection.set_total(len(match_set))

    def paginate(self, per_page: int = 5, page: Optional[int] = None, page_name: str = "imap_page") -> LengthAwarePage:
        """Fetch one page and wrap it with pagination metadata.

        ``page`` never moves backwards: the effective page is the larger of
        ``page`` and the current page.
        """

        effective = max(page or 1, self._page)
        self.limit(per_page, effective)
        return self.get().paginate(per_page, self._page, page_name)

    def idle(
        self,
        callback: Optional[Callable[[Message], None]] = None,
        interval: float = 10,
        *,
        max_iterations: Optional[int] = None,
    ) -> IdleWatcher:
        """Watch the mailbox for new messages until the connection drops.

        Returns:
          The watcher after its loop ended, so callers can inspect
          :attr:`IdleWatcher.known_uids`.
        """

        watcher = IdleWatcher(
            self.get_client(),
            events=self._events,
            interval=interval,
            max_iterations=max_iterations,
            fetch_options=self.get_fetch_options(),
            fetch_body=self.get_fetch_body(),
            fetch_attachments=self.get_fetch_attachments(),
            fetch_flags=self.get_fetch_flags(),
            logger=self._logger,
        )
        watcher.run(callback)
        return watcher
