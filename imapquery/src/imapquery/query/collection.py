"""Result containers returned by :meth:`Query.get` and :meth:`Query.paginate`.

What:
  :class:`MessageCollection` is an insertion-ordered mapping from message key
  to :class:`~imapquery.imap.message.Message` plus the size of the unsliced
  match set. :class:`LengthAwarePage` wraps one page of it together with
  pagination metadata.

Why:
  A page of results is only useful in a UI or API when it also carries how
  many results exist overall; the total is therefore captured before
  pagination slices the match set.

Interfaces:
  :class:`MessageCollection`, :class:`LengthAwarePage`.
"""
from __future__ import annotations

import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, Optional

if TYPE_CHECKING:  # pragma: no cover
    from ..imap.message import Message


class MessageCollection(OrderedDict):
    """Ordered ``key -> Message`` mapping with a ``total`` attribute.

    ``total`` is the size of the full match set and is ``0`` until set.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.total = 0

    def set_total(self, total: int) -> "MessageCollection":
        self.total = int(total)
        return self

    def paginate(self, per_page: int, page: int = 1, page_name: str = "imap_page") -> "LengthAwarePage":
        """Wrap the collection as one page.

        The collection already holds exactly the requested window, so its
        items are used as-is; ``total`` drives the page count.
        """

        return LengthAwarePage(
            items=OrderedDict(self),
            total=self.total or len(self),
            per_page=per_page,
            current_page=page,
            page_name=page_name,
        )


@dataclass
class LengthAwarePage:
    """One page of messages with the metadata needed to render pagination."""

    items: Dict[str, "Message"]
    total: int
    per_page: int
    current_page: int = 1
    page_name: str = "imap_page"

    @property
    def last_page(self) -> int:
        if self.per_page <= 0:
            return 1
        return max(int(math.ceil(self.total / self.per_page)), 1)

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    @property
    def first_item(self) -> Optional[int]:
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> Optional[int]:
        first = self.first_item
        return None if first is None else first + len(self.items) - 1

    def __iter__(self) -> Iterator["Message"]:
        return iter(self.items.values())

    def __len__(self) -> int:
        return len(self.items)

