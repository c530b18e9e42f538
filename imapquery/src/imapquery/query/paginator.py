"""Order and slice a match set into the requested page window.

Positions are taken from the server listing before any reordering, so a
message keeps the same position whether the listing is read ascending or
descending.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, TypeVar

from ..config.schema import FetchOrder

T = TypeVar("T")


def normalise(page: Optional[int], limit: Optional[int]) -> Tuple[int, Optional[int]]:
    """Clamp ``page`` to >= 1 and map non-positive limits to ``None`` (unbounded)."""

    page = page if page is not None and page >= 1 else 1
    if limit is not None and limit <= 0:
        limit = None
    return page, limit


def order(match_set: Sequence[T], fetch_order: FetchOrder) -> List[T]:
    """Return a copy of ``match_set``, reversed for :attr:`FetchOrder.DESC`."""

    items = list(match_set)
    if FetchOrder(fetch_order) is FetchOrder.DESC:
        items.reverse()
    return items


def window(items: Sequence[T], page: int, limit: Optional[int]) -> List[T]:
    """Return page ``page`` of size ``limit``; ``limit=None`` returns every item."""

    page, limit = normalise(page, limit)
    if limit is None:
        return list(items)
    start = (page - 1) * limit
    return list(items[start:start + limit])


def paginate(match_set: Sequence[T], fetch_order: FetchOrder, page: int, limit: Optional[int]) -> List[Tuple[int, T]]:
    """Return ``(server_position, item)`` pairs for the requested page.

    Each item is paired with its index in ``match_set`` first, then the pairs
    are ordered and windowed.
    """

    return window(order(list(enumerate(match_set)), fetch_order), page, limit)
