"""Unit tests for ordering and windowing of match sets."""

from imapquery.config import FetchOrder
from imapquery.query import paginator


def test_desc_second_page_of_two():
    window = paginator.paginate([1, 2, 3, 4, 5], FetchOrder.DESC, page=2, limit=2)
    assert [uid for _, uid in window] == [3, 2]


def test_positions_come_from_server_listing_when_reversed():
    window = paginator.paginate([10, 20, 30, 40, 50], FetchOrder.DESC, page=2, limit=2)
    assert window == [(2, 30), (1, 20)]


def test_asc_first_page():
    window = paginator.paginate([10, 11, 12], FetchOrder.ASC, page=1, limit=2)
    assert window == [(0, 10), (1, 11)]


def test_unbounded_limit_returns_everything():
    assert paginator.window(["a", "b", "c"], page=3, limit=None) == ["a", "b", "c"]


def test_window_slices_requested_page():
    assert paginator.window(["a", "b", "c", "d", "e"], page=2, limit=2) == ["c", "d"]


def test_page_past_the_end_is_empty():
    assert paginator.window([1, 2, 3], page=5, limit=2) == []


def test_order_returns_copy():
    match_set = [1, 2, 3]
    reversed_set = paginator.order(match_set, FetchOrder.DESC)
    assert reversed_set == [3, 2, 1]
    assert match_set == [1, 2, 3]
    assert paginator.order(match_set, "asc") == [1, 2, 3]


def test_normalise_clamps_page_and_limit():
    assert paginator.normalise(0, 0) == (1, None)
    assert paginator.normalise(-3, -1) == (1, None)
    assert paginator.normalise(None, 5) == (1, 5)
    assert paginator.normalise(4, 10) == (4, 10)
