"""Tests for the paginated collection walker."""

from unittest.mock import AsyncMock, call

import pytest

from pacerfetch.types import Page
from pacerfetch.workflow import FIRST_PAGE, PageWalker


def _pages(*contents, total_items=None):
    total = total_items if total_items is not None else sum(len(c) for c in contents)
    return [Page(total_items=total, total_pages=len(contents), content=list(c)) for c in contents]


async def test_empty_collection_stops_after_one_request():
    fetch = AsyncMock(return_value=Page(total_items=0, total_pages=0, content=[]))
    walker = PageWalker(fetch, page_size=50)

    entries = [entry async for entry in walker.entries()]

    assert entries == []
    assert walker.empty is True
    assert fetch.await_count == 1
    fetch.assert_awaited_once_with(FIRST_PAGE, 50)


async def test_fetches_every_page_once_in_order():
    fetch = AsyncMock(side_effect=_pages([{"id": 1}, {"id": 2}], [{"id": 3}, {"id": 4}], [{"id": 5}]))
    walker = PageWalker(fetch, page_size=2)

    entries = [entry async for entry in walker.entries()]

    assert [entry["id"] for entry in entries] == [1, 2, 3, 4, 5]
    assert fetch.await_args_list == [call(1, 2), call(2, 2), call(3, 2)]
    assert walker.empty is False
    assert walker.total_pages == 3
    assert walker.pages_fetched == 3


async def test_single_page_collection_makes_one_request():
    fetch = AsyncMock(side_effect=_pages([{"id": 1}, {"id": 2}]))
    walker = PageWalker(fetch)

    pages = [page async for page in walker.pages()]

    assert len(pages) == 1
    assert fetch.await_count == 1


async def test_total_pages_is_taken_from_first_page_only():
    first = Page(total_items=4, total_pages=2, content=[{"id": 1}, {"id": 2}])
    # a later page claiming more pages must not extend the walk
    second = Page(total_items=9, total_pages=5, content=[{"id": 3}, {"id": 4}])
    fetch = AsyncMock(side_effect=[first, second])
    walker = PageWalker(fetch, page_size=2)

    entries = [entry async for entry in walker.entries()]

    assert len(entries) == 4
    assert fetch.await_count == 2


async def test_page_failure_aborts_walk_without_retry():
    first = Page(total_items=3, total_pages=3, content=[{"id": 1}])
    fetch = AsyncMock(side_effect=[first, RuntimeError("boom")])
    walker = PageWalker(fetch, page_size=1)

    seen = []
    with pytest.raises(RuntimeError, match="boom"):
        async for entry in walker.entries():
            seen.append(entry)

    assert seen == [{"id": 1}]
    assert fetch.await_count == 2


async def test_walker_is_single_use():
    fetch = AsyncMock(side_effect=_pages([{"id": 1}]))
    walker = PageWalker(fetch)
    [page async for page in walker.pages()]

    with pytest.raises(RuntimeError):
        [page async for page in walker.pages()]


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        PageWalker(AsyncMock(), page_size=0)
