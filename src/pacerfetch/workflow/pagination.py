from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping

from pacerfetch.types import Page

logger = logging.getLogger(__name__)

FIRST_PAGE = 1

# Called with (page_number, page_size).
FetchPage = Callable[[int, int], Awaitable[Page]]


class PageWalker:
    """
    Walk a 1-indexed CourtAPI collection page by page.

    `total_pages` is only known once page 1 has been fetched. Pages are fetched strictly in
    increasing order, each exactly once, and never past `total_pages`. A collection whose first
    page reports `total_items == 0` ends the walk after that single request and sets `empty`.
    Fetch failures propagate to the caller.
    """

    def __init__(self, fetch_page: FetchPage, *, page_size: int = 500) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._fetch_page = fetch_page
        self.page_size = page_size
        self.total_items = 0
        self.total_pages = 0
        self.pages_fetched = 0
        self.empty: bool | None = None
        self._started = False

    async def pages(self) -> AsyncIterator[Page]:
        if self._started:
            raise RuntimeError("PageWalker can only be iterated once")
        self._started = True

        page_number = FIRST_PAGE
        page = await self._fetch(page_number)
        self.total_items = page.total_items
        self.total_pages = page.total_pages
        if page.total_items == 0:
            self.empty = True
            logger.debug("Collection is empty")
            return

        self.empty = False
        yield page
        while page_number < self.total_pages:
            page_number += 1
            yield await self._fetch(page_number)

    async def entries(self) -> AsyncIterator[Mapping[str, Any]]:
        async for page in self.pages():
            for item in page.content:
                yield item

    async def _fetch(self, page_number: int) -> Page:
        page = await self._fetch_page(page_number, self.page_size)
        self.pages_fetched += 1
        logger.debug(
            "Fetched page %s/%s with %s entries",
            page_number,
            page.total_pages or "?",
            len(page.content),
        )
        return page
