from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TextIO

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.output import (
    ENTRIES_OPEN,
    render,
    render_case_header,
    render_collection_header,
    render_footer,
)
from pacerfetch.workflow.cases import ensure_header, import_case
from pacerfetch.workflow.pagination import PageWalker
from pacerfetch.workflow.sources import EntrySource, page_fetcher

logger = logging.getLogger(__name__)


@dataclass
class ReportStats:
    rows: int = 0
    errors: int = 0
    empty: bool = False
    header_written: bool = False


class ReportBuilder:
    """
    Assemble a docket sheet or claims register as a single HTML page.

    A row that fails to render is logged, counted in `ReportStats.errors` and left out of the
    page unless `continue_on_error` is off. Case import, header and page fetch failures end the
    run.
    """

    def __init__(
        self,
        client: CourtApiGateway,
        source: EntrySource,
        *,
        page_size: int = 500,
        sort_order: str = "desc",
        continue_on_error: bool = True,
    ) -> None:
        self.client = client
        self.source = source
        self.page_size = page_size
        self.sort_order = sort_order
        self.continue_on_error = continue_on_error

    async def write(
        self,
        stream: TextIO,
        court: str,
        case_number: str,
        *,
        keyword: str | None = None,
    ) -> ReportStats:
        stats = ReportStats()

        case = await import_case(self.client, court, case_number)
        stream.write(render_case_header(case))

        header = await ensure_header(
            partial(self.source.fetch_header, court, case_number),
            partial(self.source.update, court, case_number),
        )
        if header.html is not None:
            stream.write(render_collection_header(header.html))
            stats.header_written = True
        else:
            logger.warning("No %s header available after update", self.source.kind)

        stream.write(ENTRIES_OPEN)

        walker = PageWalker(
            page_fetcher(self.source, court, case_number, sort_order=self.sort_order, keyword=keyword),
            page_size=self.page_size,
        )
        heading_written = False
        async for page in walker.pages():
            # Column headings go in front of the first data row only.
            if not heading_written and page.content:
                stream.write(render(self.source.template, self.source.heading_row()))
                heading_written = True
            for raw in page.content:
                try:
                    html = render(self.source.template, self.source.row(raw))
                except Exception:
                    stats.errors += 1
                    logger.exception(
                        "Failed to render %s entry",
                        self.source.kind,
                        extra={"court": court, "case_number": case_number},
                    )
                    if not self.continue_on_error:
                        raise
                    continue
                stream.write(html)
                stats.rows += 1

        stream.write(render_footer())
        stats.empty = bool(walker.empty)
        logger.info(
            "Report written",
            extra={
                "kind": self.source.kind,
                "rows": stats.rows,
                "errors": stats.errors,
                "pages": walker.pages_fetched,
            },
        )
        return stats
