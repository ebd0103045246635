from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.output import DownloadSink
from pacerfetch.types import DocumentPart
from pacerfetch.workflow.cases import import_case
from pacerfetch.workflow.pagination import PageWalker
from pacerfetch.workflow.resolver import DocumentResolver
from pacerfetch.workflow.sources import EntrySource, PartGroup, page_fetcher

logger = logging.getLogger(__name__)


@dataclass
class DownloadStats:
    """Counters returned to the CLI and tests."""

    entries: int = 0
    documents: int = 0
    skipped: int = 0
    purchases: int = 0
    errors: int = 0
    empty: bool = False


class BulkDownloader:
    """
    Purchase (when needed) and download every document attached to matching entries of a case.

    Run order:
    1. Import the case from PACER if CourtAPI does not have it.
    2. Update the collection from PACER once for the whole case.
    3. Walk the entries matching the keyword, with their documents included.
    4. For each entry binder, refresh an empty part listing once, resolve each part and save
       the ones that have both a filename and a download URL.

    A failure inside one entry is logged and counted, and the walk moves on to the next entry
    unless `continue_on_error` is off. Case import and page fetch failures end the run.
    """

    def __init__(
        self,
        client: CourtApiGateway,
        source: EntrySource,
        sink: DownloadSink,
        *,
        page_size: int = 500,
        sort_order: str = "desc",
        update_empty_parts: bool = True,
        continue_on_error: bool = True,
    ) -> None:
        self.client = client
        self.source = source
        self.sink = sink
        self.resolver = DocumentResolver(client)
        self.page_size = page_size
        self.sort_order = sort_order
        self.update_empty_parts = update_empty_parts
        self.continue_on_error = continue_on_error

    async def run(self, court: str, case_number: str, keyword: str | None) -> DownloadStats:
        stats = DownloadStats()

        case = await import_case(self.client, court, case_number)
        logger.info(
            "Case ready",
            extra={"court": court, "case_number": case_number, "case_title": case.title},
        )

        await self.source.update(court, case_number)
        logger.info("Updated %s from PACER", self.source.kind)

        fetch_page = page_fetcher(
            self.source,
            court,
            case_number,
            sort_order=self.sort_order,
            keyword=keyword,
            include_documents=True,
        )
        walker = PageWalker(fetch_page, page_size=self.page_size)
        async for raw in walker.entries():
            try:
                await self._process_entry(court, case_number, raw, stats)
                stats.entries += 1
            except Exception:
                stats.errors += 1
                logger.exception(
                    "Failed to process %s entry",
                    self.source.kind,
                    extra={"court": court, "case_number": case_number},
                )
                if not self.continue_on_error:
                    raise

        stats.empty = bool(walker.empty)
        stats.purchases = self.resolver.purchases
        if stats.empty:
            logger.info("No %s entries matched %r", self.source.kind, keyword)
        logger.info("Bulk download finished", extra={**stats.__dict__, "kind": self.source.kind})
        return stats

    async def _process_entry(
        self, court: str, case_number: str, raw: Mapping[str, Any], stats: DownloadStats
    ) -> None:
        for group in self.source.part_groups(court, case_number, raw):
            parts = await self._ensure_parts(group)
            for part in parts:
                resolved = await self.resolver.resolve(group.binder, part)
                if not resolved.downloadable:
                    stats.skipped += 1
                    logger.warning(
                        "Document part has no stored file, skipping",
                        extra={"binder": group.binder, "part": part.number},
                    )
                    continue
                await self.sink.save(
                    self.client.iter_download(resolved.stored.download_url),
                    resolved.stored.filename,
                )
                stats.documents += 1

    async def _ensure_parts(self, group: PartGroup) -> list[DocumentPart]:
        if group.parts or not self.update_empty_parts:
            return group.parts
        logger.info("Part listing empty, updating from PACER", extra={"binder": group.binder})
        await self.client.update_parts(group.binder)
        return await self.client.list_parts(group.binder)
