from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.errors import CaseNotFoundError
from pacerfetch.types import CaseInfo, CollectionHeader

logger = logging.getLogger(__name__)


async def import_case(client: CourtApiGateway, court: str, case_number: str) -> CaseInfo:
    """
    Fetch a case from CourtAPI, importing it from PACER first when CourtAPI does not know it.

    The import runs at most once; a second not-found after it propagates.
    """

    try:
        return await client.get_case(court, case_number)
    except CaseNotFoundError:
        logger.info(
            "Case not in CourtAPI, searching PACER",
            extra={"court": court, "case_number": case_number},
        )
    await client.search_pacer_cases(court, case_number)
    return await client.get_case(court, case_number)


async def ensure_header(
    fetch_header: Callable[[], Awaitable[CollectionHeader]],
    update: Callable[[], Awaitable[Any]],
) -> CollectionHeader:
    """Return a collection header, running the collection update once if it was never generated."""

    header = await fetch_header()
    if header.html is None:
        logger.info("Header not generated yet, updating from PACER")
        await update()
        header = await fetch_header()
    return header
