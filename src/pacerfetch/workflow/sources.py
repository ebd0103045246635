from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Protocol

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.types import (
    Binder,
    ClaimBinder,
    ClaimEntry,
    CollectionHeader,
    DocketBinder,
    DocketEntry,
    DocumentPart,
    Page,
)


@dataclass(slots=True)
class PartGroup:
    """The parts of one binder as they appeared in the entry listing."""

    binder: Binder
    parts: list[DocumentPart]


class EntrySource(Protocol):
    """One kind of paginated case collection (docket or claims register)."""

    kind: str
    template: str

    async def update(self, court: str, case_number: str) -> Any: ...

    async def fetch_header(self, court: str, case_number: str) -> CollectionHeader: ...

    async def fetch_page(
        self,
        court: str,
        case_number: str,
        *,
        page: int,
        page_size: int,
        sort_order: str,
        keyword: str | None,
        include_documents: bool,
    ) -> Page: ...

    def part_groups(self, court: str, case_number: str, raw: Mapping[str, Any]) -> list[PartGroup]: ...

    def heading_row(self) -> dict[str, Any]: ...

    def row(self, raw: Mapping[str, Any]) -> dict[str, Any]: ...


class DocketSource:
    kind = "docket"
    template = "docket_entry.html.j2"

    def __init__(self, client: CourtApiGateway) -> None:
        self.client = client

    async def update(self, court: str, case_number: str) -> Any:
        return await self.client.update_dockets(court, case_number)

    async def fetch_header(self, court: str, case_number: str) -> CollectionHeader:
        return await self.client.get_docket_header(court, case_number)

    async def fetch_page(
        self,
        court: str,
        case_number: str,
        *,
        page: int,
        page_size: int,
        sort_order: str,
        keyword: str | None,
        include_documents: bool,
    ) -> Page:
        return await self.client.get_dockets_page(
            court,
            case_number,
            page=page,
            page_size=page_size,
            sort_order=sort_order,
            search_keyword=keyword,
            include_documents=include_documents,
        )

    def part_groups(self, court: str, case_number: str, raw: Mapping[str, Any]) -> list[PartGroup]:
        entry = DocketEntry.from_api(raw)
        return [PartGroup(DocketBinder(court, case_number, entry.docket_seq), entry.documents)]

    def heading_row(self) -> dict[str, Any]:
        return {
            "date_filed": "Date Filed",
            "docket_no": "#",
            "docket_text": "Docket Text",
            "rowclass": "font-weight-bold",
        }

    def row(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        # Rows only show listing fields, so entries without a docket_seq still render.
        docket_no = raw.get("docket_no")
        return {
            "date_filed": raw.get("date_filed"),
            "docket_no": None if docket_no is None else str(docket_no),
            "docket_text": raw.get("docket_text"),
            "rowclass": "",
        }


class ClaimsSource:
    kind = "claims"
    template = "claims_entry.html.j2"

    def __init__(self, client: CourtApiGateway) -> None:
        self.client = client

    async def update(self, court: str, case_number: str) -> Any:
        return await self.client.update_claims(court, case_number)

    async def fetch_header(self, court: str, case_number: str) -> CollectionHeader:
        return await self.client.get_claims_header(court, case_number)

    async def fetch_page(
        self,
        court: str,
        case_number: str,
        *,
        page: int,
        page_size: int,
        sort_order: str,
        keyword: str | None,
        include_documents: bool,
    ) -> Page:
        return await self.client.get_claims_page(
            court,
            case_number,
            page=page,
            page_size=page_size,
            sort_order=sort_order,
            search_keyword=keyword,
            include_documents=include_documents,
        )

    def part_groups(self, court: str, case_number: str, raw: Mapping[str, Any]) -> list[PartGroup]:
        claim = ClaimEntry.from_api(raw)
        return [
            PartGroup(ClaimBinder(court, case_number, claim.claim_number, item.claim_seq), item.documents)
            for item in claim.history
            # history items without a binder have nothing attached
            if item.documents is not None
        ]

    def heading_row(self) -> dict[str, Any]:
        return {
            "claim_number": "#",
            "date_filed": "Original File Date",
            "creditor": "Creditor",
            "amount": "Total Amount Claimed",
            "last_updated": "Last Updated",
            "rowclass": "font-weight-bold",
        }

    def row(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        claim = ClaimEntry.from_api(raw)
        return {
            "claim_number": claim.claim_number,
            "date_filed": claim.original_filed_date,
            "creditor": claim.creditor,
            "amount": format_amount(claim.amount_claimed),
            "last_updated": claim.modified.strftime("%m/%d/%Y") if claim.modified else "",
            "rowclass": "",
        }


def format_amount(value: float | None) -> str:
    if value is None:
        return ""
    return f"${value:,.2f}"


def page_fetcher(
    source: EntrySource,
    court: str,
    case_number: str,
    *,
    sort_order: str = "desc",
    keyword: str | None = None,
    include_documents: bool = False,
) -> Callable[[int, int], Awaitable[Page]]:
    """Bind a source's page fetch to one case and filter, in the shape `PageWalker` expects."""

    async def fetch(page: int, page_size: int) -> Page:
        return await source.fetch_page(
            court,
            case_number,
            page=page,
            page_size=page_size,
            sort_order=sort_order,
            keyword=keyword,
            include_documents=include_documents,
        )

    return fetch
