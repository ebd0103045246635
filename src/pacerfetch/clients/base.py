from __future__ import annotations

from typing import Any, AsyncIterator, Protocol

from pacerfetch.types import Binder, CaseInfo, CollectionHeader, DocumentPart, Page


class CourtApiGateway(Protocol):
    """Interface for the CourtAPI operations the case, docket and claims workflows rely on."""

    async def get_case(self, court: str, case_number: str) -> CaseInfo:
        """Return the case menu; raises `CaseNotFoundError` when CourtAPI has not imported it."""

    async def search_pacer_cases(
        self, court: str, case_number: str, *, open_cases: bool | None = None
    ) -> dict[str, Any]:
        """Look the case up in PACER, importing it into CourtAPI."""

    async def get_dockets_page(
        self,
        court: str,
        case_number: str,
        *,
        page: int,
        page_size: int,
        sort_order: str = "desc",
        search_keyword: str | None = None,
        include_documents: bool = False,
    ) -> Page:
        """Return one page of docket entries."""

    async def get_docket_header(self, court: str, case_number: str) -> CollectionHeader:
        """Return the docket sheet header."""

    async def update_dockets(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        """Refresh the docket from PACER."""

    async def get_claims_page(
        self,
        court: str,
        case_number: str,
        *,
        page: int,
        page_size: int,
        sort_order: str = "desc",
        search_keyword: str | None = None,
        include_documents: bool = False,
    ) -> Page:
        """Return one page of claims register entries."""

    async def get_claims_header(self, court: str, case_number: str) -> CollectionHeader:
        """Return the claims register header."""

    async def update_claims(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        """Refresh the claims register from PACER."""

    async def list_parts(self, binder: Binder) -> list[DocumentPart]:
        """Return the document parts attached to a docket entry or claim."""

    async def update_parts(self, binder: Binder) -> dict[str, Any]:
        """Refresh the part listing of a docket entry or claim from PACER."""

    async def get_part(self, binder: Binder, part_number: str) -> DocumentPart:
        """Return a part as currently stored in CourtAPI."""

    async def buy_part(self, binder: Binder, part_number: str) -> DocumentPart:
        """Purchase a part from PACER. This charges the PACER account."""

    def iter_download(self, url: str) -> AsyncIterator[bytes]:
        """Stream the bytes of a stored document."""
