from __future__ import annotations

import logging
from typing import Any, AsyncIterator

import httpx

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.errors import raise_for_response
from pacerfetch.types import (
    Binder,
    CaseInfo,
    ClaimBinder,
    CollectionHeader,
    DocketBinder,
    DocumentPart,
    Page,
    parts_from_api,
)

logger = logging.getLogger(__name__)


class HttpCourtApiClient(CourtApiGateway):
    """
    Async client for the CourtAPI REST service.

    Every method is exactly one HTTP request. Nothing is retried: page fetches surface their
    failure to the caller and purchases must never be replayed blindly.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        *,
        timeout: float = 60.0,
        user_agent: str = "pacerfetch/0.1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_secret:
            raise ValueError("A CourtAPI key and secret are required")

        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            auth=httpx.BasicAuth(api_key, api_secret),
            headers={"Accept": "application/json", "User-Agent": user_agent},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpCourtApiClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Courts and cases
    # ------------------------------------------------------------------

    async def list_courts(self, **filters: Any) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/courts/pacer", params=_drop_none(filters))
        return list(payload.get("courts") or [])

    async def get_court(self, court: str) -> dict[str, Any]:
        return await self._request("GET", f"/courts/pacer/{court}")

    async def get_case(self, court: str, case_number: str) -> CaseInfo:
        payload = await self._request("GET", _case_path(court, case_number))
        return CaseInfo.from_api(court, case_number, payload)

    async def search_pacer_cases(
        self, court: str, case_number: str, *, open_cases: bool | None = None
    ) -> dict[str, Any]:
        search = _drop_none({"caseNo": case_number, "openCases": open_cases})
        return await self._request("POST", f"/courts/pacer/{court}/case/search", json=search)

    # ------------------------------------------------------------------
    # Docket
    # ------------------------------------------------------------------

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
        params = _page_params(page, page_size, sort_order, search_keyword, include_documents)
        payload = await self._request("GET", f"{_case_path(court, case_number)}/dockets", params=params)
        return Page.from_api(payload)

    async def get_docket_entry(self, court: str, case_number: str, docket_seq: str) -> dict[str, Any]:
        return await self._request("GET", f"{_case_path(court, case_number)}/dockets/{docket_seq}")

    async def get_docket_header(self, court: str, case_number: str) -> CollectionHeader:
        payload = await self._request("GET", f"{_case_path(court, case_number)}/dockets/header")
        return CollectionHeader.from_api(payload)

    async def update_dockets(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        return await self._request(
            "POST", f"{_case_path(court, case_number)}/dockets/update", json=_drop_none(options)
        )

    # ------------------------------------------------------------------
    # Claims register
    # ------------------------------------------------------------------

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
        params = _page_params(page, page_size, sort_order, search_keyword, include_documents)
        payload = await self._request("GET", f"{_case_path(court, case_number)}/claims", params=params)
        return Page.from_api(payload)

    async def get_claim(self, court: str, case_number: str, claim_number: str) -> dict[str, Any]:
        return await self._request("GET", f"{_case_path(court, case_number)}/claims/{claim_number}")

    async def get_claims_header(self, court: str, case_number: str) -> CollectionHeader:
        payload = await self._request("GET", f"{_case_path(court, case_number)}/claims/header")
        return CollectionHeader.from_api(payload)

    async def update_claims(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        return await self._request(
            "POST", f"{_case_path(court, case_number)}/claims/update", json=_drop_none(options)
        )

    # ------------------------------------------------------------------
    # Document parts
    # ------------------------------------------------------------------

    async def list_parts(self, binder: Binder) -> list[DocumentPart]:
        payload = await self._request("GET", _binder_path(binder))
        return parts_from_api(payload.get("documents"))

    async def update_parts(self, binder: Binder) -> dict[str, Any]:
        return await self._request("POST", f"{_binder_path(binder)}/update")

    async def get_part(self, binder: Binder, part_number: str) -> DocumentPart:
        payload = await self._request("GET", f"{_binder_path(binder)}/{part_number}")
        return DocumentPart.from_api(payload)

    async def buy_part(self, binder: Binder, part_number: str) -> DocumentPart:
        payload = await self._request("POST", f"{_binder_path(binder)}/{part_number}/buy")
        return DocumentPart.from_api(payload)

    async def iter_download(self, url: str) -> AsyncIterator[bytes]:
        async with self._client.stream("GET", url) as response:
            if not response.is_success:
                await response.aread()
                raise_for_response(response)
            async for chunk in response.aiter_bytes():
                yield chunk

    # ------------------------------------------------------------------
    # PACER account
    # ------------------------------------------------------------------

    async def get_credentials(self) -> dict[str, Any]:
        return await self._request("GET", "/pacer/credentials")

    async def save_credentials(self, pacer_user: str, pacer_pass: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/pacer/credentials", json={"pacer_user": pacer_user, "pacer_pass": pacer_pass}
        )

    async def delete_credentials(self) -> dict[str, Any]:
        return await self._request("DELETE", "/pacer/credentials")

    async def search_filings(self, case_uuid: str) -> dict[str, Any]:
        return await self._request("GET", f"/search/{case_uuid}/filings")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._client.request(method, path, params=params, json=json)
        logger.debug("%s %s -> %s", method, path, response.status_code)
        raise_for_response(response)
        if not response.content:
            return {}
        return response.json()


def _case_path(court: str, case_number: str) -> str:
    return f"/cases/pacer/{court}/{case_number}"


def _binder_path(binder: Binder) -> str:
    base = _case_path(binder.court, binder.case_number)
    if isinstance(binder, DocketBinder):
        return f"{base}/dockets/{binder.docket_seq}/documents"
    if isinstance(binder, ClaimBinder):
        return f"{base}/claims/{binder.claim_number}/{binder.claim_seq}/documents"
    raise TypeError(f"Unsupported binder {binder!r}")


def _page_params(
    page: int,
    page_size: int,
    sort_order: str,
    search_keyword: str | None,
    include_documents: bool,
) -> dict[str, Any]:
    params: dict[str, Any] = {"page": page, "pageSize": page_size, "sortOrder": sort_order}
    if search_keyword:
        params["searchKeyword"] = search_keyword
    if include_documents:
        params["includeDocuments"] = "true"
    return params


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
