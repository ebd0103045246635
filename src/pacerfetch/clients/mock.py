from __future__ import annotations

import copy
import json
import math
from pathlib import Path
from typing import Any, AsyncIterator

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.errors import NO_MATCHING_CASE, CaseNotFoundError, CourtApiError
from pacerfetch.types import (
    Binder,
    CaseInfo,
    ClaimBinder,
    CollectionHeader,
    DocketBinder,
    DocumentPart,
    Page,
)


class MockCourtApiClient(CourtApiGateway):
    """
    Mock gateway backed by a static JSON fixture.

    It keeps the server-side state a real run changes (case imported, headers generated, parts
    listed and purchased) for the lifetime of the instance, applies keyword search and
    pagination the way CourtAPI does, and records every call in `calls`.
    """

    def __init__(self, fixture_path: Path):
        with fixture_path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)

        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._courts: list[dict[str, Any]] = payload.get("courts", [])
        self._credentials: dict[str, Any] | None = payload.get("credentials")
        self._cases: dict[tuple[str, str], dict[str, Any]] = {}
        self._files: dict[str, bytes] = {}

        for case_payload in payload.get("cases", []):
            state = copy.deepcopy(case_payload)
            state.setdefault("imported", True)
            state.setdefault("dockets_updated", False)
            state.setdefault("claims_updated", False)
            self._cases[(state["court"], state["case_number"])] = state

    def call_count(self, name: str) -> int:
        return sum(1 for call_name, _ in self.calls if call_name == name)

    async def __aenter__(self) -> "MockCourtApiClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        return None

    # ------------------------------------------------------------------
    # Courts and cases
    # ------------------------------------------------------------------

    async def list_courts(self, **filters: Any) -> list[dict[str, Any]]:
        self._record("list_courts", tuple(sorted(filters.items())))
        court_type = filters.get("type")
        return [court for court in self._courts if not court_type or court.get("type") == court_type]

    async def get_court(self, court: str) -> dict[str, Any]:
        self._record("get_court", court)
        for item in self._courts:
            if item.get("code") == court:
                return item
        raise CourtApiError(404, {"error": f"Unknown court {court}"})

    async def get_case(self, court: str, case_number: str) -> CaseInfo:
        self._record("get_case", court, case_number)
        state = self._cases.get((court, case_number))
        if state is None or not state["imported"]:
            raise CaseNotFoundError(404, {"error": f"{NO_MATCHING_CASE} for {court} {case_number}"})
        return CaseInfo.from_api(court, case_number, {"case": state.get("case", {})})

    async def search_pacer_cases(
        self, court: str, case_number: str, *, open_cases: bool | None = None
    ) -> dict[str, Any]:
        self._record("search_pacer_cases", court, case_number)
        state = self._cases.get((court, case_number))
        if state is None:
            return {"cases": []}
        state["imported"] = True
        return {"cases": [{"case_no": case_number, **state.get("case", {})}]}

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
        self._record("get_dockets_page", court, case_number, page, search_keyword)
        state = self._require_case(court, case_number)
        entries = [
            entry
            for entry in state.get("dockets", [])
            if _matches(search_keyword, entry.get("docket_text"))
        ]
        return _paginate(
            [self._docket_payload(court, case_number, entry, include_documents) for entry in entries],
            page,
            page_size,
        )

    async def get_docket_entry(self, court: str, case_number: str, docket_seq: str) -> dict[str, Any]:
        self._record("get_docket_entry", court, case_number, docket_seq)
        entry = self._find_docket(court, case_number, docket_seq)
        return {"entry": self._docket_payload(court, case_number, entry, True)}

    async def get_docket_header(self, court: str, case_number: str) -> CollectionHeader:
        self._record("get_docket_header", court, case_number)
        state = self._require_case(court, case_number)
        html = state.get("docket_header") if state["dockets_updated"] else None
        return CollectionHeader.from_api({"header": {"html": html}})

    async def update_dockets(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        self._record("update_dockets", court, case_number)
        self._require_case(court, case_number)["dockets_updated"] = True
        return {"status": "updated"}

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
        self._record("get_claims_page", court, case_number, page, search_keyword)
        state = self._require_case(court, case_number)
        claims = [
            claim for claim in state.get("claims", []) if _matches(search_keyword, claim.get("creditor"))
        ]
        return _paginate(
            [self._claim_payload(court, case_number, claim, include_documents) for claim in claims],
            page,
            page_size,
        )

    async def get_claim(self, court: str, case_number: str, claim_number: str) -> dict[str, Any]:
        self._record("get_claim", court, case_number, claim_number)
        claim = self._find_claim(court, case_number, claim_number)
        return {"claim": self._claim_payload(court, case_number, claim, True)}

    async def get_claims_header(self, court: str, case_number: str) -> CollectionHeader:
        self._record("get_claims_header", court, case_number)
        state = self._require_case(court, case_number)
        html = state.get("claims_header") if state["claims_updated"] else None
        return CollectionHeader.from_api({"header": {"html": html}})

    async def update_claims(self, court: str, case_number: str, **options: Any) -> dict[str, Any]:
        self._record("update_claims", court, case_number)
        self._require_case(court, case_number)["claims_updated"] = True
        return {"status": "updated"}

    # ------------------------------------------------------------------
    # Document parts
    # ------------------------------------------------------------------

    async def list_parts(self, binder: Binder) -> list[DocumentPart]:
        self._record("list_parts", binder)
        return [
            DocumentPart.from_api(self._part_payload(binder, part))
            for part in self._binder_parts(binder)
            if part.get("listed", True)
        ]

    async def update_parts(self, binder: Binder) -> dict[str, Any]:
        self._record("update_parts", binder)
        for part in self._binder_parts(binder):
            part["listed"] = True
        return {"status": "updated"}

    async def get_part(self, binder: Binder, part_number: str) -> DocumentPart:
        self._record("get_part", binder, part_number)
        part = self._find_part(binder, part_number)
        return DocumentPart.from_api({"document": self._part_payload(binder, part)})

    async def buy_part(self, binder: Binder, part_number: str) -> DocumentPart:
        self._record("buy_part", binder, part_number)
        part = self._find_part(binder, part_number)
        if part.get("fail_purchase"):
            raise CourtApiError(402, {"error": "PACER purchase failed"})
        part["purchased"] = True
        return DocumentPart.from_api({"document": self._part_payload(binder, part)})

    async def iter_download(self, url: str) -> AsyncIterator[bytes]:
        self._record("iter_download", url)
        if url not in self._files:
            raise CourtApiError(404, {"error": f"No stored file at {url}"})
        yield self._files[url]

    # ------------------------------------------------------------------
    # PACER account
    # ------------------------------------------------------------------

    async def get_credentials(self) -> dict[str, Any]:
        self._record("get_credentials")
        if self._credentials is None:
            raise CourtApiError(404, {"error": "No PACER credentials stored"})
        return {"app_id": "mock-app", "pacer_user": self._credentials["pacer_user"]}

    async def save_credentials(self, pacer_user: str, pacer_pass: str) -> dict[str, Any]:
        self._record("save_credentials", pacer_user)
        self._credentials = {"pacer_user": pacer_user}
        return {"app_id": "mock-app", "pacer_user": pacer_user, "status": "saved"}

    async def delete_credentials(self) -> dict[str, Any]:
        self._record("delete_credentials")
        user = (self._credentials or {}).get("pacer_user")
        self._credentials = None
        return {"app_id": "mock-app", "pacer_user": user, "status": "deleted"}

    async def search_filings(self, case_uuid: str) -> dict[str, Any]:
        self._record("search_filings", case_uuid)
        for state in self._cases.values():
            if state.get("case", {}).get("uuid") == case_uuid:
                return {"filings": [entry.get("docket_text") for entry in state.get("dockets", [])]}
        return {"filings": []}

    # ------------------------------------------------------------------
    # Fixture helpers
    # ------------------------------------------------------------------

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def _require_case(self, court: str, case_number: str) -> dict[str, Any]:
        state = self._cases.get((court, case_number))
        if state is None or not state["imported"]:
            raise CaseNotFoundError(404, {"error": f"{NO_MATCHING_CASE} for {court} {case_number}"})
        return state

    def _find_docket(self, court: str, case_number: str, docket_seq: str) -> dict[str, Any]:
        for entry in self._require_case(court, case_number).get("dockets", []):
            if str(entry.get("docket_seq")) == str(docket_seq):
                return entry
        raise CourtApiError(404, {"error": f"No docket entry {docket_seq}"})

    def _find_claim(self, court: str, case_number: str, claim_number: str) -> dict[str, Any]:
        for claim in self._require_case(court, case_number).get("claims", []):
            if str(claim["info"]["claim_no"]) == str(claim_number):
                return claim
        raise CourtApiError(404, {"error": f"No claim {claim_number}"})

    def _binder_parts(self, binder: Binder) -> list[dict[str, Any]]:
        if isinstance(binder, DocketBinder):
            entry = self._find_docket(binder.court, binder.case_number, binder.docket_seq)
            return entry.setdefault("documents", [])
        if isinstance(binder, ClaimBinder):
            claim = self._find_claim(binder.court, binder.case_number, binder.claim_number)
            for item in claim.get("history", []):
                if str(item["claim_seq"]).split("-")[-1] == binder.claim_seq:
                    return item.setdefault("documents", [])
            raise CourtApiError(404, {"error": f"No claim sequence {binder.claim_seq}"})
        raise TypeError(f"Unsupported binder {binder!r}")

    def _find_part(self, binder: Binder, part_number: str) -> dict[str, Any]:
        for part in self._binder_parts(binder):
            if str(part["number"]) == str(part_number):
                return part
        raise CourtApiError(404, {"error": f"No document part {part_number}"})

    def _part_payload(self, binder: Binder, part: dict[str, Any]) -> dict[str, Any]:
        payload = {"number": part["number"], "description": part.get("description")}
        if not part.get("purchased"):
            payload.update(filename=None, friendly_name=None, download_url=None)
            return payload
        url = f"mock://{binder.court}/{binder.case_number}/{_binder_key(binder)}/{part['number']}"
        self._files[url] = part.get("content", "").encode("utf-8")
        payload.update(
            filename=part.get("filename") or f"{_binder_key(binder)}-{part['number']}.pdf",
            friendly_name=part.get("friendly_name"),
            download_url=None if part.get("missing_url") else url,
        )
        return payload

    def _docket_payload(
        self, court: str, case_number: str, entry: dict[str, Any], include_documents: bool
    ) -> dict[str, Any]:
        payload = {key: value for key, value in entry.items() if key != "documents"}
        if include_documents and "docket_seq" in entry:
            binder = DocketBinder(court, case_number, str(entry["docket_seq"]))
            payload["binder"] = {
                "documents": [
                    self._part_payload(binder, part)
                    for part in entry.get("documents", [])
                    if part.get("listed", True)
                ]
            }
        return payload

    def _claim_payload(
        self, court: str, case_number: str, claim: dict[str, Any], include_documents: bool
    ) -> dict[str, Any]:
        payload = {key: value for key, value in claim.items() if key != "history"}
        history = []
        for item in claim.get("history", []):
            history_payload = {"claim_seq": item["claim_seq"]}
            if include_documents and "documents" in item:
                binder = ClaimBinder(
                    court, case_number, str(claim["info"]["claim_no"]), str(item["claim_seq"]).split("-")[-1]
                )
                history_payload["binder"] = {
                    "documents": [
                        self._part_payload(binder, part)
                        for part in item["documents"]
                        if part.get("listed", True)
                    ]
                }
            history.append(history_payload)
        payload["history"] = history
        return payload


def _binder_key(binder: Binder) -> str:
    if isinstance(binder, DocketBinder):
        return f"docket-{binder.docket_seq}"
    return f"claim-{binder.claim_number}-{binder.claim_seq}"


def _matches(keyword: str | None, text: str | None) -> bool:
    if not keyword:
        return True
    return keyword.lower() in (text or "").lower()


def _paginate(items: list[dict[str, Any]], page: int, page_size: int) -> Page:
    total_pages = math.ceil(len(items) / page_size) if items else 0
    start = (page - 1) * page_size
    return Page(
        total_items=len(items),
        total_pages=total_pages,
        content=items[start : start + page_size],
    )
