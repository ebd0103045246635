from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

_CLAIM_SEQ_PREFIX = re.compile(r"^[0-9]+-")


@dataclass(slots=True)
class CaseInfo:
    court: str
    case_number: str
    title: str | None
    case_uuid: str | None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, court: str, case_number: str, payload: Mapping[str, Any]) -> "CaseInfo":
        raw = payload.get("case") or {}
        return cls(
            court=court,
            case_number=case_number,
            title=raw.get("title"),
            case_uuid=raw.get("uuid"),
            metadata=raw,
        )


@dataclass(slots=True)
class Page:
    """One page of a paginated CourtAPI collection (`entries` envelope)."""

    total_items: int
    total_pages: int
    content: Sequence[Mapping[str, Any]]

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Page":
        entries = payload.get("entries") or {}
        return cls(
            total_items=int(entries.get("total_items") or 0),
            total_pages=int(entries.get("total_pages") or 0),
            content=list(entries.get("content") or []),
        )


@dataclass(slots=True)
class CollectionHeader:
    html: str | None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "CollectionHeader":
        raw = payload.get("header") or {}
        return cls(html=raw.get("html"), metadata=raw)


@dataclass(slots=True)
class StoredFile:
    filename: str | None
    download_url: str | None


@dataclass(slots=True)
class DocumentPart:
    """
    A purchasable file attached to a docket entry or claim.

    `stored` is None until the part has been bought from PACER; afterwards it carries the
    CourtAPI filename and download URL.
    """

    number: str
    description: str | None
    stored: StoredFile | None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def downloadable(self) -> bool:
        return (
            self.stored is not None
            and bool(self.stored.filename)
            and bool(self.stored.download_url)
        )

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "DocumentPart":
        # Part listings are flat; single-part responses wrap the part in "document".
        raw = raw.get("document", raw)
        filename = raw.get("filename")
        stored = None
        if filename is not None:
            stored = StoredFile(
                filename=raw.get("friendly_name") or filename,
                download_url=raw.get("download_url"),
            )
        return cls(
            number=str(raw.get("number")),
            description=raw.get("description"),
            stored=stored,
            metadata=raw,
        )


def parts_from_api(raw_documents: Sequence[Mapping[str, Any]] | None) -> list[DocumentPart]:
    return [DocumentPart.from_api(item) for item in raw_documents or []]


@dataclass(frozen=True, slots=True)
class DocketBinder:
    court: str
    case_number: str
    docket_seq: str


@dataclass(frozen=True, slots=True)
class ClaimBinder:
    court: str
    case_number: str
    claim_number: str
    claim_seq: str


Binder = DocketBinder | ClaimBinder


@dataclass(slots=True)
class DocketEntry:
    docket_seq: str
    docket_no: str | None
    date_filed: str | None
    docket_text: str | None
    documents: list[DocumentPart]
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "DocketEntry":
        binder = raw.get("binder") or {}
        return cls(
            docket_seq=str(raw["docket_seq"]),
            docket_no=_optional_str(raw.get("docket_no")),
            date_filed=raw.get("date_filed"),
            docket_text=raw.get("docket_text"),
            documents=parts_from_api(binder.get("documents")),
            metadata=raw,
        )


@dataclass(slots=True)
class ClaimHistoryItem:
    claim_seq: str
    # None when the history item carries no binder at all.
    documents: list[DocumentPart] | None


@dataclass(slots=True)
class ClaimEntry:
    claim_number: str
    creditor: str | None
    original_filed_date: str | None
    amount_claimed: float | None
    modified: datetime | None
    history: list[ClaimHistoryItem]
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "ClaimEntry":
        info = raw.get("info") or {}
        amounts = (raw.get("amounts") or {}).get("amount") or {}
        history = []
        for item in raw.get("history") or []:
            binder = item.get("binder")
            history.append(
                ClaimHistoryItem(
                    claim_seq=_CLAIM_SEQ_PREFIX.sub("", str(item["claim_seq"])),
                    documents=None if binder is None else parts_from_api(binder.get("documents")),
                )
            )
        claimed = amounts.get("claimed")
        return cls(
            claim_number=str(info["claim_no"]),
            creditor=raw.get("creditor"),
            original_filed_date=info.get("original_filed_date"),
            amount_claimed=float(claimed) if claimed is not None else None,
            modified=_parse_datetime(info.get("modified")),
            history=history,
            metadata=raw,
        )


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            return datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None
