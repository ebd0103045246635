from __future__ import annotations

import json
from typing import Any

import httpx

# CourtAPI answers a lookup for a case it has never imported with this phrase.
NO_MATCHING_CASE = "No Matching Case"


class CourtApiError(Exception):
    """Non-success response from CourtAPI, carrying the status and decoded body."""

    def __init__(self, status_code: int, body: Any, *, url: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"CourtAPI request failed with status {status_code}: {error_message(body)}")

    def body_json(self) -> str:
        if isinstance(self.body, (dict, list)):
            return json.dumps(self.body, indent=2)
        return str(self.body)


class CaseNotFoundError(CourtApiError):
    """The case has not been imported into CourtAPI yet."""


def error_message(body: Any) -> str:
    if isinstance(body, dict):
        for key in ("error", "errorMessage", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        return json.dumps(body)
    return str(body)


def raise_for_response(response: httpx.Response) -> None:
    """Raise `CourtApiError` (or `CaseNotFoundError`) for non-2xx responses."""

    if response.is_success:
        return
    try:
        body: Any = response.json()
    except ValueError:
        body = response.text
    try:
        url: str | None = str(response.request.url)
    except RuntimeError:
        url = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, str) and NO_MATCHING_CASE in error:
        raise CaseNotFoundError(response.status_code, body, url=url)
    raise CourtApiError(response.status_code, body, url=url)
