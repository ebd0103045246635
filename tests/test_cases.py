"""Tests for case import and header generation."""

from unittest.mock import AsyncMock

import pytest

from pacerfetch.errors import CaseNotFoundError, CourtApiError
from pacerfetch.types import CaseInfo, CollectionHeader
from pacerfetch.workflow import ensure_header, import_case


async def test_import_case_searches_pacer_once_then_refetches(mock_client):
    case = await import_case(mock_client, "txnb", "21-12345")

    assert case.title == "In re Example Holdings, LLC"
    assert [name for name, _ in mock_client.calls] == ["get_case", "search_pacer_cases", "get_case"]


async def test_import_case_skips_search_for_known_case(mock_client):
    await import_case(mock_client, "txnb", "22-00001")

    assert mock_client.call_count("get_case") == 1
    assert mock_client.call_count("search_pacer_cases") == 0


async def test_second_not_found_is_fatal():
    not_found = CaseNotFoundError(404, {"error": "No Matching Case"})
    gateway = AsyncMock()
    gateway.get_case.side_effect = [not_found, not_found]

    with pytest.raises(CaseNotFoundError):
        await import_case(gateway, "txnb", "99-00000")

    assert gateway.get_case.await_count == 2
    gateway.search_pacer_cases.assert_awaited_once_with("txnb", "99-00000")


async def test_other_errors_propagate_without_import():
    gateway = AsyncMock()
    gateway.get_case.side_effect = CourtApiError(500, {"error": "Internal error"})

    with pytest.raises(CourtApiError):
        await import_case(gateway, "txnb", "21-12345")

    gateway.search_pacer_cases.assert_not_awaited()


async def test_import_case_returns_refetched_case():
    gateway = AsyncMock()
    gateway.get_case.side_effect = [
        CaseNotFoundError(404, {"error": "No Matching Case"}),
        CaseInfo("txnb", "21-12345", "In re Example", "uuid-1"),
    ]

    case = await import_case(gateway, "txnb", "21-12345")

    assert case.case_uuid == "uuid-1"


async def test_ensure_header_updates_once_when_missing():
    fetch = AsyncMock(side_effect=[CollectionHeader(html=None), CollectionHeader(html="<p>hdr</p>")])
    update = AsyncMock()

    header = await ensure_header(fetch, update)

    assert header.html == "<p>hdr</p>"
    update.assert_awaited_once()
    assert fetch.await_count == 2


async def test_ensure_header_does_not_update_when_present():
    fetch = AsyncMock(return_value=CollectionHeader(html="<p>hdr</p>"))
    update = AsyncMock()

    await ensure_header(fetch, update)

    update.assert_not_awaited()
