"""Tests for the CourtAPI HTTP client, served by httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from pacerfetch.clients import HttpCourtApiClient
from pacerfetch.errors import CaseNotFoundError, CourtApiError, raise_for_response
from pacerfetch.types import ClaimBinder, DocketBinder

BASE_URL = "https://courtapi.test"


def _client(handler):
    return HttpCourtApiClient(BASE_URL, "key", "secret", transport=httpx.MockTransport(handler))


async def test_requests_use_basic_auth_and_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["ua"] = request.headers["User-Agent"]
        return httpx.Response(200, json={"case": {"title": "In re Example", "uuid": "u-1"}})

    async with _client(handler) as client:
        case = await client.get_case("txnb", "21-12345")

    assert case.title == "In re Example"
    assert case.case_uuid == "u-1"
    assert seen["auth"] == "Basic " + base64.b64encode(b"key:secret").decode()
    assert seen["ua"].startswith("pacerfetch/")


async def test_no_matching_case_raises_case_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "No Matching Case found for txnb 21-12345"})

    async with _client(handler) as client:
        with pytest.raises(CaseNotFoundError) as excinfo:
            await client.get_case("txnb", "21-12345")

    assert excinfo.value.status_code == 404


async def test_other_errors_raise_court_api_error_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid credentials"})

    async with _client(handler) as client:
        with pytest.raises(CourtApiError) as excinfo:
            await client.get_court("txnb")

    assert not isinstance(excinfo.value, CaseNotFoundError)
    assert excinfo.value.body == {"error": "Invalid credentials"}
    assert "Invalid credentials" in excinfo.value.body_json()


async def test_dockets_page_query_parameters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={"entries": {"total_items": 2, "total_pages": 1, "content": [{"docket_seq": "1"}, {"docket_seq": "2"}]}},
        )

    async with _client(handler) as client:
        page = await client.get_dockets_page(
            "txnb",
            "21-12345",
            page=1,
            page_size=500,
            sort_order="desc",
            search_keyword="Sprint Solutions",
            include_documents=True,
        )

    assert seen["path"] == "/cases/pacer/txnb/21-12345/dockets"
    assert seen["params"] == {
        "page": "1",
        "pageSize": "500",
        "sortOrder": "desc",
        "searchKeyword": "Sprint Solutions",
        "includeDocuments": "true",
    }
    assert page.total_items == 2
    assert page.total_pages == 1
    assert len(page.content) == 2


async def test_buy_part_posts_to_binder_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(
            200,
            json={
                "document": {
                    "number": 1,
                    "filename": "abc123.pdf",
                    "friendly_name": "txnb-21-12345-7-1.pdf",
                    "download_url": f"{BASE_URL}/files/abc123.pdf",
                }
            },
        )

    async with _client(handler) as client:
        part = await client.buy_part(ClaimBinder("txnb", "21-12345", "3", "1"), "1")

    assert seen == {"method": "POST", "path": "/cases/pacer/txnb/21-12345/claims/3/1/documents/1/buy"}
    assert part.downloadable
    assert part.stored.filename == "txnb-21-12345-7-1.pdf"


async def test_unpurchased_part_has_no_stored_file():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"document": {"number": 2, "filename": None, "download_url": None}}
        )

    async with _client(handler) as client:
        part = await client.get_part(DocketBinder("txnb", "21-12345", "7"), "2")

    assert part.stored is None
    assert not part.downloadable


async def test_update_dockets_sends_only_given_options():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "ok"})

    async with _client(handler) as client:
        await client.update_dockets("txnb", "21-12345", dateFrom="07/01/2007", docTo=None)

    assert seen["body"] == {"dateFrom": "07/01/2007"}


async def test_iter_download_streams_bytes():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"].startswith("Basic ")
        return httpx.Response(200, content=b"%PDF-1.4 example")

    async with _client(handler) as client:
        chunks = [chunk async for chunk in client.iter_download(f"{BASE_URL}/files/abc123.pdf")]

    assert b"".join(chunks) == b"%PDF-1.4 example"


async def test_iter_download_raises_on_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "Forbidden"})

    async with _client(handler) as client:
        with pytest.raises(CourtApiError):
            [chunk async for chunk in client.iter_download(f"{BASE_URL}/files/abc123.pdf")]


async def test_save_credentials_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "saved"})

    async with _client(handler) as client:
        await client.save_credentials("examplefirm", "hunter2")

    assert seen == {"method": "POST", "body": {"pacer_user": "examplefirm", "pacer_pass": "hunter2"}}


def test_client_requires_credentials():
    with pytest.raises(ValueError):
        HttpCourtApiClient(BASE_URL, "", "secret")


def test_raise_for_response_accepts_plain_text_errors():
    response = httpx.Response(502, text="Bad gateway")

    with pytest.raises(CourtApiError) as excinfo:
        raise_for_response(response)

    assert excinfo.value.body == "Bad gateway"
    assert excinfo.value.url is None
