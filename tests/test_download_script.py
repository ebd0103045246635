"""Tests for scripts/download_document_part.py."""

import argparse
import importlib.util
import sys
from pathlib import Path

import httpx
import pytest

from pacerfetch.config import Settings

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "download_document_part.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("download_document_part", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def patched(script, mock_client, monkeypatch):
    monkeypatch.setattr(script, "HttpCourtApiClient", lambda *args, **kwargs: mock_client)
    return script


def _args(dest, part_number="1", buy=False):
    return argparse.Namespace(
        court="txnb",
        case_number="21-99999",
        docket_seq="3",
        part_number=part_number,
        buy=buy,
        dest=dest,
        base_url=None,
    )


async def test_unpurchased_part_requires_buy_flag(patched, mock_client, tmp_path):
    code = await patched.download(_args(tmp_path), Settings())

    assert code == 1
    assert mock_client.call_count("buy_part") == 0
    assert list(tmp_path.iterdir()) == []


async def test_buy_flag_purchases_and_saves(patched, mock_client, tmp_path):
    code = await patched.download(_args(tmp_path, buy=True), Settings())

    assert code == 0
    assert mock_client.call_count("buy_part") == 1
    assert (tmp_path / "docket-3-1.pdf").read_text() == "third"


def test_main_requires_api_credentials(script, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["download_document_part.py", "txnb", "21-99999", "3", "1"])

    assert script.main() == 2
    assert "COURTAPI_API_KEY" in capsys.readouterr().err


async def test_stored_part_is_read_once(patched, mock_client, tmp_path):
    args = _args(tmp_path)
    args.docket_seq = "1"

    code = await patched.download(args, Settings())

    assert code == 0
    assert mock_client.call_count("get_part") == 1
    assert mock_client.call_count("buy_part") == 0
    assert (tmp_path / "docket-1-1.pdf").read_text() == "first"


def test_main_reports_stream_failure(patched, mock_client, monkeypatch, tmp_path, caplog):
    async def broken_download(url):
        yield b"%PDF-1.4 partial"
        raise httpx.ReadError("connection reset")

    mock_client.iter_download = broken_download
    monkeypatch.setenv("COURTAPI_API_KEY", "key")
    monkeypatch.setenv("COURTAPI_API_SECRET", "secret")
    dest = tmp_path / "out"
    monkeypatch.setattr(
        sys, "argv", ["download_document_part.py", "txnb", "21-99999", "1", "1", "--dest", str(dest)]
    )

    assert patched.main() == 1
    assert "Document part download failed" in caplog.text
    assert list(dest.iterdir()) == []
