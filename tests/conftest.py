"""Shared fixtures for pacerfetch tests."""

from pathlib import Path

import pytest

from pacerfetch.clients import MockCourtApiClient

FIXTURE_PATH = Path(__file__).parent / "fixtures" / "mock_case.json"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep a developer's .env and COURTAPI_* variables out of the tests."""
    for name in ("COURTAPI_API_KEY", "COURTAPI_API_SECRET", "COURTAPI_FIXTURE", "COURTAPI_DOWNLOAD_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def fixture_path() -> Path:
    return FIXTURE_PATH


@pytest.fixture()
def mock_client() -> MockCourtApiClient:
    return MockCourtApiClient(FIXTURE_PATH)
