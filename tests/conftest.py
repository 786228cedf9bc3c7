"""Shared test fixtures for the Lumina test suite."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from lumina.auth.cloud import CredentialAuthority
from lumina.auth.local import LocalCredentialStore
from lumina.storage import KeyValueStore

WORKER_URL = "https://lumina-upload.example.workers.dev"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep real LUMINA_ settings and ~/.lumina/config.toml out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("LUMINA_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("lumina.config.CONFIG_PATH", tmp_path / "no-such-config.toml")


@pytest.fixture
def tmp_toml(tmp_path):
    """Create a temporary TOML config file and return its Path."""

    def _write(content: str):
        p = tmp_path / "config.toml"
        p.write_text(content)
        return p

    return _write


@pytest.fixture
def kv_store(tmp_path):
    return KeyValueStore(tmp_path / "storage.json")


@pytest.fixture
def local_backend(kv_store):
    return LocalCredentialStore(kv_store)


def _http_response(status: int = 200, json=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.is_success = 200 <= status < 300
    if isinstance(json, Exception):
        resp.json.side_effect = json
    else:
        resp.json.return_value = json
    return resp


@pytest.fixture
def http_response():
    """Factory for stand-ins of ``httpx.Response``: ``http_response(status, json)``."""
    return _http_response


@pytest.fixture
def mock_http():
    """AsyncMock standing in for the shared ``httpx.AsyncClient``."""
    return AsyncMock()


@pytest.fixture
def authority(mock_http):
    return CredentialAuthority(WORKER_URL, "test-secret", client=mock_http)
