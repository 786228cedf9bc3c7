"""Tests for lumina.auth.factory: one-time backend selection."""

from unittest.mock import AsyncMock

import pytest

from lumina.auth.base import CredentialBackend
from lumina.auth.cloud import CredentialAuthority
from lumina.auth.factory import create_backend
from lumina.auth.gate import AuthGate, AuthMode
from lumina.auth.local import LocalCredentialStore
from lumina.config import LuminaConfig


def _config(tmp_path, api_url=""):
    return LuminaConfig(
        cloud={"api_url": api_url, "api_key": "k"},
        storage={"path": str(tmp_path / "storage.json")},
    )


class TestCreateBackend:
    def test_empty_url_selects_local(self, tmp_path):
        backend = create_backend(_config(tmp_path))
        assert isinstance(backend, LocalCredentialStore)
        assert isinstance(backend, CredentialBackend)
        assert backend.store.path == tmp_path / "storage.json"

    def test_whitespace_url_selects_local(self, tmp_path):
        assert isinstance(create_backend(_config(tmp_path, "   ")), LocalCredentialStore)

    def test_url_selects_cloud(self, tmp_path):
        backend = create_backend(_config(tmp_path, "https://w.example.dev"))
        assert isinstance(backend, CredentialAuthority)
        assert isinstance(backend, CredentialBackend)
        assert backend.api_url == "https://w.example.dev"
        assert backend.api_key == "k"


class TestGateQueriesOnlySelectedBackend:
    @pytest.mark.asyncio
    async def test_local_mode_never_touches_remote(self, tmp_path, monkeypatch):
        remote_exists = AsyncMock(return_value=True)
        monkeypatch.setattr(CredentialAuthority, "exists", remote_exists)

        gate = AuthGate.from_config(_config(tmp_path), on_success=lambda: None)
        assert await gate.open() is AuthMode.SETUP_REQUIRED
        assert gate.is_cloud is False
        remote_exists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cloud_mode_never_touches_local(self, tmp_path, monkeypatch):
        local_exists = AsyncMock(return_value=True)
        remote_exists = AsyncMock(return_value=False)
        monkeypatch.setattr(LocalCredentialStore, "exists", local_exists)
        monkeypatch.setattr(CredentialAuthority, "exists", remote_exists)

        gate = AuthGate.from_config(_config(tmp_path, "https://w.example.dev"), on_success=lambda: None)
        assert await gate.open() is AuthMode.SETUP_REQUIRED
        assert gate.is_cloud is True
        remote_exists.assert_awaited_once()
        local_exists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_local_credential_invisible_in_cloud_mode(self, tmp_path, monkeypatch):
        local = create_backend(_config(tmp_path))
        await local.create("abcd")

        monkeypatch.setattr(CredentialAuthority, "exists", AsyncMock(return_value=False))
        gate = AuthGate.from_config(_config(tmp_path, "https://w.example.dev"), on_success=lambda: None)
        assert await gate.open() is AuthMode.SETUP_REQUIRED

    def test_gate_takes_settings_from_config(self, tmp_path):
        config = LuminaConfig(gate={"min_password_length": 6, "shake_duration": 0.5})
        gate = AuthGate.from_config(config, on_success=lambda: None, backend=create_backend(_config(tmp_path)))
        assert gate.min_password_length == 6
        assert gate.shake_duration == 0.5
