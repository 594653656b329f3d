"""Tests for environment-based peer configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from jsonrpc_peer.config import PeerSettings, get_settings
from jsonrpc_peer.services.ids import UuidIdGenerator
from jsonrpc_peer.services.peer import JsonRpcPeer


class TestPeerSettings:
    """Tests for PeerSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test built-in defaults."""
        for name in ("JSONRPC_TIMEOUT_MS", "JSONRPC_ID_STRATEGY", "JSONRPC_ENABLE_METRICS"):
            monkeypatch.delenv(name, raising=False)

        settings = PeerSettings(_env_file=None)

        assert settings.timeout_ms == 60000
        assert settings.id_strategy == "sequential"
        assert settings.enable_metrics is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test JSONRPC_* variables are read."""
        monkeypatch.setenv("JSONRPC_TIMEOUT_MS", "250")
        monkeypatch.setenv("JSONRPC_ID_STRATEGY", "uuid")
        monkeypatch.setenv("JSONRPC_ENABLE_METRICS", "true")

        settings = get_settings()

        assert settings.timeout_ms == 250
        assert settings.id_strategy == "uuid"
        assert settings.enable_metrics is True

    def test_invalid_strategy(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unknown id strategies are rejected."""
        monkeypatch.setenv("JSONRPC_ID_STRATEGY", "random")

        with pytest.raises(ValidationError):
            PeerSettings(_env_file=None)


class TestPeerUsesSettings:
    """Tests for how the peer consumes settings."""

    def test_settings_provide_defaults(self) -> None:
        """Test the peer falls back to settings values."""
        settings = PeerSettings(_env_file=None, timeout_ms=1234, id_strategy="uuid", enable_metrics=True)

        peer = JsonRpcPeer(settings=settings)

        assert peer.timeout == 1234
        assert isinstance(peer.create_request("ping").id, str)
        assert peer.metrics is not None

    def test_arguments_override_settings(self) -> None:
        """Test constructor arguments win over settings."""
        settings = PeerSettings(_env_file=None, timeout_ms=1234, id_strategy="uuid")

        peer = JsonRpcPeer(settings=settings, timeout=0, id_strategy="sequential")

        assert peer.timeout == 0
        assert peer.create_request("ping").id == 1
        assert peer.metrics is None

    def test_environment_reaches_peer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a peer built without settings reads the environment."""
        monkeypatch.setenv("JSONRPC_ID_STRATEGY", "uuid")

        peer = JsonRpcPeer()

        assert isinstance(peer._id_generator, UuidIdGenerator)
