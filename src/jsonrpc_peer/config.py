"""
JSON-RPC Peer Configuration

Environment-based defaults for ``JsonRpcPeer``. Arguments passed to the peer
constructor take precedence over these settings.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from jsonrpc_peer.services.ids import IdStrategy


class PeerSettings(BaseSettings):
    """Peer settings loaded from ``JSONRPC_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JSONRPC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_ms: int = Field(
        default=60000,
        description="Outbound call timeout in milliseconds (0 or less disables it)",
    )
    id_strategy: IdStrategy = Field(
        default="sequential",
        description="Request id generation: 'sequential' integers or 'uuid' strings",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Collect Prometheus metrics for each peer",
    )


@lru_cache
def get_settings() -> PeerSettings:
    """Return the process-wide settings instance."""
    return PeerSettings()
