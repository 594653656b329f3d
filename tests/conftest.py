"""Root-level pytest configuration for all tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

import pytest

from jsonrpc_peer.config import PeerSettings, get_settings
from jsonrpc_peer.services.peer import JsonRpcPeer

# Configure pytest plugins at top level
pytest_plugins = ('pytest_asyncio',)


class RecordingSender:
    """Sender collaborator that keeps every message it is asked to deliver."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)

    @property
    def decoded(self) -> list[Any]:
        return [json.loads(message) for message in self.messages]

    @property
    def last(self) -> Any:
        return json.loads(self.messages[-1])


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Make every test read the environment afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> PeerSettings:
    """Peer settings independent of the environment."""
    return PeerSettings(_env_file=None, timeout_ms=200, id_strategy="sequential")


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def peer(sender: RecordingSender, settings: PeerSettings) -> JsonRpcPeer:
    """Peer wired to a recording sender with a 200ms call timeout."""
    return JsonRpcPeer(sender=sender, settings=settings)
