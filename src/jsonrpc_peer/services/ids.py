"""
Request ID Generation

Each ``JsonRpcPeer`` owns its own generator. The sequential counter only
guarantees uniqueness within one peer's lifetime; peers that share a
correlation space should use the ``uuid`` strategy instead.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal
from uuid import uuid4

from jsonrpc_peer.models.jsonrpc import MAX_INT32, RequestId

IdStrategy = Literal["sequential", "uuid"]

IdGenerator = Callable[[], RequestId]


class SequentialIdGenerator:
    """
    Monotonic integer ids: 1, 2, 3, ...

    After reaching ``MAX_INT32`` (2147483647) the counter wraps back to 1 so
    that peers storing ids as signed 32-bit integers never overflow.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = start

    @property
    def last(self) -> int:
        """The most recently issued id (0 if none yet)."""
        return self._counter

    def __call__(self) -> int:
        if self._counter >= MAX_INT32:
            self._counter = 0
        self._counter += 1
        return self._counter


class UuidIdGenerator:
    """Random UUID4 string ids, unique across peers."""

    def __call__(self) -> str:
        return str(uuid4())


def make_id_generator(strategy: IdStrategy) -> IdGenerator:
    """Create a generator for the named strategy."""
    if strategy == "sequential":
        return SequentialIdGenerator()
    if strategy == "uuid":
        return UuidIdGenerator()
    raise ValueError(f"Unknown id strategy: {strategy}")
