"""
Method Registry

A ready-made method handler for ``JsonRpcPeer``: methods are registered by
name and the registry itself is passed as the peer's ``method_handler``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import structlog

from jsonrpc_peer.exceptions import InvalidParamsError, MethodNotFoundError
from jsonrpc_peer.models.jsonrpc import RequestId

logger = structlog.get_logger()

MethodFunc = Callable[..., Any]


class MethodRegistry:
    """
    Name-to-callable table usable as a peer method handler.

    List params are passed positionally, object params as keyword
    arguments and absent params as no arguments. Callables may be plain
    functions or coroutine functions, and may return ``NO_RESPONSE``.

    Example:
        >>> registry = MethodRegistry()
        >>> @registry.method("subtract")
        ... def subtract(minuend: int, subtrahend: int) -> int:
        ...     return minuend - subtrahend
        >>> peer = JsonRpcPeer(sender, method_handler=registry)
    """

    def __init__(self) -> None:
        self.methods: dict[str, MethodFunc] = {}

    def register(self, name: str, func: MethodFunc) -> None:
        """
        Add ``func`` to the table under ``name``.

        A name that is already taken is rebound to the new callable.

        Args:
            name: Method name as it appears in inbound requests (e.g. 'subtract')
            func: Sync or async callable; its signature decides which params fit
        """
        replaced = self.methods.get(name)
        self.methods[name] = func
        if replaced is not None:
            logger.warning(
                "Replaced registry method",
                method=name,
                previous=getattr(replaced, "__qualname__", repr(replaced)),
            )
        else:
            logger.debug("Added registry method", method=name)

    def unregister(self, name: str) -> None:
        """Remove ``name`` from the table; unknown names are ignored."""
        if self.methods.pop(name, None) is not None:
            logger.debug("Removed registry method", method=name)

    def method(self, name: str | None = None) -> Callable[[MethodFunc], MethodFunc]:
        """
        Decorator registering a function under ``name`` (default: its own name).

        Usage:
            @registry.method("ping")
            async def ping() -> str:
                return "pong"
        """
        def decorator(func: MethodFunc) -> MethodFunc:
            self.register(name or func.__name__, func)
            return func
        return decorator

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def list_methods(self) -> list[str]:
        return sorted(self.methods)

    async def __call__(self, method: str, params: Any, id: RequestId | None) -> Any:
        func = self.methods.get(method)
        if func is None:
            raise MethodNotFoundError(data={"method": method})

        if params is None:
            args: tuple[Any, ...] = ()
            kwargs: dict[str, Any] = {}
        elif isinstance(params, list):
            args, kwargs = tuple(params), {}
        elif isinstance(params, dict):
            args, kwargs = (), params
        else:
            raise InvalidParamsError(data={"details": "params must be an array or an object"})

        try:
            inspect.signature(func).bind(*args, **kwargs)
        except TypeError as e:
            raise InvalidParamsError(data={"details": str(e)}) from e
        except ValueError:
            # No introspectable signature (some builtins); let the call decide
            pass

        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
