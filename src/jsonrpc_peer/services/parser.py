"""
JSON-RPC 2.0 Message Parser

Only syntactic and top-level structural checks happen here. Batch elements
are not inspected: each one is validated when it is dispatched, so a single
malformed element does not fail the whole batch.
"""

from __future__ import annotations

import json
from typing import Any, Union

from jsonrpc_peer.exceptions import InvalidRequestError, ParseError

ParsedMessage = Union[dict[str, Any], list[Any]]


def parse(message: str | bytes | bytearray) -> ParsedMessage:
    """
    Decode a raw JSON-RPC message.

    Args:
        message: JSON text (bytes are decoded as UTF-8)

    Returns:
        The decoded object, or list for a batch

    Raises:
        ParseError: The text is not valid JSON
        InvalidRequestError: The value is neither an object nor an array,
            or it is an empty array
    """
    try:
        if isinstance(message, (bytes, bytearray)):
            message = message.decode("utf-8")
        decoded = json.loads(message)
    except (TypeError, ValueError, RecursionError) as e:
        raise ParseError(data={"details": str(e)}) from e

    if not isinstance(decoded, (dict, list)):
        raise InvalidRequestError()
    if isinstance(decoded, list) and not decoded:
        raise InvalidRequestError()
    return decoded


def is_response_shaped(value: Any) -> bool:
    """
    Classify an inbound element.

    An element is a response if and only if it is an object with a
    ``result`` key or an ``error`` key (a ``null`` value still counts).
    Everything else, however malformed, is handled as a request.
    """
    return isinstance(value, dict) and ("result" in value or "error" in value)
