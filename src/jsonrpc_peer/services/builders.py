"""
JSON-RPC 2.0 Message Builders

Pure functions that build strictly-formatted requests, notifications and
responses, plus the JSON encoder used for everything the peer sends.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from jsonrpc_peer.exceptions import JsonRpcError
from jsonrpc_peer.models.jsonrpc import JsonRpcRequest, JsonRpcResponse, RequestId
from jsonrpc_peer.services.ids import IdGenerator


def normalize_id(value: Any) -> RequestId | None:
    """
    Normalize a request id for the wire.

    None stays None, numbers stay numbers (floats without a fractional part
    become ints), strings are unchanged. Everything else is stringified,
    including non-finite floats; booleans become ``"true"`` / ``"false"``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        return value
    return str(value)


def create_request(
    method: str,
    params: Any = None,
    id: RequestId | None = None,
    *,
    id_generator: IdGenerator | None = None,
) -> JsonRpcRequest:
    """
    Create a JSON-RPC request.

    Args:
        method: Method name (not validated)
        params: Method parameters, omitted from the wire when None
        id: Request id; generated with ``id_generator`` when None
        id_generator: Source of ids for requests built without one

    Returns:
        Request model

    Raises:
        ValueError: No id was given and there is no generator to make one
    """
    if id is None:
        if id_generator is None:
            raise ValueError("create_request needs an id or an id_generator")
        request_id = id_generator()
    else:
        request_id = normalize_id(id)
    return JsonRpcRequest(method=method, params=params, id=request_id)


def create_notification(method: str, params: Any = None) -> JsonRpcRequest:
    """Create a JSON-RPC notification (a request that never carries an id)."""
    return JsonRpcRequest(method=method, params=params)


def create_response(
    id: Any,
    result: Any = None,
    error: Any = None,
) -> JsonRpcResponse:
    """
    Create a JSON-RPC response.

    A truthy ``error`` produces an error response (converted with
    ``JsonRpcError.convert``) and ``result`` is dropped. Otherwise a success
    response is built; only a ``None`` result is emitted as ``null``, other
    falsy results (``0``, ``False``, ``""``) are kept as they are.

    Args:
        id: Originating request id; None when it is unknown (e.g. parse failure)
        result: Method result
        error: Exception or arbitrary failure value

    Returns:
        Response model
    """
    request_id = normalize_id(id)
    if error:
        return JsonRpcResponse(
            id=request_id,
            error=JsonRpcError.convert(error).to_error_object(),
        )
    return JsonRpcResponse(id=request_id, result=result)


def create_error_response(id: Any, error: Any) -> JsonRpcResponse:
    """Shortcut for ``create_response(id, None, error)``."""
    return create_response(id, None, error)


def encode(message: BaseModel | Sequence[BaseModel]) -> str:
    """
    Serialize a message, or a batch of messages, to JSON text.

    Raises:
        pydantic_core.PydanticSerializationError: A value in the message
            cannot be represented as JSON
    """
    if isinstance(message, BaseModel):
        return json.dumps(message.model_dump(mode="json"))
    return json.dumps([item.model_dump(mode="json") for item in message])
