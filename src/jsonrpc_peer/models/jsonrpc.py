"""
JSON-RPC 2.0 Protocol Models

Wire-exact data models for requests, notifications, responses and error
objects. Inbound traffic is accepted loosely (see ``services.parser``);
everything built from these models is emitted strictly per JSON-RPC 2.0.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

JSONRPC_VERSION = "2.0"

# Auto-generated ids stay within the positive signed 32-bit range
MAX_INT32 = 2147483647

RequestId = Union[int, float, str]


class JsonRpcErrorCode(int, Enum):
    """Standard JSON-RPC 2.0 error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server error range (-32099 to -32000, inclusive)
    SERVER_ERROR_MIN = -32099
    SERVER_ERROR_MAX = -32000


class ErrorObject(BaseModel):
    """JSON-RPC 2.0 error object."""
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Any = Field(None, description="Additional error data")

    @model_serializer
    def _to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"code": int(self.code), "message": str(self.message)}
        if self.data is not None:
            wire["data"] = self.data
        return wire


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object (a notification when ``id`` is None)."""
    jsonrpc: Literal["2.0"] = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    method: str = Field(..., description="Method name to invoke")
    params: Any = Field(None, description="Method parameters")
    id: RequestId | None = Field(None, description="Request identifier (absent for notifications)")

    model_config = ConfigDict(frozen=True)

    @property
    def is_notification(self) -> bool:
        """Check if this is a notification (no response expected)."""
        return self.id is None

    @model_serializer
    def _to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            wire["params"] = self.params
        if self.id is not None:
            wire["id"] = self.id
        return wire


class JsonRpcResponse(BaseModel):
    """
    JSON-RPC 2.0 response object.

    Exactly one of ``result`` / ``error`` is emitted. A success response
    always carries ``result``, serialized as ``null`` when the value is None.
    """
    jsonrpc: Literal["2.0"] = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    result: Any = Field(None, description="Method result (present on success)")
    error: ErrorObject | None = Field(None, description="Error object (present on error)")
    id: RequestId | None = Field(..., description="Request identifier")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_exclusive(self) -> JsonRpcResponse:
        if self.error is not None and self.result is not None:
            raise ValueError("Response cannot have both result and error")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @model_serializer
    def _to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
        if self.error is not None:
            wire["error"] = self.error
        else:
            wire["result"] = self.result
        wire["id"] = self.id
        return wire


@dataclass(frozen=True)
class NoResponse:
    """
    Handler return value meaning "do not reply to this request".

    Handlers that own their reply channel return ``NO_RESPONSE`` (or any
    ``NoResponse`` instance); the peer then skips building a response even
    when the request carried an id.
    """
    reason: str | None = None


NO_RESPONSE = NoResponse()
