"""Transport-agnostic JSON-RPC 2.0 peer.

This package formats, parses and correlates JSON-RPC 2.0 messages with no
knowledge of the transport carrying them. It is responsible for:
- Building strictly-formatted requests, notifications and responses
- Parsing inbound text leniently (single messages and batches)
- Correlating inbound responses with outstanding calls, with timeouts
- Dispatching inbound requests to a method handler
- Normalizing failures into JSON-RPC error objects
"""

from jsonrpc_peer.config import PeerSettings, get_settings
from jsonrpc_peer.exceptions import (
    CallTimeoutError,
    EndResponseError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    JsonRpcError,
    MethodNotFoundError,
    ParseError,
    error_message_for,
)
from jsonrpc_peer.metrics import PeerMetrics
from jsonrpc_peer.models.jsonrpc import (
    JSONRPC_VERSION,
    NO_RESPONSE,
    ErrorObject,
    JsonRpcErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    NoResponse,
)
from jsonrpc_peer.services.builders import (
    create_notification,
    create_request,
    create_response,
    encode,
    normalize_id,
)
from jsonrpc_peer.services.parser import is_response_shaped, parse
from jsonrpc_peer.services.peer import JsonRpcPeer, PendingCall
from jsonrpc_peer.services.registry import MethodRegistry

__version__ = "0.1.0"

__all__ = [
    # Models
    "JSONRPC_VERSION",
    "ErrorObject",
    "JsonRpcErrorCode",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "NoResponse",
    "NO_RESPONSE",
    # Exceptions
    "JsonRpcError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "CallTimeoutError",
    "EndResponseError",
    "error_message_for",
    # Builders and parser
    "create_request",
    "create_notification",
    "create_response",
    "encode",
    "normalize_id",
    "parse",
    "is_response_shaped",
    # Peer
    "JsonRpcPeer",
    "PendingCall",
    "MethodRegistry",
    "PeerSettings",
    "PeerMetrics",
    "get_settings",
]
