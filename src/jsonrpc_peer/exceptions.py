"""Protocol layer exceptions.

``JsonRpcError`` is the exception form of a JSON-RPC 2.0 error object. It is
raised by handlers to report protocol errors to the remote side, raised by
``JsonRpcPeer.call`` when the remote side answers with an error, and used to
normalize arbitrary failures before they are written to the wire.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonrpc_peer.models.jsonrpc import ErrorObject, JsonRpcErrorCode

_DEFAULT_MESSAGES: dict[int, str] = {
    JsonRpcErrorCode.PARSE_ERROR: "Parse error",
    JsonRpcErrorCode.INVALID_REQUEST: "Invalid Request",
    JsonRpcErrorCode.METHOD_NOT_FOUND: "Method not found",
    JsonRpcErrorCode.INVALID_PARAMS: "Invalid params",
    JsonRpcErrorCode.INTERNAL_ERROR: "Internal error",
}


def is_server_error(code: int) -> bool:
    """Check whether ``code`` lies in the reserved server error band."""
    return JsonRpcErrorCode.SERVER_ERROR_MIN <= code <= JsonRpcErrorCode.SERVER_ERROR_MAX


def error_message_for(code: int) -> str:
    """Return the default message for an error code.

    Args:
        code: JSON-RPC error code

    Returns:
        Standard message for predefined codes, ``"Server error"`` for the
        reserved server band and ``"Unknown Error"`` for everything else

    Example:
        >>> error_message_for(-32601)
        'Method not found'
        >>> error_message_for(-32050)
        'Server error'
    """
    if code in _DEFAULT_MESSAGES:
        return _DEFAULT_MESSAGES[code]
    if is_server_error(code):
        return "Server error"
    return "Unknown Error"


def _is_error_code(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class JsonRpcError(Exception):
    """Exception compatible with the JSON-RPC 2.0 error object.

    Args:
        code: JSON-RPC error code (default: Internal error)
        message: Human-readable error description; derived from ``code``
            when omitted or empty
        data: Additional error data (optional, omitted from the wire if None)

    Attributes:
        code: JSON-RPC error code
        message: Error message
        data: Additional error information (or None)

    Example:
        >>> error = JsonRpcError(JsonRpcErrorCode.METHOD_NOT_FOUND)
        >>> error.message
        'Method not found'
    """

    def __init__(
        self,
        code: int = JsonRpcErrorCode.INTERNAL_ERROR,
        message: str | None = None,
        data: Any = None,
    ) -> None:
        code = int(code)
        message = message or error_message_for(code)
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"

    def to_error_object(self) -> ErrorObject:
        """Project this exception onto the wire error object.

        Returns:
            ErrorObject whose ``data`` key is left out when ``data`` is None
        """
        return ErrorObject(code=self.code, message=self.message, data=self.data)

    @classmethod
    def from_error_object(cls, error: Any) -> JsonRpcError:
        """Rebuild an exception from an inbound error object.

        Accepts the loosely-typed value found under a response's ``error``
        key. Anything that is not a mapping is handed to :meth:`convert`.
        """
        if isinstance(error, ErrorObject):
            return JsonRpcError(error.code, error.message, error.data)
        if isinstance(error, Mapping):
            code = error.get("code")
            message = error.get("message")
            return JsonRpcError(
                code if _is_error_code(code) else JsonRpcErrorCode.INTERNAL_ERROR,
                message if isinstance(message, str) else None,
                error.get("data"),
            )
        return JsonRpcError.convert(error)

    @classmethod
    def convert(cls, error: Any) -> JsonRpcError:
        """Normalize an arbitrary failure into a ``JsonRpcError``.

        ``JsonRpcError`` instances are returned unchanged. Other exceptions
        contribute their ``code`` (when it is an int), ``message`` and
        ``data`` attributes if they carry them, falling back to ``str(error)``
        for the message and Internal error for the code. Any other value is
        stringified into the message. This method never raises.

        Args:
            error: Exception or arbitrary value

        Returns:
            Equivalent ``JsonRpcError``
        """
        if isinstance(error, JsonRpcError):
            return error

        converted = JsonRpcError()
        try:
            if isinstance(error, BaseException):
                code = getattr(error, "code", None)
                if _is_error_code(code):
                    converted.code = code
                message = getattr(error, "message", None)
                if not isinstance(message, str) or not message:
                    message = str(error)
                if message:
                    converted.message = message
                data = getattr(error, "data", None)
                if data:
                    converted.data = data
            elif isinstance(error, Mapping) and "message" in error:
                return JsonRpcError.from_error_object(error)
            else:
                converted.message = str(error)
        except Exception:
            converted.message = repr(error)
        converted.args = (converted.message,)
        return converted


class ParseError(JsonRpcError):
    """Invalid JSON was received.

    Error code: -32700
    """

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(JsonRpcErrorCode.PARSE_ERROR, message, data)


class InvalidRequestError(JsonRpcError):
    """The JSON sent is not a valid request object.

    Error code: -32600
    """

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(JsonRpcErrorCode.INVALID_REQUEST, message, data)


class MethodNotFoundError(JsonRpcError):
    """The method does not exist or is not available.

    Error code: -32601

    Example:
        >>> raise MethodNotFoundError(data={"method": "subtract"})
    """

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(JsonRpcErrorCode.METHOD_NOT_FOUND, message, data)


class InvalidParamsError(JsonRpcError):
    """Invalid method parameters.

    Error code: -32602. The peer never raises it on its own; handlers and
    ``MethodRegistry`` raise it when the parameters they receive do not fit.
    """

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(JsonRpcErrorCode.INVALID_PARAMS, message, data)


class InternalError(JsonRpcError):
    """Internal JSON-RPC error.

    Error code: -32603
    """

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(JsonRpcErrorCode.INTERNAL_ERROR, message, data)


class CallTimeoutError(TimeoutError):
    """No response arrived for an outbound call in time.

    Local only: this error is never written to the wire. The remote side is
    not told about the timeout, so whether it processed the request is
    unknown.

    Attributes:
        request: Serialized request that timed out
    """

    def __init__(self, request: str) -> None:
        super().__init__(f"RPC response timed out. ({request})")
        self.request = request


class EndResponseError(Exception):
    """Raised by a method handler to finish without sending any response.

    Equivalent to returning ``NO_RESPONSE`` from the handler.
    """
