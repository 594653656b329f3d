"""
JSON-RPC 2.0 Peer

Correlation and dispatch engine. A peer sends requests and notifications
through an integrator-supplied ``sender`` and receives raw inbound text via
``receive``. Inbound responses settle the matching outstanding call; inbound
requests are handed to the ``method_handler`` and answered through the same
``sender``. The peer never touches a transport itself.

All state lives on one asyncio event loop. The correlation table is mutated
only by ``call`` (insert), ``correlate``, the call timer and sender failures
(remove + settle); whichever removes an entry first settles it and the others
become no-ops.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

import structlog

from jsonrpc_peer.config import PeerSettings, get_settings
from jsonrpc_peer.exceptions import (
    CallTimeoutError,
    EndResponseError,
    InternalError,
    InvalidRequestError,
    JsonRpcError,
    MethodNotFoundError,
)
from jsonrpc_peer.metrics import CallOutcome, InboundKind, PeerMetrics
from jsonrpc_peer.models.jsonrpc import (
    JsonRpcRequest,
    JsonRpcResponse,
    NoResponse,
    RequestId,
)
from jsonrpc_peer.services import builders
from jsonrpc_peer.services.ids import IdStrategy, make_id_generator
from jsonrpc_peer.services.parser import ParsedMessage, is_response_shaped, parse

logger = structlog.get_logger()

# Delivers one serialized message; may return an awaitable
Sender = Callable[[str], Union[Awaitable[Any], None]]

# (method, params, id) -> result, awaitable result, or NoResponse
MethodHandler = Callable[[str, Any, Union[RequestId, None]], Any]

Reply = Union[JsonRpcResponse, list[JsonRpcResponse], None]


@dataclass
class PendingCall:
    """An outbound call waiting for its response."""

    id: RequestId
    message: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None


class JsonRpcPeer:
    """
    Transport-agnostic JSON-RPC 2.0 client and server in one object.

    Provides:
    - Outbound calls resolved by ID-correlated inbound responses
    - Outbound notifications
    - Inbound request dispatch to a single method handler
    - Uniform handling of single and batch messages
    - Per-call timeouts

    Args:
        sender: Callable that delivers a serialized message; required before
            ``call``, ``notice`` or ``receive`` is used
        method_handler: ``(method, params, id)`` callable serving inbound
            requests; without one every request gets Method not found
        timeout: Call timeout in milliseconds (0 or less disables it);
            defaults to ``PeerSettings.timeout_ms``
        id_strategy: ``"sequential"`` or ``"uuid"``; defaults to
            ``PeerSettings.id_strategy``
        settings: Settings to use instead of the environment-loaded ones
        metrics: Prometheus collectors; created automatically when
            ``settings.enable_metrics`` is set

    Example:
        >>> peer = JsonRpcPeer(sender=websocket.send_text, method_handler=registry)
        >>> result = await peer.call("subtract", [42, 23])
    """

    def __init__(
        self,
        sender: Sender | None = None,
        method_handler: MethodHandler | None = None,
        *,
        timeout: float | None = None,
        id_strategy: IdStrategy | None = None,
        settings: PeerSettings | None = None,
        metrics: PeerMetrics | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.sender = sender
        self.method_handler = method_handler
        self.timeout = settings.timeout_ms if timeout is None else timeout
        self._id_generator = make_id_generator(id_strategy or settings.id_strategy)
        if metrics is None and settings.enable_metrics:
            metrics = PeerMetrics()
        self.metrics = metrics

        self._outstanding_calls: dict[RequestId, PendingCall] = {}
        self._send_tasks: set[asyncio.Future[Any]] = set()

    # ========================================================================
    # Outbound
    # ========================================================================

    async def call(self, method: str, params: Any = None, id: RequestId | None = None) -> Any:
        """
        Send a request and wait for its response.

        The call is registered before the sender runs, so a response that
        arrives while the sender is still busy is not lost.

        Args:
            method: Method name
            params: Method parameters
            id: Request id; generated when None

        Returns:
            The ``result`` of the matching response

        Raises:
            JsonRpcError: The remote side answered with an error
            CallTimeoutError: No response within ``timeout`` milliseconds;
                the remote side may or may not have processed the request
            ValueError: A call with the same id is already outstanding
            Exception: Whatever the sender raised
        """
        request = self.create_request(method, params, id)
        if request.id in self._outstanding_calls:
            raise ValueError(f"Request id already outstanding: {request.id!r}")
        message = builders.encode(request)

        loop = asyncio.get_running_loop()
        pending = PendingCall(id=request.id, message=message, future=loop.create_future())
        self._outstanding_calls[pending.id] = pending
        self._update_outstanding_gauge()

        logger.debug("Sending JSON-RPC request", method=method, request_id=pending.id)

        try:
            try:
                sent = self.sender(message)
            except Exception:
                self._record_call(CallOutcome.SEND_FAILED)
                raise

            if inspect.isawaitable(sent):
                task = asyncio.ensure_future(sent)
                self._send_tasks.add(task)
                task.add_done_callback(lambda t: self._on_send_done(pending, t))

            if self.timeout > 0 and not pending.future.done():
                pending.timer = loop.call_later(self.timeout / 1000, self._expire, pending)

            return await pending.future
        finally:
            self._release(pending)

    async def notice(self, method: str, params: Any = None) -> None:
        """
        Send a notification. No id is assigned and no response is expected.

        Raises:
            Exception: Whatever the sender raised
        """
        notification = self.create_notification(method, params)
        logger.debug("Sending JSON-RPC notification", method=method)
        await self._send(builders.encode(notification))
        if self.metrics:
            self.metrics.notifications_sent_total.inc()

    # ========================================================================
    # Inbound
    # ========================================================================

    async def receive(self, message: str | bytes) -> None:
        """
        Process one inbound message and send the reply, if there is one.

        Unparsable input always gets an error reply with ``id: null``.
        Nothing is sent for notifications, responses, or batches that
        produce no replies.

        Raises:
            Exception: Only what the sender raises while sending the reply
        """
        reply = await self.process(message)
        if reply is not None:
            await self._send(reply)

    async def process(self, message: str | bytes) -> str | None:
        """
        Process one inbound message and return the serialized reply.

        Same as ``receive`` without the sending step, for integrators that
        write the reply themselves (e.g. as an HTTP response body).

        Returns:
            JSON reply text, or None when there is nothing to reply
        """
        try:
            reply = await self.dispatch_or_correlate(self.parse(message))
        except Exception as e:
            logger.warning("Rejected JSON-RPC message", error=str(e))
            self._record_inbound(InboundKind.INVALID)
            reply = self._error_response(None, e)

        if reply is None:
            return None
        try:
            return builders.encode(reply)
        except Exception as e:
            logger.error("Failed to encode JSON-RPC reply", error=str(e), exc_info=True)
            return builders.encode(self.create_response(None, None, InternalError()))

    async def dispatch_or_correlate(self, message: ParsedMessage) -> Reply:
        """
        Route a parsed message (single or batch).

        Response-shaped elements settle outstanding calls; every other
        element is dispatched as a request. Batch requests run one after
        another in array order.

        Returns:
            The reply for a single request, the non-empty list of replies
            for a batch, or None
        """
        if not isinstance(message, list):
            if is_response_shaped(message):
                self.correlate(message)
                return None
            return await self.handle_method(message)

        responses: list[JsonRpcResponse] = []
        for element in message:
            if is_response_shaped(element):
                self.correlate(element)
                continue
            response = await self.handle_method(element)
            if response is not None:
                responses.append(response)
        return responses or None

    async def handle_method(self, request: Any) -> JsonRpcResponse | None:
        """
        Invoke the method handler for one inbound request.

        Returns:
            Success response for requests with an id, error response when
            the handler fails (even for notifications), None for successful
            notifications or when the handler opted out of replying
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            request_id = request.get("id") if isinstance(request, dict) else None
            logger.warning("Invalid JSON-RPC request", request_id=request_id)
            self._record_inbound(InboundKind.INVALID)
            return self._error_response(request_id, InvalidRequestError())

        method = request["method"]
        params = request.get("params")
        request_id = request.get("id")
        is_notification = request_id is None
        self._record_inbound(InboundKind.NOTIFICATION if is_notification else InboundKind.REQUEST)

        with structlog.contextvars.bound_contextvars(rpc_method=method, request_id=request_id):
            logger.debug("Processing JSON-RPC request", is_notification=is_notification)
            started = time.perf_counter()
            try:
                if self.method_handler is None:
                    raise MethodNotFoundError(data={"method": method})

                result = self.method_handler(method, params, request_id)
                if inspect.isawaitable(result):
                    result = await result

                if isinstance(result, NoResponse):
                    logger.debug("Handler suppressed the response")
                    return None
                if is_notification:
                    return None

                response = self.create_response(request_id, result)
                # Surface unserializable results as handler failures
                response.model_dump(mode="json")
                return response

            except EndResponseError:
                logger.debug("Handler ended without a response")
                return None

            except JsonRpcError as e:
                logger.info("Method returned JSON-RPC error", code=e.code, error=e.message)
                return self._error_response(request_id, e)

            except Exception as e:
                logger.error("Method execution failed", error=str(e), exc_info=True)
                return self._error_response(request_id, e)

            finally:
                if self.metrics:
                    self.metrics.observe_handler(time.perf_counter() - started)

    def correlate(self, response: dict[str, Any]) -> None:
        """
        Settle the outstanding call matching an inbound response.

        Responses with unknown, already settled or unusable ids are ignored.
        """
        response_id = response.get("id")
        try:
            pending = self._outstanding_calls.get(response_id)
        except TypeError:
            pending = None
        if pending is None or isinstance(response_id, bool):
            logger.debug("No pending call for response", request_id=response_id)
            self._record_inbound(InboundKind.UNMATCHED_RESPONSE)
            return

        self._record_inbound(InboundKind.RESPONSE)
        if not self._take(pending):
            return

        error = response.get("error")
        if error is not None:
            pending.future.set_exception(JsonRpcError.from_error_object(error))
            self._record_call(CallOutcome.ERROR)
        else:
            pending.future.set_result(response.get("result"))
            self._record_call(CallOutcome.RESULT)

    # ========================================================================
    # Builders
    # ========================================================================

    def create_request(
        self, method: str, params: Any = None, id: RequestId | None = None
    ) -> JsonRpcRequest:
        """Create a request, taking the next id from this peer when none is given."""
        return builders.create_request(method, params, id, id_generator=self._id_generator)

    def create_notification(self, method: str, params: Any = None) -> JsonRpcRequest:
        return builders.create_notification(method, params)

    def create_response(self, id: Any, result: Any = None, error: Any = None) -> JsonRpcResponse:
        return builders.create_response(id, result, error)

    parse = staticmethod(parse)
    is_response = staticmethod(is_response_shaped)

    # ========================================================================
    # Introspection
    # ========================================================================

    @property
    def outstanding_calls(self) -> int:
        """Number of calls waiting for a response."""
        return len(self._outstanding_calls)

    def pending_ids(self) -> list[RequestId]:
        return list(self._outstanding_calls)

    # ========================================================================
    # Internals
    # ========================================================================

    async def _send(self, message: str) -> None:
        sent = self.sender(message)
        if inspect.isawaitable(sent):
            await sent

    def _error_response(self, id: Any, error: Any) -> JsonRpcResponse:
        """Build an error response, dropping error data that cannot be encoded."""
        response = self.create_response(id, None, error)
        try:
            response.model_dump(mode="json")
        except Exception as e:
            logger.warning("Dropped unserializable error data", error=str(e))
            converted = JsonRpcError.convert(error)
            response = self.create_response(id, None, JsonRpcError(converted.code, converted.message))
        return response

    def _take(self, pending: PendingCall) -> bool:
        """Remove ``pending`` from the table; True if the caller may settle it."""
        if self._outstanding_calls.get(pending.id) is not pending:
            return False
        del self._outstanding_calls[pending.id]
        if pending.timer is not None:
            pending.timer.cancel()
        self._update_outstanding_gauge()
        return not pending.future.done()

    def _release(self, pending: PendingCall) -> None:
        if self._take(pending):
            pending.future.cancel()
        elif pending.timer is not None:
            pending.timer.cancel()

    def _expire(self, pending: PendingCall) -> None:
        if not self._take(pending):
            return
        logger.warning("JSON-RPC call timed out", request_id=pending.id, timeout_ms=self.timeout)
        pending.future.set_exception(CallTimeoutError(pending.message))
        self._record_call(CallOutcome.TIMEOUT)

    def _on_send_done(self, pending: PendingCall, task: asyncio.Future[Any]) -> None:
        self._send_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None or not self._take(pending):
            return
        logger.warning("Sender failed", request_id=pending.id, error=str(error))
        pending.future.set_exception(error)
        self._record_call(CallOutcome.SEND_FAILED)

    def _update_outstanding_gauge(self) -> None:
        if self.metrics:
            self.metrics.outstanding_calls.set(len(self._outstanding_calls))

    def _record_call(self, outcome: CallOutcome) -> None:
        if self.metrics:
            self.metrics.record_call(outcome)

    def _record_inbound(self, kind: InboundKind) -> None:
        if self.metrics:
            self.metrics.record_inbound(kind)
