"""
Prometheus Metrics for JSON-RPC Peers

Each collector owns its own registry, so any number of peers can live in
one process without duplicate-registration errors.
"""

from __future__ import annotations

from enum import Enum

import structlog
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

logger = structlog.get_logger()


class CallOutcome(str, Enum):
    """How an outbound call ended."""

    RESULT = "result"
    ERROR = "error"
    TIMEOUT = "timeout"
    SEND_FAILED = "send_failed"


class InboundKind(str, Enum):
    """Classification of an inbound element."""

    REQUEST = "request"
    NOTIFICATION = "notification"
    RESPONSE = "response"
    UNMATCHED_RESPONSE = "unmatched_response"
    INVALID = "invalid"


class PeerMetrics:
    """
    Prometheus collectors for one ``JsonRpcPeer``.

    Usage:
        ```python
        metrics = PeerMetrics()
        peer = JsonRpcPeer(sender, handler, metrics=metrics)
        ...
        generate_latest(metrics.registry)
        ```
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize metrics collector.

        Args:
            registry: Prometheus registry (creates new if None)
        """
        self.registry = registry or CollectorRegistry()

        self.calls_total = Counter(
            "jsonrpc_calls_total",
            "Outbound calls by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.notifications_sent_total = Counter(
            "jsonrpc_notifications_sent_total",
            "Outbound notifications",
            registry=self.registry,
        )
        self.inbound_total = Counter(
            "jsonrpc_inbound_total",
            "Inbound messages by kind (batch elements counted individually)",
            ["kind"],
            registry=self.registry,
        )
        self.outstanding_calls = Gauge(
            "jsonrpc_outstanding_calls",
            "Calls waiting for a response",
            registry=self.registry,
        )
        self.handler_duration_seconds = Histogram(
            "jsonrpc_handler_duration_seconds",
            "Method handler execution time in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
            registry=self.registry,
        )

        logger.debug("jsonrpc_metrics_initialized", registry_id=id(self.registry))

    def record_call(self, outcome: CallOutcome) -> None:
        self.calls_total.labels(outcome=outcome.value).inc()

    def record_inbound(self, kind: InboundKind) -> None:
        self.inbound_total.labels(kind=kind.value).inc()

    def observe_handler(self, duration: float) -> None:
        self.handler_duration_seconds.observe(duration)
