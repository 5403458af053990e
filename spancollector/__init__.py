"""
Batching HTTP span collector.

Spans are buffered in memory and sent to a collection endpoint in batches, either when
batch_size spans are waiting or batch_interval seconds have passed. collect() never waits
on the network; close() sends whatever is left.

Set environment variables (all optional if passed as arguments):
    SPANCOLLECTOR_URL: URL of the collection endpoint
    SPANCOLLECTOR_TIMEOUT_SECONDS: Per-request timeout (default: 5)
    SPANCOLLECTOR_BATCH_SIZE: Spans that trigger an immediate send (default: 100)
    SPANCOLLECTOR_BATCH_INTERVAL_SECONDS: Longest wait before a send (default: 1)
    SPANCOLLECTOR_MAX_BACKLOG: Spans buffered before the oldest are dropped (default: 1000)

Example:
    from spancollector import HTTPCollector, JSONSerializer

    with HTTPCollector("http://localhost:9411/spans", serializer=JSONSerializer()) as collector:
        collector.collect({"name": "GET /", "durationMicros": 1200})
"""

from .collector import HTTPCollector, CollectorState
from .config import CollectorConfig
from .exceptions import (
    CollectorError,
    CollectorClosedError,
    FlushError,
    EncodeError,
    TransportError,
    ShutdownError,
)
from .http_utils import RequestsTransport, Transport
from .otel_exporter import CollectorSpanExporter, span_to_dict
from .serializers import JSONSerializer, Payload, Serializer, ThriftListSerializer
from .constants import VERSION

__all__ = [
    "HTTPCollector",
    "CollectorState",
    "CollectorConfig",
    "CollectorError",
    "CollectorClosedError",
    "FlushError",
    "EncodeError",
    "TransportError",
    "ShutdownError",
    "RequestsTransport",
    "Transport",
    "CollectorSpanExporter",
    "span_to_dict",
    "JSONSerializer",
    "Payload",
    "Serializer",
    "ThriftListSerializer",
    "VERSION",
]
