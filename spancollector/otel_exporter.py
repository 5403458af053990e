"""
OpenTelemetry span exporter that feeds an HTTPCollector.
Lets an opentelemetry-sdk TracerProvider deliver spans through the collector's batching.
"""

import logging
from typing import Any, Dict, Sequence

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from .collector import HTTPCollector
from .constants import INSTRUMENTATION_NAME, LOG_TAG, VERSION
from .exceptions import CollectorClosedError, CollectorError

logger = logging.getLogger(LOG_TAG)


def span_to_dict(span: ReadableSpan) -> Dict[str, Any]:
    """Convert ReadableSpan to a serializable format."""
    span_context = span.get_span_context()

    parent_span_id = None
    if span.parent is not None:
        parent_span_id = format(span.parent.span_id, "016x")

    # Get span kind and status code (handle both enum and int)
    span_kind = span.kind
    if hasattr(span_kind, "value"):
        span_kind = span_kind.value
    status_code = span.status.status_code
    if hasattr(status_code, "value"):
        status_code = status_code.value

    return {
        "name": span.name,
        "kind": span_kind,
        "traceId": format(span_context.trace_id, "032x"),
        "spanId": format(span_context.span_id, "016x"),
        "parentSpanId": parent_span_id,
        "traceFlags": int(span_context.trace_flags),
        "startTime": _time_to_tuple(span.start_time),
        "endTime": _time_to_tuple(span.end_time) if span.end_time else None,
        "duration": _time_to_tuple(span.end_time - span.start_time) if span.end_time and span.start_time else None,
        "status": {
            "code": status_code,
            "message": span.status.description,
        },
        "attributes": dict(span.attributes) if span.attributes else {},
        "events": [
            {
                "name": event.name,
                "time": _time_to_tuple(event.timestamp),
                "attributes": dict(event.attributes) if event.attributes else {},
            }
            for event in (span.events or [])
        ],
        "links": [
            {
                "context": {
                    "traceId": format(link.context.trace_id, "032x"),
                    "spanId": format(link.context.span_id, "016x"),
                },
                "attributes": dict(link.attributes) if link.attributes else {},
            }
            for link in (span.links or [])
        ],
        "resource": {
            "attributes": dict(span.resource.attributes) if span.resource and span.resource.attributes else {},
        },
        "instrumentationLibrary": {
            "name": INSTRUMENTATION_NAME,
            "version": VERSION,
        },
    }


def _time_to_tuple(nanoseconds: int) -> tuple:
    """Convert nanoseconds to (seconds, nanoseconds) tuple."""
    seconds = int(nanoseconds // 1_000_000_000)
    nanos = int(nanoseconds % 1_000_000_000)
    return (seconds, nanos)


class CollectorSpanExporter(SpanExporter):
    """
    Hands finished spans to an HTTPCollector as plain dicts.
    Pair it with a JSONSerializer collector, or pass your own converter.

    Example:
        collector = HTTPCollector(url, serializer=JSONSerializer())
        provider.add_span_processor(SimpleSpanProcessor(CollectorSpanExporter(collector)))
    """

    def __init__(self, collector: HTTPCollector, convert=span_to_dict):
        self._collector = collector
        self._convert = convert

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if not spans:
            return SpanExportResult.SUCCESS
        try:
            for span in spans:
                self._collector.collect(self._convert(span))
        except CollectorClosedError:
            logger.warning(f"export: collector is closed, dropping {len(spans)} span(s)")
            return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        try:
            self._collector.flush()
        except CollectorError as e:
            logger.warning(f"force_flush: {e}")
            return False
        return True

    def shutdown(self) -> None:
        try:
            self._collector.close()
        except CollectorError as e:
            logger.error(f"shutdown: {e}")
