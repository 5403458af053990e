"""
Exceptions raised by the span collector.

Failures of background sends are only logged. Callers see exceptions from
collect() after close, from flush(), and from close() when the final drain fails.
"""

from typing import Optional


class CollectorError(Exception):
    """Base class for all collector errors."""


class CollectorClosedError(CollectorError):
    """The collector has been closed and no longer accepts spans."""


class FlushError(CollectorError):
    """A flush attempt failed. The spans it covered were put back in the buffer."""

    def __init__(self, message: str, span_count: int = 0):
        super().__init__(message)
        self.span_count = span_count


class EncodeError(FlushError):
    """The serializer could not produce a payload."""


class TransportError(FlushError):
    """Network failure or non-2xx response. status_code is None for network errors."""

    def __init__(self, message: str, span_count: int = 0, status_code: Optional[int] = None):
        super().__init__(message, span_count)
        self.status_code = status_code


class ShutdownError(CollectorError):
    """The final drain in close() failed. The FlushError is chained as __cause__."""
