"""
Bounded FIFO buffer of spans waiting to be sent. Thread-safe.

Spans are appended at the tail and leave from the head. When the backlog bound is exceeded
the oldest spans are evicted and the count is reported to the diagnostic logger; the producer
is not told.
"""

import logging
import threading
from collections import deque
from typing import Any, Deque, List, Optional

from .constants import LOG_TAG


class SpanBuffer:
    """Ordered, lock-guarded span buffer with drop-oldest eviction."""

    def __init__(self, max_backlog: int, logger: Optional[logging.Logger] = None):
        self.max_backlog = max_backlog
        self._logger = logger or logging.getLogger(LOG_TAG)
        self._spans: Deque[Any] = deque()
        self._lock = threading.Lock()
        self._dropped = 0

    def append(self, span: Any) -> int:
        """Add a span at the tail, evicting from the head if over the backlog. Returns the new size."""
        with self._lock:
            self._spans.append(span)
            self._evict_overflow()
            return len(self._spans)

    def snapshot_length(self) -> int:
        with self._lock:
            return len(self._spans)

    __len__ = snapshot_length

    def take(self) -> List[Any]:
        """
        Atomically remove and return everything buffered, leaving an empty buffer.
        Spans appended afterwards go into the fresh storage, so a later restore() can
        put the taken spans back in front of them without any head-count bookkeeping.
        """
        with self._lock:
            spans, self._spans = self._spans, deque()
        return list(spans)

    def restore(self, spans: List[Any]) -> None:
        """Put spans that failed to send back at the head, then re-apply the backlog bound."""
        if not spans:
            return
        with self._lock:
            self._spans.extendleft(reversed(spans))
            self._evict_overflow()

    @property
    def dropped_count(self) -> int:
        """Total spans evicted since construction."""
        with self._lock:
            return self._dropped

    def _evict_overflow(self) -> None:
        """Must be called within _lock."""
        overflow = len(self._spans) - self.max_backlog
        if overflow <= 0:
            return
        for _ in range(overflow):
            self._spans.popleft()
        self._dropped += overflow
        self._logger.warning(f"Backlog too long ({self.max_backlog} spans max), disposed of {overflow} oldest span(s)")

    def __repr__(self) -> str:
        return f"SpanBuffer(size={len(self)}, max_backlog={self.max_backlog}, dropped={self.dropped_count})"
