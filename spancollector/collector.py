"""
HTTP span collector: buffers spans and sends them in batches to a collection endpoint.
Batches go out when batch_size spans are waiting or batch_interval has passed, whichever comes first.
Call close() before process exit to send what is left. Thread-safe.
"""

import logging
import queue
import threading
import time
from enum import Enum
from typing import Any, Callable, NamedTuple, Optional

from .buffer import SpanBuffer
from .config import CollectorConfig
from .exceptions import CollectorClosedError, FlushError, ShutdownError
from .http_utils import RequestsTransport, Transport
from .scheduler import FlushScheduler
from .sender import Sender
from .serializers import Serializer, ThriftListSerializer


class CollectorState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class _Message(NamedTuple):
    kind: str
    span: Any
    done: threading.Event


_SPAN = "span"
_FLUSH = "flush"
_CLOSE = "close"


class HTTPCollector:
    """
    Forwards spans to an HTTP endpoint without blocking the caller on the network.

    A single dispatch thread owns all scheduling: it appends incoming spans to the buffer,
    checks the count and time triggers, and launches background sends. collect() blocks only
    until that thread has buffered the span. Under sustained overload the buffer keeps the most
    recent max_backlog spans and drops the oldest.

    Example:
        collector = HTTPCollector("http://localhost:9411/api/v1/spans", batch_size=50)
        collector.collect(encoded_span)
        ...
        collector.close()
    """

    def __init__(
        self,
        url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        timeout: Optional[float] = None,
        batch_size: Optional[int] = None,
        max_backlog: Optional[int] = None,
        batch_interval: Optional[float] = None,
        serializer: Optional[Serializer] = None,
        transport: Optional[Transport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Create the collector and start its dispatch thread.

        Args:
            url: Collection endpoint (defaults to SPANCOLLECTOR_URL, then the OTLP endpoint env vars)
            logger: Diagnostic sink for evictions and failed sends (default: the "SpanCollector" logger)
            timeout: Per-request timeout in seconds (default 5, or SPANCOLLECTOR_TIMEOUT_SECONDS)
            batch_size: Span count that triggers an immediate send (default 100, or SPANCOLLECTOR_BATCH_SIZE)
            max_backlog: Maximum spans buffered before the oldest are dropped (default 1000, or SPANCOLLECTOR_MAX_BACKLOG)
            batch_interval: Longest a span waits before a send in seconds (default 1, or SPANCOLLECTOR_BATCH_INTERVAL_SECONDS)
            serializer: Payload encoder (default: Thrift binary list of pre-encoded spans)
            transport: Request sender (default: requests-based POST)
            clock: Monotonic clock used for the time trigger
        """
        self.config = CollectorConfig.create(
            url=url,
            logger=logger,
            timeout=timeout,
            batch_size=batch_size,
            max_backlog=max_backlog,
            batch_interval=batch_interval,
        )
        self._logger = self.config.logger
        self._buffer = SpanBuffer(self.config.max_backlog, self._logger)
        self._scheduler = FlushScheduler(self.config.batch_size, self.config.batch_interval, clock)
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else RequestsTransport()
        self._sender = Sender(
            self._buffer,
            serializer if serializer is not None else ThriftListSerializer(),
            self._transport,
            self.config.url,
            self.config.timeout,
            self._logger,
        )

        self._inbox: "queue.Queue[_Message]" = queue.Queue()
        # Guards _state and every put into _inbox, so nothing can be queued behind the close message
        self._state_lock = threading.Lock()
        self._state = CollectorState.RUNNING
        self._stopped = threading.Event()
        # Manual flushes still sending; the drain waits for them so no request outlives close()
        self._active_flushes = 0
        self._flushes_done = threading.Condition(self._state_lock)
        self._final_error: Optional[FlushError] = None

        self._logger.info(f"Initializing HTTPCollector: url={self.config.url}, batch_size={self.config.batch_size}, "
            f"batch_interval={self.config.batch_interval}s, max_backlog={self.config.max_backlog}, "
            f"timeout={self.config.timeout}s"
        )
        self._thread = threading.Thread(target=self._loop, daemon=True, name="SpanCollector-Dispatch")
        self._thread.start()

    @property
    def state(self) -> CollectorState:
        with self._state_lock:
            return self._state

    @property
    def pending_count(self) -> int:
        """Spans buffered and not yet handed to a send."""
        return self._buffer.snapshot_length()

    @property
    def dropped_count(self) -> int:
        """Spans evicted because the backlog was full."""
        return self._buffer.dropped_count

    def collect(self, span: Any) -> None:
        """
        Queue one span for delivery. Returns once the dispatch thread has buffered it;
        never waits for the network. Delivery failures are logged, not raised here.

        Raises:
            CollectorClosedError: if close() has been called.
        """
        accepted = self._post(_SPAN, span)
        accepted.wait()

    def flush(self) -> None:
        """
        Send everything buffered now and wait for the result.
        Waits for an in-flight background send first.

        Raises:
            CollectorClosedError: if close() has been called.
            FlushError: if the send failed (the spans stay buffered).
        """
        rescheduled = self._post(_FLUSH, None)
        try:
            rescheduled.wait()
            self._sender.send_now()
        finally:
            with self._state_lock:
                self._active_flushes -= 1
                self._flushes_done.notify_all()

    def close(self) -> None:
        """
        Stop the collector: wait for any in-flight send, send what remains, stop the dispatch thread.
        Safe to call more than once; later calls report the same outcome.

        Raises:
            ShutdownError: if the final send failed. The FlushError is its __cause__.
        """
        with self._state_lock:
            first_call = self._state is CollectorState.RUNNING
            if first_call:
                self._state = CollectorState.DRAINING
                self._inbox.put(_Message(_CLOSE, None, self._stopped))

        if first_call:
            self._logger.info(f"close: draining {self._buffer.snapshot_length()} buffered span(s)")
        self._stopped.wait()
        if first_call:
            self._thread.join()
            self._logger.info(f"close: completed")

        if self._final_error is not None:
            raise ShutdownError(f"Final flush failed: {self._final_error}") from self._final_error

    def __enter__(self) -> "HTTPCollector":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _post(self, kind: str, span: Any) -> threading.Event:
        done = threading.Event()
        with self._state_lock:
            if self._state is not CollectorState.RUNNING:
                raise CollectorClosedError(f"HTTPCollector is {self._state.value}, cannot {kind}")
            if kind == _FLUSH:
                self._active_flushes += 1
            self._inbox.put(_Message(kind, span, done))
        return done

    def _loop(self) -> None:
        """Dispatch thread: the only place flushes are scheduled."""
        try:
            self._dispatch()
        except Exception as e:
            self._logger.error(f"Dispatch loop failed, stopping collector: {e}", exc_info=True)
            with self._state_lock:
                if self._state is CollectorState.RUNNING:
                    self._state = CollectorState.DRAINING
            self._release_waiting()
            self._drain()

    def _dispatch(self) -> None:
        tick_interval = self._scheduler.tick_interval
        next_tick = time.monotonic() + tick_interval
        self._logger.debug(f"Dispatch loop started, tick interval {tick_interval}s")

        while True:
            try:
                message = self._inbox.get(timeout=max(0.0, next_tick - time.monotonic()))
            except queue.Empty:
                message = None

            if message is not None:
                if message.kind == _CLOSE:
                    self._drain()
                    return
                try:
                    self._handle(message)
                except Exception as e:
                    self._logger.error(f"Error handling {message.kind} in dispatch loop: {e}", exc_info=True)
                finally:
                    message.done.set()

            now = time.monotonic()
            if now >= next_tick:
                next_tick += tick_interval
                if next_tick <= now:
                    next_tick = now + tick_interval
                try:
                    self._on_tick()
                except Exception as e:
                    self._logger.error(f"Error on dispatch tick: {e}", exc_info=True)

    def _handle(self, message: _Message) -> None:
        if message.kind == _SPAN:
            size = self._buffer.append(message.span)
            if self._scheduler.count_reached(size):
                self._scheduler.reschedule()
                self._logger.debug(f"Batch size reached ({size} spans), triggering send")
                self._sender.trigger()
        elif message.kind == _FLUSH:
            # The caller sends synchronously once the deadline has moved
            self._scheduler.reschedule()

    def _on_tick(self) -> None:
        if not self._scheduler.is_due():
            return
        self._scheduler.reschedule()
        if self._buffer.snapshot_length():
            self._logger.debug(f"Batch interval elapsed, triggering send")
            self._sender.trigger()

    def _release_waiting(self) -> None:
        """Unblock producers whose messages will never be handled."""
        while True:
            try:
                message = self._inbox.get_nowait()
            except queue.Empty:
                return
            if message.kind != _CLOSE:
                message.done.set()

    def _drain(self) -> None:
        """Final synchronous flush, then STOPPED."""
        with self._flushes_done:
            self._flushes_done.wait_for(lambda: self._active_flushes == 0)
        try:
            self._sender.stop()
            self._sender.send_now()
        except FlushError as error:
            self._final_error = error
        except Exception as e:
            self._logger.error(f"Unexpected error during final flush: {e}", exc_info=True)
            self._final_error = FlushError(f"Unexpected error during final flush: {e}")
        finally:
            if self._owns_transport:
                self._transport.close()
            with self._state_lock:
                self._state = CollectorState.STOPPED
            self._stopped.set()
