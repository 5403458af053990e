"""
Sender: serializes the buffered spans and delivers them in one request.
At most one send runs at a time. Thread-safe.
"""

import logging
import threading
from typing import Optional

from .buffer import SpanBuffer
from .constants import LOG_TAG
from .exceptions import FlushError, EncodeError, TransportError
from .http_utils import Transport
from .serializers import Payload, Serializer


class Sender:
    """
    Delivers the buffer contents through a serializer and a transport.

    send_now() is the synchronous path (manual flush and the final drain).
    trigger() is the fire-and-forget path used by the dispatch loop: it runs send_now() on a
    worker thread, and a trigger that arrives while a send is in flight is folded into one
    follow-up send instead of a second concurrent request.

    Lock ordering: send_lock -> buffer lock. The buffer lock is never held across I/O.
    """

    def __init__(
        self,
        buffer: SpanBuffer,
        serializer: Serializer,
        transport: Transport,
        url: str,
        timeout: float,
        logger: Optional[logging.Logger] = None,
    ):
        self._buffer = buffer
        self._serializer = serializer
        self._transport = transport
        self._url = url
        self._timeout = timeout
        self._logger = logger or logging.getLogger(LOG_TAG)
        self._send_lock = threading.Lock()
        # Guards _in_flight, _rerun, _stopped and _worker
        self._state_lock = threading.Lock()
        self._in_flight = False
        self._rerun = False
        self._stopped = False
        self._worker: Optional[threading.Thread] = None

    @property
    def in_flight(self) -> bool:
        with self._state_lock:
            return self._in_flight

    def send_now(self) -> int:
        """
        Send everything currently buffered. Returns the number of spans delivered.

        The buffer is swapped out under its lock, so spans collected during the request
        land in fresh storage. On failure the taken spans go back in front of them and
        the FlushError is raised.
        """
        with self._send_lock:
            spans = self._buffer.take()
            if not spans:
                self._logger.debug(f"send_now: no spans to send")
                return 0

            self._logger.debug(f"send_now: sending {len(spans)} span(s) to {self._url}")
            try:
                self._deliver(spans)
            except FlushError as error:
                error.span_count = len(spans)
                self._logger.error(f"Failed to send {len(spans)} span(s), keeping them for the next flush: {error}")
                self._buffer.restore(spans)
                raise
            self._logger.debug(f"send_now: successfully sent {len(spans)} span(s)")
            return len(spans)

    def _deliver(self, spans: list) -> None:
        try:
            payload: Payload = self._serializer.serialize(spans)
        except EncodeError:
            raise
        except Exception as e:
            raise EncodeError(f"Serializer failed: {type(e).__name__}: {e}", span_count=len(spans)) from e

        try:
            self._transport.send(self._url, payload.body, payload.content_type, self._timeout)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Transport failed: {type(e).__name__}: {e}", span_count=len(spans)) from e

    def trigger(self) -> None:
        """Launch a send in the background without waiting for it."""
        with self._state_lock:
            if self._stopped:
                return
            if self._in_flight:
                self._rerun = True
                self._logger.debug(f"trigger: send already in flight, will send again when it completes")
                return
            self._in_flight = True
            worker = threading.Thread(target=self._flush_worker, daemon=True, name="SpanCollector-Flush")
            self._worker = worker

        try:
            worker.start()
        except RuntimeError as e:
            # e.g. "can't create new thread at interpreter shutdown"
            with self._state_lock:
                self._in_flight = False
                self._rerun = False
            self._logger.warning(f"trigger: could not start flush thread, spans stay buffered: {e}")

    def _flush_worker(self) -> None:
        while True:
            try:
                self.send_now()
            except FlushError as e:
                self._logger.debug(f"Background flush failed (already reported): {e}")
            except Exception as e:
                self._logger.error(f"Unexpected error in background flush: {e}", exc_info=True)

            with self._state_lock:
                if not self._rerun or self._stopped:
                    self._in_flight = False
                    self._rerun = False
                    return
                self._rerun = False

    def stop(self) -> None:
        """Stop accepting triggers and wait for any background send to finish."""
        with self._state_lock:
            self._stopped = True
            self._rerun = False
            worker = self._worker
        if worker is not None and worker.is_alive() and worker is not threading.current_thread():
            worker.join()
