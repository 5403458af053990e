"""
Shared test doubles for the collector tests.
"""

import json
import threading
import time

import pytest

from spancollector.exceptions import TransportError


class RecordingTransport:
    """
    Transport that records every request instead of using the network.
    Bodies are decoded as JSON, so pair it with JSONSerializer.
    """

    def __init__(self, delay: float = 0.0, failures: int = 0):
        self.delay = delay
        self.failures = failures  # number of initial sends that fail
        self.calls = []
        self.batches = []
        self.attempts = 0
        self.active = 0
        self.max_active = 0
        self.started = threading.Event()
        self.closed = False
        self._lock = threading.Lock()

    def send(self, url, body, content_type, timeout):
        with self._lock:
            self.attempts += 1
            attempt = self.attempts
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            if self.delay:
                time.sleep(self.delay)
            if attempt <= self.failures:
                raise TransportError(f"simulated failure #{attempt}", status_code=503)
            with self._lock:
                self.calls.append((url, body, content_type, timeout))
                self.batches.append(json.loads(body))
        finally:
            with self._lock:
                self.active -= 1

    def close(self):
        self.closed = True

    @property
    def delivered(self):
        with self._lock:
            return [span for batch in self.batches for span in batch]

    def wait_for_spans(self, count: int, timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if len(self.delivered) >= count:
                return True
            time.sleep(0.01)
        return len(self.delivered) >= count


@pytest.fixture
def transport():
    return RecordingTransport()
