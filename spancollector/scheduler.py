"""
Flush scheduling state: the count trigger and the time-trigger deadline.
Not thread-safe on its own; the dispatch loop is its only writer.
"""

import time
from typing import Callable, Optional

from .constants import TICKS_PER_INTERVAL


class FlushScheduler:
    """
    Decides when a flush is due.

    A flush fires when the buffer holds at least batch_size spans, or when the clock passes
    next_deadline. Either way the caller reschedules before launching the send, so a
    count-triggered burst does not also produce an immediate time-triggered flush.
    """

    def __init__(self, batch_size: int, batch_interval: float, clock: Callable[[], float] = time.monotonic):
        self.batch_size = batch_size
        self.batch_interval = batch_interval
        self._clock = clock
        self.next_deadline = 0.0
        self.reschedule()

    @property
    def tick_interval(self) -> float:
        return self.batch_interval / TICKS_PER_INTERVAL

    def reschedule(self, now: Optional[float] = None) -> float:
        if now is None:
            now = self._clock()
        self.next_deadline = now + self.batch_interval
        return self.next_deadline

    def count_reached(self, size: int) -> bool:
        return size >= self.batch_size

    def is_due(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = self._clock()
        return now >= self.next_deadline
